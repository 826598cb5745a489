from .engine import CommandResult, SimulationEngine, create_character
from .events import EventBus, StateChanged
from .expenses import MonthlyStatement, monthly_statement, progressive_tax
from .lifestyle import LifestyleItemLifecycle
from .networth import NetWorthBreakdown, NetWorthCalculator
from .properties import PropertyLifecycleManager, SaleSettlement, amortized_payment
from .ticks import TickReport, TimeTickProcessor

__all__ = [
    "CommandResult",
    "EventBus",
    "LifestyleItemLifecycle",
    "MonthlyStatement",
    "NetWorthBreakdown",
    "NetWorthCalculator",
    "PropertyLifecycleManager",
    "SaleSettlement",
    "SimulationEngine",
    "StateChanged",
    "TickReport",
    "TimeTickProcessor",
    "amortized_payment",
    "create_character",
    "monthly_statement",
    "progressive_tax",
]
