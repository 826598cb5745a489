from .config import EngineConfig, SaleTier, TaxBracket, load_config
from .errors import (
    AlreadyOwnedError,
    ConflictError,
    ErrorKind,
    InsufficientFundsError,
    InvalidInputError,
    NotFoundError,
    PrerequisiteNotMetError,
    SimulationError,
)
from .ledger import Ledger
from .models import (
    Asset,
    AssetCategory,
    Attributes,
    BasicNeeds,
    Character,
    HousingType,
    ItemEffects,
    Job,
    LifestyleItem,
    LifestyleListing,
    Property,
    PropertyListing,
    RecurringEntry,
    RecurringKind,
    VehicleType,
)
from .portfolio import Portfolio

__all__ = [
    "AlreadyOwnedError",
    "Asset",
    "AssetCategory",
    "Attributes",
    "BasicNeeds",
    "Character",
    "ConflictError",
    "EngineConfig",
    "ErrorKind",
    "HousingType",
    "InsufficientFundsError",
    "InvalidInputError",
    "ItemEffects",
    "Job",
    "Ledger",
    "LifestyleItem",
    "LifestyleListing",
    "NotFoundError",
    "Portfolio",
    "PrerequisiteNotMetError",
    "Property",
    "PropertyListing",
    "RecurringEntry",
    "RecurringKind",
    "SaleTier",
    "SimulationError",
    "TaxBracket",
    "VehicleType",
    "load_config",
]
