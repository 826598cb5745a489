"""Net worth aggregation and labeled breakdown."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional

from ledger_core.config import EngineConfig
from ledger_core.models import AssetCategory, Character, LifestyleItem, whole_months_between

ZERO = Decimal("0")


@dataclass(frozen=True)
class NetWorthBreakdown:
    cash: Decimal
    equities: Decimal
    crypto: Decimal
    bonds: Decimal
    other_investments: Decimal
    property_equity: Decimal
    property_gross_value: Decimal
    property_debt: Decimal
    lifestyle_residual: Decimal
    total: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            "cash": str(self.cash),
            "equities": str(self.equities),
            "crypto": str(self.crypto),
            "bonds": str(self.bonds),
            "other_investments": str(self.other_investments),
            "property_equity": str(self.property_equity),
            "property_gross_value": str(self.property_gross_value),
            "property_debt": str(self.property_debt),
            "lifestyle_residual": str(self.lifestyle_residual),
            "total": str(self.total),
        }

    @staticmethod
    def from_dict(data: Dict[str, str]) -> "NetWorthBreakdown":
        return NetWorthBreakdown(
            cash=Decimal(data["cash"]),
            equities=Decimal(data["equities"]),
            crypto=Decimal(data["crypto"]),
            bonds=Decimal(data["bonds"]),
            other_investments=Decimal(data["other_investments"]),
            property_equity=Decimal(data["property_equity"]),
            property_gross_value=Decimal(data["property_gross_value"]),
            property_debt=Decimal(data["property_debt"]),
            lifestyle_residual=Decimal(data["lifestyle_residual"]),
            total=Decimal(data["total"]),
        )


def residual_value(item: LifestyleItem, as_of: date, config: EngineConfig) -> Decimal:
    """Depreciated value of a permanently owned item; temporary items are worth zero."""

    if item.is_temporary:
        return ZERO
    if item.price <= 0:
        return item.maintenance_cost * config.subscription_value_months
    months = whole_months_between(item.acquired_on, as_of)
    depreciation = min(config.max_depreciation, config.depreciation_per_month * months)
    return item.price * (1 - depreciation)


def lifestyle_residual(
    items: Iterable[LifestyleItem], as_of: date, config: EngineConfig
) -> Decimal:
    return sum((residual_value(item, as_of, config) for item in items), ZERO)


class NetWorthCalculator:
    """Stateless aggregation of every value source into net worth."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self._config = config or EngineConfig()

    def breakdown(self, character: Character, as_of: Optional[date] = None) -> NetWorthBreakdown:
        as_of = as_of or character.current_date
        by_category = {category: ZERO for category in AssetCategory}
        for asset in character.assets.values():
            by_category[asset.category] += asset.market_value

        gross = sum((prop.current_value for prop in character.properties.values()), ZERO)
        debt = sum((prop.loan_amount for prop in character.properties.values()), ZERO)
        residual = lifestyle_residual(character.lifestyle_items.values(), as_of, self._config)
        investments = sum(by_category.values(), ZERO)
        total = character.cash + investments + (gross - debt) + residual

        return NetWorthBreakdown(
            cash=character.cash,
            equities=by_category[AssetCategory.EQUITY],
            crypto=by_category[AssetCategory.CRYPTO],
            bonds=by_category[AssetCategory.BOND],
            other_investments=by_category[AssetCategory.OTHER],
            property_equity=gross - debt,
            property_gross_value=gross,
            property_debt=debt,
            lifestyle_residual=residual,
            total=total,
        )

    def calculate(self, character: Character, as_of: Optional[date] = None) -> Decimal:
        return self.breakdown(character, as_of).total

    def recompute(self, character: Character) -> Decimal:
        """Refresh the derived net worth field on the aggregate."""

        character.net_worth = self.calculate(character)
        return character.net_worth
