"""Domain schemas for the character aggregate and its holdings."""

from dataclasses import dataclass, field, fields, replace
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
import math
from typing import Dict, Mapping, Optional, Tuple, Union

ATTRIBUTE_MIN = 0.0
ATTRIBUTE_MAX = 100.0

Number = Union[Decimal, int, float, str]


class AssetCategory(Enum):
    EQUITY = "equity"
    BOND = "bond"
    CRYPTO = "crypto"
    OTHER = "other"


class HousingType(Enum):
    NONE = "none"
    SHARED = "shared"
    RENTED = "rented"
    OWNED = "owned"
    LUXURY = "luxury"


class VehicleType(Enum):
    NONE = "none"
    BICYCLE = "bicycle"
    ECONOMY = "economy"
    STANDARD = "standard"
    LUXURY = "luxury"
    PREMIUM = "premium"


class RecurringKind(Enum):
    INCOME = "income"
    EXPENSE = "expense"


def clamp(value: float, low: float = ATTRIBUTE_MIN, high: float = ATTRIBUTE_MAX) -> float:
    if value != value:
        return low
    return max(low, min(high, value))


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {value!r}") from exc


def is_valid_amount(value: Decimal) -> bool:
    """True for finite, non-negative amounts."""

    return value.is_finite() and value >= 0


def safe_amount(value: Number) -> Decimal:
    """Coerce negative, NaN or infinite amounts to zero."""

    try:
        amount = to_decimal(value)
    except ValueError:
        return Decimal("0")
    if not is_valid_amount(amount):
        return Decimal("0")
    return amount


def safe_float(value: float, default: float = 0.0) -> float:
    if value is None or not math.isfinite(value):
        return default
    return value


def whole_months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end, floored at zero."""

    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


@dataclass(frozen=True)
class Attributes:
    """Character attributes, each held within [0, 100]."""

    happiness: float = 50.0
    prestige: float = 0.0
    stress: float = 20.0
    health: float = 70.0
    social_connections: float = 30.0
    environmental_impact: float = 0.0
    skills: float = 10.0

    def __post_init__(self) -> None:
        for item in fields(self):
            object.__setattr__(self, item.name, clamp(float(getattr(self, item.name))))

    def apply(self, changes: Mapping[str, float]) -> Tuple["Attributes", Dict[str, float]]:
        """Return updated attributes plus the change actually applied per field."""

        updates: Dict[str, float] = {}
        applied: Dict[str, float] = {}
        for name, delta in changes.items():
            if not hasattr(self, name):
                raise KeyError(f"Unknown attribute: {name}")
            current = getattr(self, name)
            target = clamp(current + safe_float(delta))
            updates[name] = target
            applied[name] = target - current
        return replace(self, **updates), applied

    def to_dict(self) -> Dict[str, float]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


@dataclass(frozen=True)
class BasicNeeds:
    hunger: float = 80.0
    thirst: float = 80.0
    energy: float = 80.0
    comfort: float = 80.0

    def __post_init__(self) -> None:
        for item in fields(self):
            object.__setattr__(self, item.name, clamp(float(getattr(self, item.name))))

    def apply(self, changes: Mapping[str, float]) -> "BasicNeeds":
        updates = {
            name: clamp(getattr(self, name) + safe_float(delta))
            for name, delta in changes.items()
        }
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, float]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


@dataclass(frozen=True)
class Asset:
    asset_id: str
    name: str
    category: AssetCategory
    quantity: Decimal
    purchase_price: Decimal
    current_price: Decimal

    @property
    def market_value(self) -> Decimal:
        return self.quantity * self.current_price


@dataclass(frozen=True)
class PropertyListing:
    """Catalog entry for a purchasable property."""

    listing_id: str
    name: str
    category: str
    price: Decimal
    monthly_income: Decimal = Decimal("0")
    monthly_expenses: Decimal = Decimal("0")
    appreciation_rate: Decimal = Decimal("0")


@dataclass(frozen=True)
class Property:
    property_id: str
    listing_id: str
    name: str
    category: str
    purchase_price: Decimal
    current_value: Decimal
    down_payment: Decimal
    loan_amount: Decimal
    loan_term_years: int
    annual_interest_rate: Decimal
    monthly_payment: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    acquired_on: date
    appreciation_rate: Decimal = Decimal("0")

    @property
    def equity(self) -> Decimal:
        return self.current_value - self.loan_amount


@dataclass(frozen=True)
class ItemEffects:
    """Ongoing attribute effects carried by a lifestyle item."""

    health: float = 0.0
    time_commitment: float = 0.0
    social_status: float = 0.0
    environmental_impact: float = 0.0
    stress_reduction: float = 0.0

    def attribute_changes(self) -> Dict[str, float]:
        return {
            "health": self.health,
            "social_connections": self.social_status,
            "environmental_impact": self.environmental_impact,
            "stress": -self.stress_reduction,
        }


@dataclass(frozen=True)
class LifestyleListing:
    """Catalog entry for a lifestyle purchase."""

    item_id: str
    name: str
    category: str
    price: Decimal
    maintenance_cost: Decimal = Decimal("0")
    happiness: float = 0.0
    prestige: float = 0.0
    effects: ItemEffects = field(default_factory=ItemEffects)
    duration_days: Optional[int] = None
    unique: bool = False
    requires_item_ids: Tuple[str, ...] = ()
    requires_net_worth: Optional[Decimal] = None
    excludes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LifestyleItem:
    holding_id: str
    item_id: str
    name: str
    category: str
    price: Decimal
    maintenance_cost: Decimal
    happiness: float
    prestige: float
    effects: ItemEffects
    acquired_on: date
    duration_days: Optional[int] = None
    unique: bool = False
    excludes: Tuple[str, ...] = ()
    applied: Tuple[Tuple[str, float], ...] = ()

    @property
    def is_temporary(self) -> bool:
        return self.duration_days is not None

    @property
    def end_date(self) -> Optional[date]:
        if self.duration_days is None:
            return None
        return self.acquired_on + timedelta(days=self.duration_days)

    def applied_changes(self) -> Dict[str, float]:
        return dict(self.applied)


@dataclass(frozen=True)
class Job:
    title: str
    annual_salary: Decimal
    stress: float = 0.0
    happiness_impact: float = 0.0
    skill_gain: float = 0.0
    time_commitment: float = 40.0
    tenure_months: int = 0


@dataclass(frozen=True)
class RecurringEntry:
    key: str
    kind: RecurringKind
    amount: Decimal
    label: str = ""


@dataclass
class Character:
    """Mutable aggregate owned by the engine; mutate only through components."""

    character_id: str
    name: str
    cash: Decimal
    current_date: date
    net_worth: Decimal = Decimal("0")
    attributes: Attributes = field(default_factory=Attributes)
    needs: BasicNeeds = field(default_factory=BasicNeeds)
    housing: HousingType = HousingType.RENTED
    vehicle: VehicleType = VehicleType.NONE
    job: Optional[Job] = None
    assets: Dict[str, Asset] = field(default_factory=dict)
    properties: Dict[str, Property] = field(default_factory=dict)
    lifestyle_items: Dict[str, LifestyleItem] = field(default_factory=dict)
    recurring: Dict[str, RecurringEntry] = field(default_factory=dict)
    income_total: Decimal = Decimal("0")
    expense_total: Decimal = Decimal("0")
    revision: int = 0
    last_processed_date: Optional[date] = None
    day_count: int = 0


def next_holding_id(base: str, existing: Mapping[str, object]) -> str:
    """Return base, or base-N for the first free N when base is taken."""

    if base not in existing:
        return base
    suffix = 2
    while f"{base}-{suffix}" in existing:
        suffix += 1
    return f"{base}-{suffix}"
