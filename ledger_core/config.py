"""Tunable engine parameters: tax brackets, lookups, sale tiers and rates."""

from dataclasses import dataclass, field, fields, replace
from decimal import Decimal
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .models import HousingType, VehicleType, to_decimal

CONFIG_ENV_VAR = "LIFESIM_CONFIG"


@dataclass(frozen=True)
class TaxBracket:
    """Marginal rate applied to monthly income up to `upper`."""

    upper: Decimal
    rate: Decimal


@dataclass(frozen=True)
class SaleTier:
    """Penalty tier for property sales held fewer than `max_months` months."""

    max_months: Optional[int]
    value_multiplier: Decimal
    closing_multiplier: Decimal
    flat_cost_rate: Decimal


def _default_brackets() -> Tuple[TaxBracket, ...]:
    return (
        TaxBracket(upper=Decimal("3000"), rate=Decimal("0.10")),
        TaxBracket(upper=Decimal("6000"), rate=Decimal("0.15")),
        TaxBracket(upper=Decimal("10000"), rate=Decimal("0.22")),
    )


def _default_sale_tiers() -> Tuple[SaleTier, ...]:
    return (
        SaleTier(1, Decimal("0.85"), Decimal("1.5"), Decimal("0.05")),
        SaleTier(6, Decimal("0.92"), Decimal("1.25"), Decimal("0.03")),
        SaleTier(None, Decimal("1.00"), Decimal("1.0"), Decimal("0")),
    )


def _default_housing_costs() -> Dict[HousingType, Decimal]:
    return {
        HousingType.NONE: Decimal("0"),
        HousingType.SHARED: Decimal("900"),
        HousingType.RENTED: Decimal("1800"),
        HousingType.OWNED: Decimal("1200"),
        HousingType.LUXURY: Decimal("5000"),
    }


def _default_vehicle_costs() -> Dict[VehicleType, Decimal]:
    # NONE covers public transit fares.
    return {
        VehicleType.NONE: Decimal("200"),
        VehicleType.BICYCLE: Decimal("50"),
        VehicleType.ECONOMY: Decimal("300"),
        VehicleType.STANDARD: Decimal("450"),
        VehicleType.LUXURY: Decimal("1000"),
        VehicleType.PREMIUM: Decimal("1500"),
    }


def _default_need_decay() -> Dict[str, float]:
    return {"hunger": 8.0, "thirst": 12.0, "energy": 6.0}


def _default_housing_need_modifiers() -> Dict[HousingType, Dict[str, float]]:
    return {
        HousingType.NONE: {"energy": -4.0, "comfort": -10.0},
        HousingType.SHARED: {"energy": -1.0, "comfort": -3.0},
        HousingType.RENTED: {"energy": 0.0, "comfort": 0.0},
        HousingType.OWNED: {"energy": 1.0, "comfort": 2.0},
        HousingType.LUXURY: {"energy": 2.0, "comfort": 4.0},
    }


def _default_health_weights() -> Dict[str, float]:
    return {"hunger": 0.25, "thirst": 0.25, "energy": 0.20, "comfort": 0.10, "stress": 0.20}


@dataclass(frozen=True)
class EngineConfig:
    tax_brackets: Tuple[TaxBracket, ...] = field(default_factory=_default_brackets)
    top_tax_rate: Decimal = Decimal("0.30")
    housing_costs: Mapping[HousingType, Decimal] = field(default_factory=_default_housing_costs)
    vehicle_costs: Mapping[VehicleType, Decimal] = field(default_factory=_default_vehicle_costs)
    food_cost: Decimal = Decimal("500")

    default_loan_term_years: int = 30
    default_interest_rate: Decimal = Decimal("0.055")
    base_closing_rate: Decimal = Decimal("0.07")
    sale_tiers: Tuple[SaleTier, ...] = field(default_factory=_default_sale_tiers)
    early_payoff_rate: Decimal = Decimal("0.02")
    early_payoff_months: int = 36

    resale_fraction: Decimal = Decimal("0.85")
    release_reversal_fraction: float = 0.5
    depreciation_per_month: Decimal = Decimal("0.05")
    max_depreciation: Decimal = Decimal("0.75")
    subscription_value_months: int = 3
    max_weekly_commitment_hours: float = 80.0

    need_decay: Mapping[str, float] = field(default_factory=_default_need_decay)
    housing_need_modifiers: Mapping[HousingType, Mapping[str, float]] = field(
        default_factory=_default_housing_need_modifiers
    )
    health_weights: Mapping[str, float] = field(default_factory=_default_health_weights)
    max_daily_health_delta: float = 2.0

    salary_period_days: int = 14
    salary_periods_per_year: int = 26
    salary_variance: float = 0.02
    week_length_days: int = 7
    weekly_job_fraction: float = 0.25
    accrual_days_per_month: int = 30

    monthly_health_delta: float = 1.0
    happiness_high: float = 70.0
    happiness_low: float = 30.0
    social_high: float = 60.0
    social_low: float = 20.0
    environment_high: float = 60.0
    environment_low: float = 20.0

    def __post_init__(self) -> None:
        _validate_brackets(self.tax_brackets, self.top_tax_rate)
        _validate_tiers(self.sale_tiers)
        if self.default_loan_term_years <= 0:
            raise ValueError("default_loan_term_years must be positive.")
        if self.salary_period_days <= 0 or self.week_length_days <= 0:
            raise ValueError("Tick periods must be positive.")
        if self.accrual_days_per_month <= 0:
            raise ValueError("accrual_days_per_month must be positive.")
        if self.max_weekly_commitment_hours < 0:
            raise ValueError("max_weekly_commitment_hours must not be negative.")
        if not 0 <= self.release_reversal_fraction <= 1:
            raise ValueError("release_reversal_fraction must be within [0, 1].")

    def sale_tier(self, months_held: int) -> SaleTier:
        for tier in self.sale_tiers:
            if tier.max_months is None or months_held < tier.max_months:
                return tier
        return self.sale_tiers[-1]

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "EngineConfig":
        """Build a config from defaults overridden by a JSON-style mapping."""

        base = EngineConfig()
        known = {item.name for item in fields(base)}
        overrides: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                raise ValueError(f"Unknown config key: {key}")
            overrides[key] = _parse_value(key, value, getattr(base, key))
        return replace(base, **overrides)


def _parse_value(key: str, value: Any, default: Any) -> Any:
    if key == "tax_brackets":
        return tuple(
            TaxBracket(upper=to_decimal(entry["upper"]), rate=to_decimal(entry["rate"]))
            for entry in value
        )
    if key == "sale_tiers":
        return tuple(
            SaleTier(
                max_months=entry.get("max_months"),
                value_multiplier=to_decimal(entry["value_multiplier"]),
                closing_multiplier=to_decimal(entry["closing_multiplier"]),
                flat_cost_rate=to_decimal(entry["flat_cost_rate"]),
            )
            for entry in value
        )
    if key == "housing_costs":
        return {HousingType(name): to_decimal(amount) for name, amount in value.items()}
    if key == "vehicle_costs":
        return {VehicleType(name): to_decimal(amount) for name, amount in value.items()}
    if key == "housing_need_modifiers":
        return {
            HousingType(name): {need: float(delta) for need, delta in mods.items()}
            for name, mods in value.items()
        }
    if key in ("need_decay", "health_weights"):
        return {name: float(amount) for name, amount in value.items()}
    if isinstance(default, Decimal):
        return to_decimal(value)
    if isinstance(default, bool):
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return value


def _validate_brackets(brackets: Tuple[TaxBracket, ...], top_rate: Decimal) -> None:
    previous_upper = Decimal("0")
    previous_rate = Decimal("0")
    for bracket in brackets:
        if bracket.upper <= previous_upper:
            raise ValueError("Tax bracket boundaries must be strictly increasing.")
        if bracket.rate < previous_rate:
            raise ValueError("Tax bracket rates must be non-decreasing.")
        if not Decimal("0") <= bracket.rate <= Decimal("1"):
            raise ValueError("Tax bracket rates must be within [0, 1].")
        previous_upper = bracket.upper
        previous_rate = bracket.rate
    if top_rate < previous_rate or top_rate > Decimal("1"):
        raise ValueError("top_tax_rate must be within [last bracket rate, 1].")


def _validate_tiers(tiers: Tuple[SaleTier, ...]) -> None:
    if not tiers:
        raise ValueError("At least one sale tier is required.")
    if tiers[-1].max_months is not None:
        raise ValueError("The last sale tier must be open-ended.")


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """Load config from a JSON file, or from LIFESIM_CONFIG when path is None."""

    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return EngineConfig()
        path = Path(env_path)
    data = json.loads(Path(path).read_text())
    return EngineConfig.from_dict(data)
