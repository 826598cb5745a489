"""Command and query surface over one character aggregate."""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
import logging
import random
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence, Tuple, Union

from ledger_core.config import EngineConfig
from ledger_core.errors import ErrorKind, InsufficientFundsError, InvalidInputError, SimulationError
from ledger_core.ledger import Ledger
from ledger_core.models import (
    Asset,
    AssetCategory,
    Attributes,
    BasicNeeds,
    Character,
    HousingType,
    Job,
    LifestyleItem,
    LifestyleListing,
    Number,
    Property,
    PropertyListing,
    VehicleType,
    is_valid_amount,
    to_decimal,
)
from ledger_core.portfolio import Portfolio

from .events import EventBus, StateChanged
from .expenses import MonthlyStatement, Obligation, monthly_statement
from .lifestyle import LifestyleItemLifecycle
from .networth import NetWorthBreakdown, NetWorthCalculator
from .properties import PropertyLifecycleManager, SaleSettlement
from .ticks import TickReport, TimeTickProcessor

if TYPE_CHECKING:
    from state_store.store import StateStore

logger = logging.getLogger(__name__)

STARTING_WEALTH = {
    "bootstrapped": (Decimal("10000"), Attributes()),
    "middle-class": (Decimal("100000"), Attributes(prestige=10.0)),
    "wealthy": (Decimal("1000000"), Attributes(prestige=20.0, stress=10.0, social_connections=40.0)),
}
RESET_CASH = Decimal("5000")


@dataclass(frozen=True)
class CommandResult:
    """Discriminated outcome of a command: ok with payload, or a typed failure."""

    command: str
    ok: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    error: Optional[ErrorKind] = None
    message: str = ""

    @staticmethod
    def success(command: str, payload: Optional[Dict[str, Any]] = None) -> "CommandResult":
        return CommandResult(command=command, ok=True, payload=payload or {})

    @staticmethod
    def failure(command: str, exc: SimulationError) -> "CommandResult":
        return CommandResult(command=command, ok=False, error=exc.kind, message=str(exc))

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"command": self.command, "ok": self.ok}
        if self.ok:
            result["payload"] = self.payload
        else:
            result["error"] = self.error.value if self.error else None
            result["message"] = self.message
        return result


def create_character(
    character_id: str,
    name: str,
    start_date: date,
    starting_wealth: str = "bootstrapped",
) -> Character:
    preset = STARTING_WEALTH.get(starting_wealth)
    if preset is None:
        raise InvalidInputError(f"Unknown starting wealth: {starting_wealth}")
    cash, attributes = preset
    return Character(
        character_id=character_id,
        name=name,
        cash=cash,
        net_worth=cash,
        current_date=start_date,
        attributes=attributes,
    )


class SimulationEngine:
    """Routes every mutation through the components, then commits.

    A commit recomputes net worth, bumps the revision, writes the character
    through to the store and notifies subscribers. Failed commands raise
    inside the components before any mutation and come back as a failed
    `CommandResult`.
    """

    def __init__(
        self,
        character: Character,
        config: Optional[EngineConfig] = None,
        store: Optional["StateStore"] = None,
        rng: Optional[random.Random] = None,
        events: Optional[EventBus] = None,
        external_obligations: Sequence[Obligation] = (),
        external_income: Sequence[Obligation] = (),
    ) -> None:
        self._config = config or EngineConfig()
        self._store = store
        self._rng = rng or random.Random()
        self._events = events or EventBus()
        self._external_obligations = tuple(external_obligations)
        self._external_income = tuple(external_income)
        self._calculator = NetWorthCalculator(self._config)
        self._bind(character)

    def _bind(self, character: Character) -> None:
        self._character = character
        self._ledger = Ledger(character)
        self._portfolio = Portfolio(character)
        self._properties = PropertyLifecycleManager(character, self._config, self._calculator)
        self._lifestyle = LifestyleItemLifecycle(character, self._config, self._calculator)
        self._ticks = TimeTickProcessor(
            character,
            self._config,
            self._calculator,
            rng=self._rng,
            external_obligations=self._external_obligations,
            external_income=self._external_income,
        )

    @property
    def character(self) -> Character:
        return self._character

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def events(self) -> EventBus:
        return self._events

    # Queries

    @property
    def cash(self) -> Decimal:
        return self._character.cash

    @property
    def net_worth(self) -> Decimal:
        return self._character.net_worth

    @property
    def attributes(self) -> Attributes:
        return self._character.attributes

    @property
    def needs(self) -> BasicNeeds:
        return self._character.needs

    def assets(self) -> Tuple[Asset, ...]:
        return self._portfolio.assets

    def properties(self) -> Tuple[Property, ...]:
        return self._portfolio.properties

    def lifestyle_items(self) -> Tuple[LifestyleItem, ...]:
        return tuple(self._character.lifestyle_items.values())

    def breakdown(self) -> NetWorthBreakdown:
        if self._store is not None:
            cached = self._store.load_breakdown(self._character)
            if cached is not None:
                return cached
        breakdown = self._calculator.breakdown(self._character)
        if self._store is not None:
            self._store.save_breakdown(self._character, breakdown)
        return breakdown

    def monthly_statement(self) -> MonthlyStatement:
        return monthly_statement(
            self._character, self._config, self._external_obligations, self._external_income
        )

    def preview_sale(self, property_id: str) -> SaleSettlement:
        return self._properties.preview_sale(property_id)

    def summary(self) -> Dict[str, Any]:
        """JSON-friendly view of the character for operator surfaces."""

        character = self._character
        job = character.job
        return {
            "character_id": character.character_id,
            "name": character.name,
            "current_date": character.current_date.isoformat(),
            "revision": character.revision,
            "cash": str(character.cash),
            "net_worth": str(character.net_worth),
            "income_total": str(character.income_total),
            "expense_total": str(character.expense_total),
            "housing": character.housing.value,
            "vehicle": character.vehicle.value,
            "job": None
            if job is None
            else {
                "title": job.title,
                "annual_salary": str(job.annual_salary),
                "tenure_months": job.tenure_months,
            },
            "attributes": character.attributes.to_dict(),
            "needs": character.needs.to_dict(),
            "assets": [
                {
                    "asset_id": asset.asset_id,
                    "category": asset.category.value,
                    "quantity": str(asset.quantity),
                    "current_price": str(asset.current_price),
                    "market_value": str(asset.market_value),
                }
                for asset in self.assets()
            ],
            "properties": [
                {
                    "property_id": prop.property_id,
                    "current_value": str(prop.current_value),
                    "loan_amount": str(prop.loan_amount),
                    "monthly_payment": str(prop.monthly_payment),
                    "acquired_on": prop.acquired_on.isoformat(),
                }
                for prop in self.properties()
            ],
            "lifestyle_items": [
                {
                    "holding_id": item.holding_id,
                    "item_id": item.item_id,
                    "end_date": item.end_date.isoformat() if item.end_date else None,
                }
                for item in self.lifestyle_items()
            ],
            "committed_hours": self._lifestyle.committed_hours(),
            "recurring": [
                {
                    "key": entry.key,
                    "kind": entry.kind.value,
                    "amount": str(entry.amount),
                    "label": entry.label,
                }
                for entry in sorted(
                    self._ledger.recurring_entries().values(), key=lambda entry: entry.key
                )
            ],
        }

    # Commands

    def buy_asset(
        self,
        asset_id: str,
        name: str,
        category: Union[AssetCategory, str],
        quantity: Number,
        price: Number,
    ) -> CommandResult:
        def action() -> Dict[str, Any]:
            kind = _parse_enum(AssetCategory, category)
            units = _positive(quantity, "quantity")
            unit_price = _amount(price, "price")
            cost = units * unit_price
            if self._character.cash < cost:
                raise InsufficientFundsError(
                    f"Buying {units} {asset_id} costs {cost}; available cash {self._character.cash}."
                )
            asset = self._portfolio.add_asset(asset_id, name, kind, units, unit_price)
            self._ledger.debit(cost)
            self._ledger.record_expense(cost)
            return {"asset_id": asset.asset_id, "quantity": str(asset.quantity), "cost": str(cost)}

        return self._run("buy_asset", action)

    def sell_asset(self, asset_id: str, quantity: Optional[Number] = None) -> CommandResult:
        def action() -> Dict[str, Any]:
            asset = self._portfolio.get_asset(asset_id)
            units = asset.quantity if quantity is None else _positive(quantity, "quantity")
            remaining = self._portfolio.remove_asset_units(asset_id, units)
            proceeds = units * asset.current_price
            self._ledger.credit(proceeds)
            self._ledger.record_income(proceeds)
            return {
                "asset_id": asset_id,
                "sold": str(units),
                "remaining": str(remaining.quantity),
                "proceeds": str(proceeds),
            }

        return self._run("sell_asset", action)

    def update_asset_price(self, asset_id: str, price: Number) -> CommandResult:
        def action() -> Dict[str, Any]:
            asset = self._portfolio.set_asset_price(asset_id, _amount(price, "price"))
            return {"asset_id": asset_id, "current_price": str(asset.current_price)}

        return self._run("update_asset_price", action)

    def buy_property(
        self,
        listing: PropertyListing,
        down_payment: Number,
        loan_term_years: Optional[int] = None,
        annual_rate: Optional[Number] = None,
    ) -> CommandResult:
        def action() -> Dict[str, Any]:
            rate = None if annual_rate is None else _amount(annual_rate, "annual_rate")
            prop = self._properties.purchase(
                listing, _amount(down_payment, "down_payment"), loan_term_years, rate
            )
            return {
                "property_id": prop.property_id,
                "loan_amount": str(prop.loan_amount),
                "monthly_payment": str(prop.monthly_payment),
            }

        return self._run("buy_property", action)

    def sell_property(self, property_id: str) -> CommandResult:
        return self._run(
            "sell_property", lambda: self._properties.sell(property_id).to_dict()
        )

    def acquire_lifestyle_item(self, listing: LifestyleListing) -> CommandResult:
        def action() -> Dict[str, Any]:
            item = self._lifestyle.acquire(listing)
            return {
                "holding_id": item.holding_id,
                "end_date": item.end_date.isoformat() if item.end_date else None,
            }

        return self._run("acquire_lifestyle_item", action)

    def release_lifestyle_item(self, holding_id: str) -> CommandResult:
        def action() -> Dict[str, Any]:
            refund = self._lifestyle.release(holding_id)
            return {"holding_id": holding_id, "refund": str(refund)}

        return self._run("release_lifestyle_item", action)

    def set_housing(self, housing: Union[HousingType, str]) -> CommandResult:
        def action() -> Dict[str, Any]:
            self._character.housing = _parse_enum(HousingType, housing)
            self._ledger.touch()
            return {"housing": self._character.housing.value}

        return self._run("set_housing", action)

    def set_vehicle(self, vehicle: Union[VehicleType, str]) -> CommandResult:
        def action() -> Dict[str, Any]:
            self._character.vehicle = _parse_enum(VehicleType, vehicle)
            self._ledger.touch()
            return {"vehicle": self._character.vehicle.value}

        return self._run("set_vehicle", action)

    def set_job(self, job: Job) -> CommandResult:
        def action() -> Dict[str, Any]:
            salary = _amount(job.annual_salary, "annual_salary")
            self._character.job = replace(job, annual_salary=salary)
            self._ledger.touch()
            return {"title": job.title, "annual_salary": str(salary)}

        return self._run("set_job", action)

    def clear_job(self) -> CommandResult:
        def action() -> Dict[str, Any]:
            self._character.job = None
            self._ledger.touch()
            return {}

        return self._run("clear_job", action)

    def advance_day(self, new_date: date) -> CommandResult:
        """Process one simulated day; repeating a processed date changes nothing."""

        try:
            report: TickReport = self._ticks.advance_day(new_date)
        except SimulationError as exc:
            return CommandResult.failure("advance_day", exc)
        if report.skipped:
            return CommandResult.success("advance_day", report.to_dict())
        self._commit("advance_day")
        return CommandResult.success("advance_day", report.to_dict())

    def reset(self, cash: Number = RESET_CASH) -> CommandResult:
        def action() -> Dict[str, Any]:
            starting = _amount(cash, "cash")
            old = self._character
            fresh = Character(
                character_id=old.character_id,
                name=old.name,
                cash=starting,
                current_date=old.current_date,
                revision=old.revision + 1,
            )
            self._bind(fresh)
            return {"cash": str(starting)}

        return self._run("reset", action)

    def _run(self, command: str, action: Callable[[], Dict[str, Any]]) -> CommandResult:
        try:
            payload = action()
        except SimulationError as exc:
            logger.info("Command %s rejected: %s", command, exc)
            return CommandResult.failure(command, exc)
        self._commit(command)
        return CommandResult.success(command, payload)

    def _commit(self, reason: str) -> None:
        character = self._character
        self._calculator.recompute(character)
        self._ledger.touch()
        if self._store is not None:
            self._store.save_character(character)
            self._store.save_breakdown(character, self._calculator.breakdown(character))
        self._events.emit(
            StateChanged(
                character_id=character.character_id,
                revision=character.revision,
                reason=reason,
            )
        )
        logger.debug("Committed %s at revision %d", reason, character.revision)


def _amount(value: Number, name: str) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError as exc:
        raise InvalidInputError(f"{name} must be a number.") from exc
    if not is_valid_amount(amount):
        raise InvalidInputError(f"{name} must be a finite, non-negative amount.")
    return amount


def _positive(value: Number, name: str) -> Decimal:
    amount = _amount(value, name)
    if amount == 0:
        raise InvalidInputError(f"{name} must be positive.")
    return amount


def _parse_enum(enum_type, value):
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).strip().lower())
    except ValueError as exc:
        raise InvalidInputError(f"Unsupported {enum_type.__name__}: {value}") from exc
