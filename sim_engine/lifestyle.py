"""Lifestyle item acquisition, expiry and release."""

from datetime import date
from decimal import Decimal
import logging
from typing import Dict, Optional, Tuple

from ledger_core.config import EngineConfig
from ledger_core.errors import (
    AlreadyOwnedError,
    ConflictError,
    InsufficientFundsError,
    InvalidInputError,
    NotFoundError,
    PrerequisiteNotMetError,
)
from ledger_core.ledger import MAINTENANCE, Ledger, recurring_key
from ledger_core.models import (
    Character,
    LifestyleItem,
    LifestyleListing,
    RecurringKind,
    is_valid_amount,
    next_holding_id,
    safe_float,
    to_decimal,
)

from .networth import NetWorthCalculator

logger = logging.getLogger(__name__)

ONE_TIME_ATTRIBUTES = ("happiness", "prestige")


def maintenance_key(holding_id: str) -> str:
    return recurring_key(MAINTENANCE, holding_id)


def _hours(value: float) -> float:
    return max(0.0, safe_float(value))


class LifestyleItemLifecycle:
    """Applies and reverses the attribute effects of lifestyle purchases."""

    def __init__(
        self,
        character: Character,
        config: Optional[EngineConfig] = None,
        calculator: Optional[NetWorthCalculator] = None,
    ) -> None:
        self._character = character
        self._config = config or EngineConfig()
        self._calculator = calculator or NetWorthCalculator(self._config)
        self._ledger = Ledger(character)

    def owned_item_ids(self) -> Tuple[str, ...]:
        return tuple(sorted({item.item_id for item in self._character.lifestyle_items.values()}))

    def committed_hours(self) -> float:
        """Weekly hours taken by the owned items."""

        return sum(
            (_hours(item.effects.time_commitment) for item in self._character.lifestyle_items.values()),
            0.0,
        )

    def get(self, holding_id: str) -> LifestyleItem:
        item = self._character.lifestyle_items.get(holding_id)
        if item is None:
            raise NotFoundError(f"Unknown lifestyle holding: {holding_id}")
        return item

    def validate(self, listing: LifestyleListing) -> None:
        """Raise the first rule the listing violates; never mutates state."""

        owned = set(self.owned_item_ids())
        price = to_decimal(listing.price)
        if not is_valid_amount(price) or not is_valid_amount(to_decimal(listing.maintenance_cost)):
            raise InvalidInputError("Lifestyle prices must be non-negative amounts.")
        if listing.duration_days is not None and listing.duration_days <= 0:
            raise InvalidInputError("duration_days must be positive when set.")

        if listing.unique and listing.item_id in owned:
            raise AlreadyOwnedError(f"{listing.item_id} is unique and already owned.")

        blocked = owned.intersection(listing.excludes)
        for item in self._character.lifestyle_items.values():
            if listing.item_id in item.excludes:
                blocked.add(item.item_id)
        if blocked:
            raise ConflictError(
                f"{listing.item_id} conflicts with owned items: {', '.join(sorted(blocked))}"
            )
        hours = self.committed_hours() + _hours(listing.effects.time_commitment)
        if hours > self._config.max_weekly_commitment_hours:
            raise ConflictError(
                f"{listing.item_id} needs more time than is free: {hours:g} of "
                f"{self._config.max_weekly_commitment_hours:g} weekly hours."
            )

        missing = [item_id for item_id in listing.requires_item_ids if item_id not in owned]
        if missing:
            raise PrerequisiteNotMetError(
                f"{listing.item_id} requires: {', '.join(missing)}"
            )
        if listing.requires_net_worth is not None:
            net_worth = self._calculator.calculate(self._character)
            if net_worth < to_decimal(listing.requires_net_worth):
                raise PrerequisiteNotMetError(
                    f"{listing.item_id} requires net worth of {listing.requires_net_worth}."
                )

        if self._character.cash < price:
            raise InsufficientFundsError(
                f"{listing.item_id} costs {price}; available cash {self._character.cash}."
            )

    def acquire(self, listing: LifestyleListing) -> LifestyleItem:
        self.validate(listing)

        price = to_decimal(listing.price)
        maintenance = to_decimal(listing.maintenance_cost)
        holding_id = next_holding_id(listing.item_id, self._character.lifestyle_items)

        changes: Dict[str, float] = {
            "happiness": listing.happiness,
            "prestige": listing.prestige,
        }
        for name, delta in listing.effects.attribute_changes().items():
            if delta:
                changes[name] = changes.get(name, 0.0) + delta
        attributes, applied = self._character.attributes.apply(changes)

        item = LifestyleItem(
            holding_id=holding_id,
            item_id=listing.item_id,
            name=listing.name,
            category=listing.category,
            price=price,
            maintenance_cost=maintenance,
            happiness=listing.happiness,
            prestige=listing.prestige,
            effects=listing.effects,
            acquired_on=self._character.current_date,
            duration_days=listing.duration_days,
            unique=listing.unique,
            excludes=tuple(listing.excludes),
            applied=tuple(sorted(applied.items())),
        )

        self._ledger.debit(price)
        self._ledger.record_expense(price)
        self._character.attributes = attributes
        self._character.lifestyle_items[holding_id] = item
        if maintenance > 0:
            self._ledger.register_recurring(
                maintenance_key(holding_id), RecurringKind.EXPENSE, maintenance, f"Upkeep: {item.name}"
            )
        else:
            self._ledger.touch()
        self._calculator.recompute(self._character)
        logger.info("Acquired lifestyle item %s for %s", holding_id, price)
        return item

    def expire_due(self, on: date) -> Tuple[LifestyleItem, ...]:
        """Expire every duration-bearing item whose end date is before `on`."""

        due = [
            item
            for item in self._character.lifestyle_items.values()
            if item.end_date is not None and on > item.end_date
        ]
        return tuple(self.expire(item.holding_id) for item in due)

    def expire(self, holding_id: str) -> LifestyleItem:
        """Remove the item and reverse exactly what was applied at acquisition."""

        item = self.get(holding_id)
        reversal = {name: -delta for name, delta in item.applied_changes().items()}
        self._remove(item, reversal)
        logger.info("Lifestyle item %s expired on %s", holding_id, self._character.current_date)
        return item

    def release(self, holding_id: str) -> Decimal:
        """Sell the item back at the resale fraction and return the refund."""

        item = self.get(holding_id)
        fraction = self._config.release_reversal_fraction
        reversal: Dict[str, float] = {}
        for name, delta in item.applied_changes().items():
            if name in ONE_TIME_ATTRIBUTES:
                reversal[name] = -delta * fraction
            else:
                reversal[name] = -delta

        refund = item.price * self._config.resale_fraction
        self._ledger.credit(refund)
        self._ledger.record_income(refund)
        self._remove(item, reversal)
        logger.info("Released lifestyle item %s for %s", holding_id, refund)
        return refund

    def _remove(self, item: LifestyleItem, reversal: Dict[str, float]) -> None:
        attributes, _ = self._character.attributes.apply(reversal)
        self._character.attributes = attributes
        del self._character.lifestyle_items[item.holding_id]
        self._ledger.remove_recurring(maintenance_key(item.holding_id))
        self._ledger.touch()
        self._calculator.recompute(self._character)
