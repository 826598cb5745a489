"""Cash ledger over the character aggregate."""

from decimal import Decimal
import logging
from typing import Dict, Optional

from .models import Character, Number, RecurringEntry, RecurringKind, safe_amount

logger = logging.getLogger(__name__)

MORTGAGE = "mortgage"
PROPERTY_INCOME = "property-income"
PROPERTY_UPKEEP = "property-upkeep"
MAINTENANCE = "maintenance"


def recurring_key(prefix: str, holding_id: str) -> str:
    return f"{prefix}:{holding_id}"


class Ledger:
    """Reads and writes cash, accumulators and the recurring registry.

    Amounts are magnitudes. Negative, NaN or infinite inputs are coerced to
    zero so tick processing never raises; command-level validation happens in
    the engine facade before any ledger call.
    """

    def __init__(self, character: Character) -> None:
        self._character = character

    @property
    def cash(self) -> Decimal:
        return self._character.cash

    @property
    def revision(self) -> int:
        return self._character.revision

    def credit(self, amount: Number) -> Decimal:
        value = safe_amount(amount)
        self._character.cash += value
        self.touch()
        return value

    def debit(self, amount: Number) -> Decimal:
        """Deduct up to the available cash and return the amount deducted."""

        requested = safe_amount(amount)
        deducted = min(requested, max(self._character.cash, Decimal("0")))
        if deducted < requested:
            logger.debug("Debit of %s capped at available cash %s", requested, deducted)
        self._character.cash -= deducted
        self.touch()
        return deducted

    def record_income(self, amount: Number) -> Decimal:
        value = safe_amount(amount)
        self._character.income_total += value
        self.touch()
        return value

    def record_expense(self, amount: Number) -> Decimal:
        value = safe_amount(amount)
        self._character.expense_total += value
        self.touch()
        return value

    def register_recurring(
        self, key: str, kind: RecurringKind, amount: Number, label: str = ""
    ) -> RecurringEntry:
        entry = RecurringEntry(key=key, kind=kind, amount=safe_amount(amount), label=label)
        self._character.recurring[key] = entry
        self.touch()
        return entry

    def remove_recurring(self, key: str) -> None:
        if self._character.recurring.pop(key, None) is not None:
            self.touch()

    def recurring_total(self, kind: RecurringKind, prefix: Optional[str] = None) -> Decimal:
        """Sum registered amounts of one kind, optionally limited to one key prefix."""

        marker = None if prefix is None else f"{prefix}:"
        return sum(
            (
                entry.amount
                for entry in self._character.recurring.values()
                if entry.kind == kind and (marker is None or entry.key.startswith(marker))
            ),
            Decimal("0"),
        )

    def recurring_entries(self) -> Dict[str, RecurringEntry]:
        return dict(self._character.recurring)

    def touch(self) -> None:
        self._character.revision += 1
