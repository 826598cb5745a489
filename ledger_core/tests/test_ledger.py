"""Ledger cash and recurring registry tests."""

from datetime import date
from decimal import Decimal
import unittest

from ledger_core.ledger import MAINTENANCE, MORTGAGE, Ledger, recurring_key
from ledger_core.models import Character, RecurringKind


def _character(cash: str = "1000") -> Character:
    return Character(
        character_id="alex",
        name="Alex",
        cash=Decimal(cash),
        current_date=date(2024, 1, 1),
    )


class LedgerTests(unittest.TestCase):
    def test_credit_and_debit_adjust_cash(self) -> None:
        ledger = Ledger(_character())
        ledger.credit(Decimal("250.50"))
        deducted = ledger.debit(Decimal("100"))
        self.assertEqual(deducted, Decimal("100"))
        self.assertEqual(ledger.cash, Decimal("1150.50"))

    def test_debit_is_capped_at_available_cash(self) -> None:
        ledger = Ledger(_character("40"))
        deducted = ledger.debit(Decimal("100"))
        self.assertEqual(deducted, Decimal("40"))
        self.assertEqual(ledger.cash, Decimal("0"))

    def test_invalid_amounts_are_treated_as_zero(self) -> None:
        ledger = Ledger(_character())
        ledger.credit(Decimal("-50"))
        ledger.credit(float("nan"))
        ledger.debit(float("inf"))
        ledger.credit("not-a-number")
        self.assertEqual(ledger.cash, Decimal("1000"))

    def test_every_mutation_bumps_revision(self) -> None:
        character = _character()
        ledger = Ledger(character)
        ledger.credit(1)
        ledger.record_income(1)
        ledger.register_recurring("rent", RecurringKind.EXPENSE, 10)
        self.assertEqual(character.revision, 3)

    def test_recurring_totals_by_kind(self) -> None:
        ledger = Ledger(_character())
        ledger.register_recurring("rent", RecurringKind.EXPENSE, Decimal("1200"))
        ledger.register_recurring("gym", RecurringKind.EXPENSE, Decimal("50"))
        ledger.register_recurring("tenant", RecurringKind.INCOME, Decimal("900"))
        self.assertEqual(ledger.recurring_total(RecurringKind.EXPENSE), Decimal("1250"))
        self.assertEqual(ledger.recurring_total(RecurringKind.INCOME), Decimal("900"))

        ledger.remove_recurring("gym")
        ledger.remove_recurring("missing")
        self.assertEqual(ledger.recurring_total(RecurringKind.EXPENSE), Decimal("1200"))
        self.assertEqual(sorted(ledger.recurring_entries()), ["rent", "tenant"])

    def test_recurring_total_filters_by_key_prefix(self) -> None:
        ledger = Ledger(_character())
        ledger.register_recurring(recurring_key(MORTGAGE, "maple"), RecurringKind.EXPENSE, 900)
        ledger.register_recurring(recurring_key(MORTGAGE, "oak"), RecurringKind.EXPENSE, 400)
        ledger.register_recurring(recurring_key(MAINTENANCE, "yacht"), RecurringKind.EXPENSE, 250)
        self.assertEqual(ledger.recurring_total(RecurringKind.EXPENSE, MORTGAGE), Decimal("1300"))
        self.assertEqual(ledger.recurring_total(RecurringKind.EXPENSE, MAINTENANCE), Decimal("250"))
        self.assertEqual(ledger.recurring_total(RecurringKind.INCOME, MORTGAGE), Decimal("0"))
        self.assertEqual(recurring_key(MORTGAGE, "maple"), "mortgage:maple")

    def test_accumulators_track_income_and_expense(self) -> None:
        character = _character()
        ledger = Ledger(character)
        ledger.record_income(Decimal("10"))
        ledger.record_income(Decimal("5"))
        ledger.record_expense(Decimal("7"))
        self.assertEqual(character.income_total, Decimal("15"))
        self.assertEqual(character.expense_total, Decimal("7"))


if __name__ == "__main__":
    unittest.main()
