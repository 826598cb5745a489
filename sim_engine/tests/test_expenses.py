"""Monthly obligation and progressive tax tests."""

from datetime import date
from decimal import Decimal
import unittest

from ledger_core.config import EngineConfig
from ledger_core.ledger import MAINTENANCE, MORTGAGE, PROPERTY_INCOME, Ledger, recurring_key
from ledger_core.models import Character, HousingType, Job, RecurringKind, VehicleType
from sim_engine.expenses import (
    effective_tax_rate,
    monthly_statement,
    progressive_tax,
    total_monthly_expense,
)


def _character() -> Character:
    return Character(
        character_id="alex",
        name="Alex",
        cash=Decimal("0"),
        current_date=date(2024, 1, 1),
    )


class ProgressiveTaxTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = EngineConfig()

    def test_marginal_brackets(self) -> None:
        self.assertEqual(progressive_tax(Decimal("0"), self.config), Decimal("0"))
        self.assertEqual(progressive_tax(Decimal("2000"), self.config), Decimal("200"))
        self.assertEqual(progressive_tax(Decimal("5000"), self.config), Decimal("600"))
        self.assertEqual(progressive_tax(Decimal("12000"), self.config), Decimal("2230"))

    def test_tax_and_effective_rate_never_decrease(self) -> None:
        previous_tax = Decimal("0")
        previous_rate = Decimal("0")
        for step in range(0, 25001, 250):
            income = Decimal(step)
            tax = progressive_tax(income, self.config)
            rate = effective_tax_rate(income, self.config)
            self.assertGreaterEqual(tax, previous_tax)
            self.assertGreaterEqual(rate, previous_rate)
            self.assertLessEqual(rate, self.config.top_tax_rate)
            previous_tax = tax
            previous_rate = rate

    def test_negative_income_is_untaxed(self) -> None:
        self.assertEqual(progressive_tax(Decimal("-500"), self.config), Decimal("0"))


class MonthlyStatementTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = EngineConfig()

    def test_default_character_pays_rent_transit_and_food(self) -> None:
        statement = monthly_statement(_character(), self.config)
        self.assertEqual(statement.housing, Decimal("1800"))
        self.assertEqual(statement.transportation, Decimal("200"))
        self.assertEqual(statement.food, Decimal("500"))
        self.assertEqual(statement.tax, Decimal("0"))
        self.assertEqual(statement.total_expenses, Decimal("2500"))
        self.assertEqual(statement.net, Decimal("-2500"))

    def test_salary_is_taxed_and_choices_change_costs(self) -> None:
        character = _character()
        character.job = Job(title="Analyst", annual_salary=Decimal("60000"))
        character.housing = HousingType.SHARED
        character.vehicle = VehicleType.BICYCLE
        statement = monthly_statement(character, self.config)
        self.assertEqual(statement.salary_income, Decimal("5000"))
        self.assertEqual(statement.tax, Decimal("600"))
        self.assertEqual(statement.total_expenses, Decimal("900") + Decimal("50") + Decimal("500") + Decimal("600"))

    def test_external_obligations_and_income_are_included(self) -> None:
        character = _character()
        statement = monthly_statement(
            character,
            self.config,
            external_obligations=(lambda _: Decimal("100"), lambda _: Decimal("-40")),
            external_income=(lambda _: Decimal("1000"),),
        )
        self.assertEqual(statement.other_obligations, Decimal("100"))
        self.assertEqual(statement.other_income, Decimal("1000"))
        self.assertEqual(statement.tax, Decimal("100"))
        self.assertEqual(
            total_monthly_expense(
                character, self.config, external_obligations=(lambda _: Decimal("100"),)
            ),
            Decimal("2600"),
        )

    def test_recurring_registry_feeds_statement(self) -> None:
        character = _character()
        ledger = Ledger(character)
        ledger.register_recurring(recurring_key(MORTGAGE, "maple"), RecurringKind.EXPENSE, 1200)
        ledger.register_recurring(recurring_key(MAINTENANCE, "boat"), RecurringKind.EXPENSE, 150)
        ledger.register_recurring(recurring_key(PROPERTY_INCOME, "maple"), RecurringKind.INCOME, 800)
        statement = monthly_statement(character, self.config)
        self.assertEqual(statement.mortgage_payments, Decimal("1200"))
        self.assertEqual(statement.lifestyle_maintenance, Decimal("150"))
        self.assertEqual(statement.property_income, Decimal("800"))
        self.assertEqual(statement.tax, Decimal("80"))

        ledger.remove_recurring(recurring_key(MORTGAGE, "maple"))
        self.assertEqual(monthly_statement(character, self.config).mortgage_payments, Decimal("0"))


if __name__ == "__main__":
    unittest.main()
