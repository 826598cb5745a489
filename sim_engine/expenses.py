"""Pure computation of recurring monthly obligations and income tax."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Sequence

from ledger_core.config import EngineConfig
from ledger_core.ledger import MAINTENANCE, MORTGAGE, PROPERTY_INCOME, Ledger
from ledger_core.models import (
    Character,
    HousingType,
    RecurringKind,
    VehicleType,
    safe_amount,
)

Obligation = Callable[[Character], Decimal]

ZERO = Decimal("0")


@dataclass(frozen=True)
class MonthlyStatement:
    """Labeled monthly income and expense lines."""

    salary_income: Decimal
    property_income: Decimal
    other_income: Decimal
    housing: Decimal
    transportation: Decimal
    food: Decimal
    lifestyle_maintenance: Decimal
    tax: Decimal
    mortgage_payments: Decimal
    other_obligations: Decimal

    @property
    def total_income(self) -> Decimal:
        return self.salary_income + self.property_income + self.other_income

    @property
    def total_expenses(self) -> Decimal:
        return (
            self.housing
            + self.transportation
            + self.food
            + self.lifestyle_maintenance
            + self.tax
            + self.mortgage_payments
            + self.other_obligations
        )

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expenses

    def to_dict(self) -> Dict[str, object]:
        return {
            "income": {
                "salary": self.salary_income,
                "property": self.property_income,
                "other": self.other_income,
                "total": self.total_income,
            },
            "expenses": {
                "housing": self.housing,
                "transportation": self.transportation,
                "food": self.food,
                "lifestyle_maintenance": self.lifestyle_maintenance,
                "tax": self.tax,
                "mortgage_payments": self.mortgage_payments,
                "other_obligations": self.other_obligations,
                "total": self.total_expenses,
            },
            "net": self.net,
        }


def housing_expense(housing: HousingType, config: EngineConfig) -> Decimal:
    return config.housing_costs.get(housing, ZERO)


def transportation_expense(vehicle: VehicleType, config: EngineConfig) -> Decimal:
    return config.vehicle_costs.get(vehicle, ZERO)


def food_expense(config: EngineConfig) -> Decimal:
    return config.food_cost


def lifestyle_maintenance(ledger: Ledger) -> Decimal:
    return ledger.recurring_total(RecurringKind.EXPENSE, MAINTENANCE)


def mortgage_payments(ledger: Ledger) -> Decimal:
    return ledger.recurring_total(RecurringKind.EXPENSE, MORTGAGE)


def property_income(ledger: Ledger) -> Decimal:
    return ledger.recurring_total(RecurringKind.INCOME, PROPERTY_INCOME)


def progressive_tax(monthly_income: Decimal, config: EngineConfig) -> Decimal:
    """Marginal tax over monthly income using the configured brackets."""

    income = safe_amount(monthly_income)
    tax = ZERO
    lower = ZERO
    for bracket in config.tax_brackets:
        if income <= lower:
            break
        taxable = min(income, bracket.upper) - lower
        tax += taxable * bracket.rate
        lower = bracket.upper
    if income > lower:
        tax += (income - lower) * config.top_tax_rate
    return tax


def effective_tax_rate(monthly_income: Decimal, config: EngineConfig) -> Decimal:
    income = safe_amount(monthly_income)
    if income == 0:
        return ZERO
    return progressive_tax(income, config) / income


def _sum_external(providers: Sequence[Obligation], character: Character) -> Decimal:
    return sum((safe_amount(provider(character)) for provider in providers), ZERO)


def monthly_statement(
    character: Character,
    config: EngineConfig,
    external_obligations: Sequence[Obligation] = (),
    external_income: Sequence[Obligation] = (),
) -> MonthlyStatement:
    salary = ZERO
    if character.job is not None:
        salary = safe_amount(character.job.annual_salary) / 12
    ledger = Ledger(character)
    rental = property_income(ledger)
    other_income = _sum_external(external_income, character)
    taxable = salary + rental + other_income

    return MonthlyStatement(
        salary_income=salary,
        property_income=rental,
        other_income=other_income,
        housing=housing_expense(character.housing, config),
        transportation=transportation_expense(character.vehicle, config),
        food=food_expense(config),
        lifestyle_maintenance=lifestyle_maintenance(ledger),
        tax=progressive_tax(taxable, config),
        mortgage_payments=mortgage_payments(ledger),
        other_obligations=_sum_external(external_obligations, character),
    )


def total_monthly_expense(
    character: Character,
    config: EngineConfig,
    external_obligations: Sequence[Obligation] = (),
    external_income: Sequence[Obligation] = (),
) -> Decimal:
    return monthly_statement(
        character, config, external_obligations, external_income
    ).total_expenses
