"""Property purchase with mortgage setup, and sale with holding-period penalties."""

from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Dict, Optional, Tuple

from ledger_core.config import EngineConfig
from ledger_core.errors import InsufficientFundsError, InvalidInputError
from ledger_core.ledger import MORTGAGE, PROPERTY_INCOME, PROPERTY_UPKEEP, Ledger, recurring_key
from ledger_core.models import (
    Character,
    Property,
    PropertyListing,
    RecurringKind,
    is_valid_amount,
    next_holding_id,
    to_decimal,
    whole_months_between,
)
from ledger_core.portfolio import Portfolio

from .networth import NetWorthCalculator

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def amortized_payment(loan_amount: Decimal, annual_rate: Decimal, term_years: int) -> Decimal:
    """Standard fixed-rate monthly payment: L * i(1+i)^n / ((1+i)^n - 1)."""

    if loan_amount <= 0:
        return ZERO
    periods = term_years * 12
    monthly_rate = annual_rate / 12
    if monthly_rate == 0:
        return (loan_amount / periods).quantize(CENT, rounding=ROUND_HALF_UP)
    factor = (1 + monthly_rate) ** periods
    payment = loan_amount * (monthly_rate * factor) / (factor - 1)
    return payment.quantize(CENT, rounding=ROUND_HALF_UP)


def mortgage_key(property_id: str) -> str:
    return recurring_key(MORTGAGE, property_id)


def income_key(property_id: str) -> str:
    return recurring_key(PROPERTY_INCOME, property_id)


def upkeep_key(property_id: str) -> str:
    return recurring_key(PROPERTY_UPKEEP, property_id)


@dataclass(frozen=True)
class SaleSettlement:
    """Itemized outcome of a property sale."""

    property_id: str
    months_held: int
    market_value: Decimal
    adjusted_value: Decimal
    closing_costs: Decimal
    outstanding_loan: Decimal
    early_payoff_penalty: Decimal
    net_proceeds: Decimal
    cash_applied: Decimal = ZERO
    written_off: Decimal = ZERO

    @property
    def underwater(self) -> bool:
        return self.net_proceeds < 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "property_id": self.property_id,
            "months_held": self.months_held,
            "market_value": str(self.market_value),
            "adjusted_value": str(self.adjusted_value),
            "closing_costs": str(self.closing_costs),
            "outstanding_loan": str(self.outstanding_loan),
            "early_payoff_penalty": str(self.early_payoff_penalty),
            "net_proceeds": str(self.net_proceeds),
            "cash_applied": str(self.cash_applied),
            "written_off": str(self.written_off),
            "underwater": self.underwater,
        }


class PropertyLifecycleManager:
    """Buys and sells properties on behalf of one character."""

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
        self._portfolio = Portfolio(character)

    def purchase(
        self,
        listing: PropertyListing,
        down_payment: Decimal,
        loan_term_years: Optional[int] = None,
        annual_rate: Optional[Decimal] = None,
    ) -> Property:
        term = self._config.default_loan_term_years if loan_term_years is None else loan_term_years
        rate = self._config.default_interest_rate if annual_rate is None else to_decimal(annual_rate)
        down = to_decimal(down_payment)
        price = to_decimal(listing.price)
        _validate_purchase(price, down, term, rate)

        if self._character.cash < down:
            raise InsufficientFundsError(
                f"Down payment {down} exceeds available cash {self._character.cash}."
            )

        loan = price - down
        payment = amortized_payment(loan, rate, term)
        property_id = next_holding_id(listing.listing_id, self._character.properties)
        prop = Property(
            property_id=property_id,
            listing_id=listing.listing_id,
            name=listing.name,
            category=listing.category,
            purchase_price=price,
            current_value=price,
            down_payment=down,
            loan_amount=loan,
            loan_term_years=term,
            annual_interest_rate=rate,
            monthly_payment=payment,
            monthly_income=to_decimal(listing.monthly_income),
            monthly_expenses=to_decimal(listing.monthly_expenses),
            acquired_on=self._character.current_date,
            appreciation_rate=to_decimal(listing.appreciation_rate),
        )

        self._ledger.debit(down)
        self._ledger.record_expense(down)
        self._portfolio.add_property(prop)
        if payment > 0:
            self._ledger.register_recurring(
                mortgage_key(property_id), RecurringKind.EXPENSE, payment, f"Mortgage: {prop.name}"
            )
        if prop.monthly_income > 0:
            self._ledger.register_recurring(
                income_key(property_id), RecurringKind.INCOME, prop.monthly_income, f"Rent: {prop.name}"
            )
        if prop.monthly_expenses > 0:
            self._ledger.register_recurring(
                upkeep_key(property_id), RecurringKind.EXPENSE, prop.monthly_expenses, f"Upkeep: {prop.name}"
            )
        self._calculator.recompute(self._character)
        logger.info(
            "Purchased property %s for %s (down %s, loan %s, payment %s/month)",
            property_id,
            price,
            down,
            loan,
            payment,
        )
        return prop

    def preview_sale(self, property_id: str, on: Optional[date] = None) -> SaleSettlement:
        prop = self._portfolio.get_property(property_id)
        return self._settle(prop, on or self._character.current_date)

    def sell(self, property_id: str) -> SaleSettlement:
        prop = self._portfolio.get_property(property_id)
        settlement = self._settle(prop, self._character.current_date)

        if settlement.net_proceeds >= 0:
            applied = self._ledger.credit(settlement.net_proceeds)
            self._ledger.record_income(applied)
            written_off = ZERO
        else:
            shortfall = -settlement.net_proceeds
            charged = self._ledger.debit(shortfall)
            self._ledger.record_expense(charged)
            applied = -charged
            written_off = shortfall - charged
            if written_off > 0:
                logger.warning(
                    "Sale of %s left %s uncovered after exhausting cash; written off",
                    property_id,
                    written_off,
                )

        self._portfolio.remove_property(property_id)
        for key in (mortgage_key(property_id), income_key(property_id), upkeep_key(property_id)):
            self._ledger.remove_recurring(key)
        self._calculator.recompute(self._character)

        settlement = replace(settlement, cash_applied=applied, written_off=written_off)
        logger.info(
            "Sold property %s after %d months: net proceeds %s",
            property_id,
            settlement.months_held,
            settlement.net_proceeds,
        )
        return settlement

    def appreciate(self) -> Tuple[Property, ...]:
        """Apply one month of appreciation to every property."""

        updated = []
        for prop in self._portfolio.properties:
            if prop.appreciation_rate == 0:
                continue
            growth = prop.current_value * prop.appreciation_rate / 12
            new_value = max(prop.current_value + growth, ZERO)
            changed = replace(prop, current_value=new_value)
            self._portfolio.replace_property(changed)
            updated.append(changed)
        if updated:
            self._ledger.touch()
        return tuple(updated)

    def _settle(self, prop: Property, on: date) -> SaleSettlement:
        config = self._config
        months_held = whole_months_between(prop.acquired_on, on)
        tier = config.sale_tier(months_held)

        adjusted = prop.current_value * tier.value_multiplier
        closing = (
            adjusted * config.base_closing_rate * tier.closing_multiplier
            + prop.purchase_price * tier.flat_cost_rate
        )
        penalty = ZERO
        if months_held < config.early_payoff_months:
            penalty = prop.loan_amount * config.early_payoff_rate
        net = adjusted - closing - prop.loan_amount - penalty

        return SaleSettlement(
            property_id=prop.property_id,
            months_held=months_held,
            market_value=prop.current_value,
            adjusted_value=adjusted,
            closing_costs=closing,
            outstanding_loan=prop.loan_amount,
            early_payoff_penalty=penalty,
            net_proceeds=net,
        )


def _validate_purchase(price: Decimal, down: Decimal, term: int, rate: Decimal) -> None:
    if not is_valid_amount(price) or price == 0:
        raise InvalidInputError("Property price must be positive.")
    if not is_valid_amount(down):
        raise InvalidInputError("Down payment must be a non-negative amount.")
    if down > price:
        raise InvalidInputError("Down payment cannot exceed the purchase price.")
    if term <= 0:
        raise InvalidInputError("Loan term must be positive.")
    if not is_valid_amount(rate):
        raise InvalidInputError("Interest rate must be a non-negative amount.")
