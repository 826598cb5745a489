"""Daily, weekly and monthly update rules driven by the game clock."""

from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
import logging
import random
from typing import Optional, Sequence, Tuple

from ledger_core.config import EngineConfig
from ledger_core.ledger import PROPERTY_INCOME, PROPERTY_UPKEEP, Ledger
from ledger_core.models import Character, RecurringKind, clamp, safe_amount

from .expenses import Obligation, total_monthly_expense
from .lifestyle import LifestyleItemLifecycle
from .networth import NetWorthCalculator
from .properties import PropertyLifecycleManager

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


@dataclass(frozen=True)
class TickReport:
    """What one call to `advance_day` did."""

    day: date
    skipped: bool = False
    days_jumped: int = 0
    weekly: bool = False
    monthly: bool = False
    expired: Tuple[str, ...] = ()
    salary_paid: Decimal = ZERO
    property_cash_flow: Decimal = ZERO
    monthly_charge: Decimal = ZERO
    monthly_shortfall: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            "day": self.day.isoformat(),
            "skipped": self.skipped,
            "days_jumped": self.days_jumped,
            "weekly": self.weekly,
            "monthly": self.monthly,
            "expired": list(self.expired),
            "salary_paid": str(self.salary_paid),
            "property_cash_flow": str(self.property_cash_flow),
            "monthly_charge": str(self.monthly_charge),
            "monthly_shortfall": str(self.monthly_shortfall),
        }


class TimeTickProcessor:
    """Advances the aggregate by one simulated day per clock signal.

    Within a day the order is fixed: lifestyle expiry, needs decay, health
    convergence, salary, property cash flow; then the weekly and monthly rules
    when their boundaries are crossed. A date that does not move past the last
    processed date, or past the start date before the first tick, is ignored.
    """

    def __init__(
        self,
        character: Character,
        config: Optional[EngineConfig] = None,
        calculator: Optional[NetWorthCalculator] = None,
        rng: Optional[random.Random] = None,
        external_obligations: Sequence[Obligation] = (),
        external_income: Sequence[Obligation] = (),
    ) -> None:
        self._character = character
        self._config = config or EngineConfig()
        self._calculator = calculator or NetWorthCalculator(self._config)
        self._rng = rng or random.Random()
        self._external_obligations = tuple(external_obligations)
        self._external_income = tuple(external_income)
        self._ledger = Ledger(character)
        self._lifestyle = LifestyleItemLifecycle(character, self._config, self._calculator)
        self._properties = PropertyLifecycleManager(character, self._config, self._calculator)

    def advance_day(self, new_date: date) -> TickReport:
        character = self._character
        baseline = character.last_processed_date or character.current_date
        if new_date <= baseline:
            logger.warning("Day %s already processed; skipping", new_date)
            return TickReport(day=new_date, skipped=True)

        days_jumped = (new_date - baseline).days
        if days_jumped > 1:
            logger.warning(
                "Clock advanced %d days to %s; only the latest day is simulated",
                days_jumped,
                new_date,
            )

        character.current_date = new_date
        character.last_processed_date = new_date
        character.day_count += 1

        expired = self._lifestyle.expire_due(new_date)
        self._decay_needs()
        self._converge_health()
        salary = self._pay_salary()
        cash_flow = self._accrue_property_cash_flow()

        weekly = character.day_count % self._config.week_length_days == 0
        if weekly:
            self._apply_job_week()

        monthly = (new_date.year, new_date.month) != (baseline.year, baseline.month)
        charge = shortfall = ZERO
        if monthly:
            charge, shortfall = self._monthly()

        self._ledger.touch()
        self._calculator.recompute(character)
        logger.info(
            "Processed day %s (day %d): weekly=%s monthly=%s",
            new_date,
            character.day_count,
            weekly,
            monthly,
        )
        return TickReport(
            day=new_date,
            days_jumped=days_jumped,
            weekly=weekly,
            monthly=monthly,
            expired=tuple(item.holding_id for item in expired),
            salary_paid=salary,
            property_cash_flow=cash_flow,
            monthly_charge=charge,
            monthly_shortfall=shortfall,
        )

    def _decay_needs(self) -> None:
        changes = {name: -rate for name, rate in self._config.need_decay.items()}
        modifiers = self._config.housing_need_modifiers.get(self._character.housing, {})
        for name, delta in modifiers.items():
            changes[name] = changes.get(name, 0.0) + delta
        self._character.needs = self._character.needs.apply(changes)

    def health_target(self) -> float:
        weights = self._config.health_weights
        needs = self._character.needs
        stress = self._character.attributes.stress
        target = (
            weights.get("hunger", 0.0) * needs.hunger
            + weights.get("thirst", 0.0) * needs.thirst
            + weights.get("energy", 0.0) * needs.energy
            + weights.get("comfort", 0.0) * needs.comfort
            + weights.get("stress", 0.0) * (100.0 - stress)
        )
        return clamp(target)

    def _converge_health(self) -> None:
        limit = self._config.max_daily_health_delta
        current = self._character.attributes.health
        step = max(-limit, min(limit, self.health_target() - current))
        self._character.attributes, _ = self._character.attributes.apply({"health": step})

    def _pay_salary(self) -> Decimal:
        job = self._character.job
        if job is None or self._character.day_count % self._config.salary_period_days != 0:
            return ZERO
        variance = self._config.salary_variance
        factor = Decimal(str(round(1 + self._rng.uniform(-variance, variance), 6)))
        base = safe_amount(job.annual_salary) / self._config.salary_periods_per_year
        amount = (base * factor).quantize(CENT, rounding=ROUND_HALF_UP)
        paid = self._ledger.credit(amount)
        self._ledger.record_income(paid)
        logger.info("Paid salary %s for %s", paid, job.title)
        return paid

    def _accrue_property_cash_flow(self) -> Decimal:
        days = self._config.accrual_days_per_month
        income = self._ledger.recurring_total(RecurringKind.INCOME, PROPERTY_INCOME) / days
        upkeep = self._ledger.recurring_total(RecurringKind.EXPENSE, PROPERTY_UPKEEP) / days
        if income:
            self._ledger.credit(income)
            self._ledger.record_income(income)
        if upkeep:
            paid = self._ledger.debit(upkeep)
            self._ledger.record_expense(paid)
            return income - paid
        return income

    def _apply_job_week(self) -> None:
        job = self._character.job
        if job is None:
            return
        fraction = self._config.weekly_job_fraction
        self._character.attributes, _ = self._character.attributes.apply(
            {
                "happiness": job.happiness_impact * fraction,
                "stress": job.stress * fraction,
                "skills": job.skill_gain * fraction,
            }
        )

    def _monthly(self) -> Tuple[Decimal, Decimal]:
        character = self._character
        charge = total_monthly_expense(
            character, self._config, self._external_obligations, self._external_income
        )
        paid = self._ledger.debit(charge)
        self._ledger.record_expense(paid)
        shortfall = charge - paid
        if shortfall > 0:
            logger.warning("Monthly expenses of %s exceeded cash by %s", charge, shortfall)

        self._apply_monthly_health()
        if character.job is not None:
            character.job = replace(character.job, tenure_months=character.job.tenure_months + 1)
        self._properties.appreciate()
        logger.info("Monthly settlement on %s: charged %s", character.current_date, paid)
        return charge, shortfall

    def _apply_monthly_health(self) -> None:
        config = self._config
        attributes = self._character.attributes
        step = config.monthly_health_delta
        delta = 0.0
        if attributes.happiness >= config.happiness_high:
            delta += step
        elif attributes.happiness <= config.happiness_low:
            delta -= step
        if attributes.social_connections >= config.social_high:
            delta += step / 2
        elif attributes.social_connections <= config.social_low:
            delta -= step / 2
        if attributes.environmental_impact >= config.environment_high:
            delta -= step
        elif attributes.environmental_impact <= config.environment_low:
            delta += step / 2
        if delta:
            self._character.attributes, _ = attributes.apply({"health": delta})
