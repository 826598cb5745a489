"""Daily, weekly and monthly tick processing tests."""

from datetime import date, timedelta
from decimal import Decimal
import random
import unittest

from ledger_core.config import EngineConfig
from ledger_core.models import Attributes, Character, Job, LifestyleListing, PropertyListing
from sim_engine.lifestyle import LifestyleItemLifecycle
from sim_engine.properties import PropertyLifecycleManager
from sim_engine.ticks import TimeTickProcessor


def _character(cash: str = "10000", current: date = date(2024, 1, 1)) -> Character:
    return Character(
        character_id="alex",
        name="Alex",
        cash=Decimal(cash),
        current_date=current,
    )


class TimeTickTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = EngineConfig(salary_variance=0.0)

    def _processor(self, character: Character) -> TimeTickProcessor:
        return TimeTickProcessor(character, self.config, rng=random.Random(7))

    def _run_days(self, processor: TimeTickProcessor, start: date, days: int) -> None:
        for offset in range(1, days + 1):
            processor.advance_day(start + timedelta(days=offset))

    def test_repeating_a_day_changes_nothing(self) -> None:
        character = _character()
        processor = self._processor(character)
        processor.advance_day(date(2024, 1, 2))
        snapshot = (character.cash, character.needs, character.attributes, character.revision)

        repeat = processor.advance_day(date(2024, 1, 2))
        earlier = processor.advance_day(date(2024, 1, 1))
        self.assertTrue(repeat.skipped)
        self.assertTrue(earlier.skipped)
        self.assertEqual(
            (character.cash, character.needs, character.attributes, character.revision), snapshot
        )
        self.assertEqual(character.day_count, 1)

    def test_needs_decay_and_health_converges(self) -> None:
        character = _character()
        processor = self._processor(character)
        processor.advance_day(date(2024, 1, 2))
        self.assertEqual(character.needs.hunger, 72.0)
        self.assertEqual(character.needs.thirst, 68.0)
        self.assertEqual(character.needs.energy, 74.0)
        self.assertEqual(character.needs.comfort, 80.0)
        self.assertEqual(character.attributes.health, 72.0)

    def test_salary_paid_every_fourteen_days(self) -> None:
        character = _character(cash="1000")
        character.job = Job(title="Analyst", annual_salary=Decimal("52000"))
        processor = self._processor(character)
        self._run_days(processor, date(2024, 1, 1), 13)
        self.assertEqual(character.cash, Decimal("1000"))
        report = processor.advance_day(date(2024, 1, 15))
        self.assertEqual(report.salary_paid, Decimal("2000.00"))
        self.assertEqual(character.cash, Decimal("3000"))

    def test_repeated_payday_pays_once(self) -> None:
        character = _character(cash="1000")
        character.job = Job(title="Analyst", annual_salary=Decimal("52000"))
        processor = self._processor(character)
        self._run_days(processor, date(2024, 1, 1), 14)
        self.assertEqual(character.income_total, Decimal("2000.00"))

        repeat = processor.advance_day(date(2024, 1, 15))
        self.assertTrue(repeat.skipped)
        self.assertEqual(repeat.salary_paid, Decimal("0"))
        self.assertEqual(character.cash, Decimal("3000"))
        self.assertEqual(character.income_total, Decimal("2000"))
        self.assertEqual(character.day_count, 14)

    def test_weekly_job_effects(self) -> None:
        character = _character()
        character.job = Job(
            title="Analyst",
            annual_salary=Decimal("0"),
            stress=8.0,
            happiness_impact=4.0,
            skill_gain=4.0,
        )
        processor = self._processor(character)
        self._run_days(processor, date(2024, 1, 1), 7)
        self.assertEqual(character.attributes.stress, 22.0)
        self.assertEqual(character.attributes.happiness, 51.0)
        self.assertEqual(character.attributes.skills, 11.0)

    def test_month_boundary_charges_expenses(self) -> None:
        character = _character(current=date(2024, 1, 30))
        character.job = Job(title="Analyst", annual_salary=Decimal("0"), tenure_months=2)
        processor = self._processor(character)
        first = processor.advance_day(date(2024, 1, 31))
        self.assertFalse(first.monthly)
        report = processor.advance_day(date(2024, 2, 1))
        self.assertTrue(report.monthly)
        self.assertEqual(report.monthly_charge, Decimal("2500"))
        self.assertEqual(character.cash, Decimal("7500"))
        self.assertEqual(character.job.tenure_months, 3)

    def test_first_tick_after_start_can_cross_a_month(self) -> None:
        character = _character(current=date(2024, 1, 31))
        report = self._processor(character).advance_day(date(2024, 2, 1))
        self.assertTrue(report.monthly)
        self.assertEqual(report.days_jumped, 1)
        self.assertEqual(report.monthly_charge, Decimal("2500"))
        self.assertEqual(character.cash, Decimal("7500"))

    def test_first_tick_jump_counts_from_start_date(self) -> None:
        character = _character()
        report = self._processor(character).advance_day(date(2024, 3, 15))
        self.assertEqual(report.days_jumped, 74)
        self.assertTrue(report.monthly)
        self.assertEqual(report.monthly_charge, Decimal("2500"))
        self.assertEqual(character.day_count, 1)

    def test_first_tick_before_start_date_is_ignored(self) -> None:
        character = _character(current=date(2024, 5, 1))
        report = self._processor(character).advance_day(date(2024, 4, 1))
        self.assertTrue(report.skipped)
        self.assertEqual(character.current_date, date(2024, 5, 1))
        self.assertIsNone(character.last_processed_date)
        self.assertEqual(character.cash, Decimal("10000"))

    def test_monthly_health_rewards_good_habits(self) -> None:
        self.config = EngineConfig(salary_variance=0.0, max_daily_health_delta=0.0)
        character = _character(current=date(2024, 1, 31))
        character.attributes = Attributes(happiness=80.0, social_connections=70.0, environmental_impact=0.0)
        self._processor(character).advance_day(date(2024, 2, 1))
        self.assertEqual(character.attributes.health, 72.0)

    def test_monthly_health_penalises_poor_habits(self) -> None:
        self.config = EngineConfig(salary_variance=0.0, max_daily_health_delta=0.0)
        character = _character(current=date(2024, 1, 31))
        character.attributes = Attributes(happiness=20.0, social_connections=10.0, environmental_impact=80.0)
        self._processor(character).advance_day(date(2024, 2, 1))
        self.assertEqual(character.attributes.health, 67.5)

    def test_no_monthly_health_change_mid_month(self) -> None:
        self.config = EngineConfig(salary_variance=0.0, max_daily_health_delta=0.0)
        character = _character()
        character.attributes = Attributes(happiness=80.0, social_connections=70.0)
        self._processor(character).advance_day(date(2024, 1, 2))
        self.assertEqual(character.attributes.health, 70.0)

    def test_monthly_shortfall_is_reported(self) -> None:
        character = _character(cash="1000", current=date(2024, 1, 30))
        processor = self._processor(character)
        processor.advance_day(date(2024, 1, 31))
        report = processor.advance_day(date(2024, 2, 1))
        self.assertEqual(character.cash, Decimal("0"))
        self.assertEqual(report.monthly_shortfall, Decimal("1500"))

    def test_temporary_items_expire_during_ticks(self) -> None:
        character = _character()
        lifecycle = LifestyleItemLifecycle(character, self.config)
        lifecycle.acquire(
            LifestyleListing(
                item_id="festival",
                name="Festival",
                category="leisure",
                price=Decimal("200"),
                happiness=8.0,
                duration_days=2,
            )
        )
        processor = self._processor(character)
        processor.advance_day(date(2024, 1, 3))
        self.assertIn("festival", character.lifestyle_items)
        report = processor.advance_day(date(2024, 1, 4))
        self.assertEqual(report.expired, ("festival",))
        self.assertEqual(character.attributes.happiness, 50.0)

    def test_property_cash_flow_accrues_daily(self) -> None:
        character = _character(cash="100000")
        PropertyLifecycleManager(character, self.config).purchase(
            PropertyListing(
                listing_id="duplex",
                name="Duplex",
                category="rental",
                price=Decimal("50000"),
                monthly_income=Decimal("300"),
                monthly_expenses=Decimal("60"),
            ),
            Decimal("50000"),
        )
        processor = self._processor(character)
        report = processor.advance_day(date(2024, 1, 2))
        self.assertEqual(report.property_cash_flow, Decimal("8"))
        self.assertEqual(character.cash, Decimal("50008"))

    def test_clock_jump_simulates_one_day(self) -> None:
        character = _character()
        processor = self._processor(character)
        processor.advance_day(date(2024, 1, 2))
        report = processor.advance_day(date(2024, 1, 10))
        self.assertEqual(report.days_jumped, 8)
        self.assertEqual(character.day_count, 2)
        self.assertEqual(character.needs.hunger, 64.0)
        self.assertEqual(character.current_date, date(2024, 1, 10))

    def test_net_worth_tracks_cash_after_tick(self) -> None:
        character = _character(current=date(2024, 1, 30))
        processor = self._processor(character)
        processor.advance_day(date(2024, 1, 31))
        processor.advance_day(date(2024, 2, 1))
        self.assertEqual(character.net_worth, character.cash)


if __name__ == "__main__":
    unittest.main()
