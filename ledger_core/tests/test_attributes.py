"""Attribute and need clamping tests."""

from datetime import date
import unittest

from ledger_core.models import Attributes, BasicNeeds, clamp, whole_months_between


class AttributeTests(unittest.TestCase):
    def test_construction_clamps_out_of_range_values(self) -> None:
        attributes = Attributes(happiness=140, stress=-5, health=float("nan"))
        self.assertEqual(attributes.happiness, 100.0)
        self.assertEqual(attributes.stress, 0.0)
        self.assertEqual(attributes.health, 0.0)

    def test_apply_reports_actually_applied_change(self) -> None:
        attributes = Attributes(happiness=95.0)
        updated, applied = attributes.apply({"happiness": 10.0, "stress": -30.0})
        self.assertEqual(updated.happiness, 100.0)
        self.assertEqual(applied["happiness"], 5.0)
        self.assertEqual(updated.stress, 0.0)
        self.assertEqual(applied["stress"], -20.0)

    def test_apply_rejects_unknown_attribute(self) -> None:
        with self.assertRaises(KeyError):
            Attributes().apply({"charisma": 1.0})

    def test_long_sequences_stay_in_range(self) -> None:
        attributes = Attributes()
        needs = BasicNeeds()
        for step in range(200):
            delta = 37.0 if step % 3 else -91.0
            attributes, _ = attributes.apply({"happiness": delta, "prestige": delta, "skills": -delta})
            needs = needs.apply({"hunger": -delta, "comfort": delta})
            for value in list(attributes.to_dict().values()) + list(needs.to_dict().values()):
                self.assertGreaterEqual(value, 0.0)
                self.assertLessEqual(value, 100.0)

    def test_clamp_bounds(self) -> None:
        self.assertEqual(clamp(-1), 0.0)
        self.assertEqual(clamp(101), 100.0)
        self.assertEqual(clamp(42.5), 42.5)

    def test_whole_months_between(self) -> None:
        self.assertEqual(whole_months_between(date(2024, 1, 15), date(2024, 2, 14)), 0)
        self.assertEqual(whole_months_between(date(2024, 1, 15), date(2024, 2, 15)), 1)
        self.assertEqual(whole_months_between(date(2024, 3, 1), date(2024, 1, 1)), 0)


if __name__ == "__main__":
    unittest.main()
