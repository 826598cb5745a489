"""Engine configuration loading and validation tests."""

from decimal import Decimal
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from ledger_core.config import CONFIG_ENV_VAR, EngineConfig, TaxBracket, load_config
from ledger_core.models import HousingType


class EngineConfigTests(unittest.TestCase):
    def test_defaults_are_valid(self) -> None:
        config = EngineConfig()
        self.assertEqual(config.housing_costs[HousingType.RENTED], Decimal("1800"))
        self.assertEqual(config.sale_tier(0).value_multiplier, Decimal("0.85"))
        self.assertEqual(config.sale_tier(3).value_multiplier, Decimal("0.92"))
        self.assertEqual(config.sale_tier(24).value_multiplier, Decimal("1.00"))

    def test_unsorted_brackets_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            EngineConfig(
                tax_brackets=(
                    TaxBracket(Decimal("5000"), Decimal("0.10")),
                    TaxBracket(Decimal("3000"), Decimal("0.15")),
                )
            )

    def test_decreasing_rates_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            EngineConfig(
                tax_brackets=(
                    TaxBracket(Decimal("3000"), Decimal("0.20")),
                    TaxBracket(Decimal("6000"), Decimal("0.10")),
                )
            )

    def test_from_dict_overrides_and_parses(self) -> None:
        config = EngineConfig.from_dict(
            {
                "food_cost": "650",
                "housing_costs": {"none": 0, "shared": 700, "rented": 1500, "owned": 1000, "luxury": 4000},
                "salary_variance": 0,
                "tax_brackets": [{"upper": 2000, "rate": "0.05"}],
            }
        )
        self.assertEqual(config.food_cost, Decimal("650"))
        self.assertEqual(config.housing_costs[HousingType.RENTED], Decimal("1500"))
        self.assertEqual(config.salary_variance, 0.0)
        self.assertEqual(len(config.tax_brackets), 1)

    def test_weekly_commitment_budget(self) -> None:
        self.assertEqual(EngineConfig().max_weekly_commitment_hours, 80.0)
        config = EngineConfig.from_dict({"max_weekly_commitment_hours": 40})
        self.assertEqual(config.max_weekly_commitment_hours, 40.0)
        with self.assertRaises(ValueError):
            EngineConfig(max_weekly_commitment_hours=-1.0)

    def test_from_dict_rejects_unknown_keys(self) -> None:
        with self.assertRaises(ValueError):
            EngineConfig.from_dict({"coffee_budget": 12})

    def test_load_config_reads_env_path(self) -> None:
        with tempfile.TemporaryDirectory() as tempdir:
            path = Path(tempdir) / "config.json"
            path.write_text(json.dumps({"food_cost": 420}))
            with mock.patch.dict(os.environ, {CONFIG_ENV_VAR: str(path)}):
                config = load_config()
        self.assertEqual(config.food_cost, Decimal("420"))

    def test_load_config_defaults_without_env(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            config = load_config()
        self.assertEqual(config, EngineConfig())


if __name__ == "__main__":
    unittest.main()
