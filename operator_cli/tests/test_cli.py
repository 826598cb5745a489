"""Smoke tests for the lifesim operator CLI."""

from decimal import Decimal
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO

from operator_cli import cli


class OperatorCliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tempdir = tempfile.TemporaryDirectory()
        self.context = ["--state-dir", self.tempdir.name, "--character", "alex"]

    def tearDown(self) -> None:
        self.tempdir.cleanup()

    def _run(self, args):
        out_buf = StringIO()
        err_buf = StringIO()
        with redirect_stdout(out_buf), redirect_stderr(err_buf):
            code = cli.main(args)
        return code, out_buf.getvalue(), err_buf.getvalue()

    def _new(self):
        code, output, _ = self._run(
            ["new", *self.context, "--name", "Alex", "--start-date", "2024-01-01"]
        )
        self.assertEqual(code, 0)
        return output.strip()

    def test_new_and_show(self) -> None:
        self.assertEqual(self._new(), "alex")
        code, output, _ = self._run(["show", *self.context])
        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(Decimal(payload["cash"]), Decimal("10000"))
        self.assertEqual(payload["current_date"], "2024-01-01")
        self.assertEqual(payload["recurring"], [])

    def test_new_refuses_duplicate(self) -> None:
        self._new()
        code, _, err = self._run(
            ["new", *self.context, "--name", "Alex", "--start-date", "2024-01-01"]
        )
        self.assertEqual(code, 2)
        self.assertIn("ERROR:", err)

    def test_buy_asset_then_breakdown(self) -> None:
        self._new()
        code, output, _ = self._run(
            ["buy-asset", *self.context, "--asset-id", "ACME", "--quantity", "10", "--price", "100"]
        )
        self.assertEqual(code, 0)
        self.assertTrue(json.loads(output)["ok"])

        code, output, _ = self._run(["breakdown", *self.context])
        self.assertEqual(code, 0)
        breakdown = json.loads(output)
        self.assertEqual(Decimal(breakdown["equities"]), Decimal("1000"))
        self.assertEqual(Decimal(breakdown["total"]), Decimal("10000"))

    def test_rejected_command_exits_with_error(self) -> None:
        self._new()
        code, _, err = self._run(
            ["buy-asset", *self.context, "--asset-id", "ACME", "--quantity", "1000", "--price", "100"]
        )
        self.assertEqual(code, 2)
        self.assertIn("InsufficientFunds", err)

    def test_unknown_character(self) -> None:
        code, _, err = self._run(["show", *self.context])
        self.assertEqual(code, 2)
        self.assertIn("ERROR:", err)

    def test_property_preview_and_sale(self) -> None:
        self._new()
        code, output, _ = self._run(
            [
                "buy-property",
                *self.context,
                "--listing-id",
                "cabin",
                "--price",
                "40000",
                "--down-payment",
                "8000",
            ]
        )
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output)["payload"]["property_id"], "cabin")

        code, output, _ = self._run(
            ["sell-property", *self.context, "--property-id", "cabin", "--preview"]
        )
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output)["months_held"], 0)

        code, output, _ = self._run(["sell-property", *self.context, "--property-id", "cabin"])
        self.assertEqual(code, 0)
        self.assertTrue(json.loads(output)["ok"])

    def test_advance_and_statement(self) -> None:
        self._new()
        self._run(["housing", *self.context, "--type", "shared"])
        code, output, _ = self._run(["advance", *self.context, "--days", "3"])
        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(len(payload["days"]), 3)
        self.assertEqual(payload["days"][-1]["day"], "2024-01-04")

        code, output, _ = self._run(["statement", *self.context])
        self.assertEqual(code, 0)
        statement = json.loads(output)
        self.assertEqual(Decimal(statement["expenses"]["housing"]), Decimal("900"))

    def test_bad_date_is_reported(self) -> None:
        code, _, err = self._run(
            ["new", *self.context, "--name", "Alex", "--start-date", "01/02/2024"]
        )
        self.assertEqual(code, 2)
        self.assertIn("YYYY-MM-DD", err)


if __name__ == "__main__":
    unittest.main()
