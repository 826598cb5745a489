"""Operator CLI for the life simulation engine."""

from __future__ import annotations

import argparse
from datetime import date, timedelta
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ledger_core.config import load_config
from ledger_core.errors import SimulationError
from ledger_core.models import AssetCategory, HousingType, PropertyListing, VehicleType, to_decimal
from sim_engine.engine import STARTING_WEALTH, CommandResult, SimulationEngine, create_character
from state_store.store import FileStateStore

DEFAULT_STATE_DIR = ".lifesim"


class CommandFailedError(RuntimeError):
    """Raised when the engine rejects a command."""


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="lifesim")
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=("debug", "info", "warning", "error"),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    new_parser = subparsers.add_parser("new")
    _add_context_args(new_parser)
    new_parser.add_argument("--name", required=True)
    new_parser.add_argument("--start-date", required=True)
    new_parser.add_argument("--wealth", choices=tuple(STARTING_WEALTH), default="bootstrapped")
    new_parser.set_defaults(func=_new_character)

    show_parser = subparsers.add_parser("show")
    _add_context_args(show_parser)
    show_parser.set_defaults(func=_show)

    breakdown_parser = subparsers.add_parser("breakdown")
    _add_context_args(breakdown_parser)
    breakdown_parser.set_defaults(func=_breakdown)

    statement_parser = subparsers.add_parser("statement")
    _add_context_args(statement_parser)
    statement_parser.set_defaults(func=_statement)

    buy_asset = subparsers.add_parser("buy-asset")
    _add_context_args(buy_asset)
    buy_asset.add_argument("--asset-id", required=True)
    buy_asset.add_argument("--name")
    buy_asset.add_argument(
        "--category", choices=[item.value for item in AssetCategory], default="equity"
    )
    buy_asset.add_argument("--quantity", required=True)
    buy_asset.add_argument("--price", required=True)
    buy_asset.set_defaults(func=_buy_asset)

    sell_asset = subparsers.add_parser("sell-asset")
    _add_context_args(sell_asset)
    sell_asset.add_argument("--asset-id", required=True)
    sell_asset.add_argument("--quantity")
    sell_asset.set_defaults(func=_sell_asset)

    buy_property = subparsers.add_parser("buy-property")
    _add_context_args(buy_property)
    buy_property.add_argument("--listing-id", required=True)
    buy_property.add_argument("--name")
    buy_property.add_argument("--category", default="residential")
    buy_property.add_argument("--price", required=True)
    buy_property.add_argument("--down-payment", required=True)
    buy_property.add_argument("--monthly-income", default="0")
    buy_property.add_argument("--monthly-expenses", default="0")
    buy_property.add_argument("--appreciation-rate", default="0")
    buy_property.add_argument("--term-years", type=int)
    buy_property.add_argument("--rate")
    buy_property.set_defaults(func=_buy_property)

    sell_property = subparsers.add_parser("sell-property")
    _add_context_args(sell_property)
    sell_property.add_argument("--property-id", required=True)
    sell_property.add_argument("--preview", action="store_true")
    sell_property.set_defaults(func=_sell_property)

    advance_parser = subparsers.add_parser("advance")
    _add_context_args(advance_parser)
    advance_parser.add_argument("--days", type=int, default=1)
    advance_parser.set_defaults(func=_advance)

    housing_parser = subparsers.add_parser("housing")
    _add_context_args(housing_parser)
    housing_parser.add_argument("--type", required=True, choices=[item.value for item in HousingType])
    housing_parser.set_defaults(func=_housing)

    vehicle_parser = subparsers.add_parser("vehicle")
    _add_context_args(vehicle_parser)
    vehicle_parser.add_argument("--type", required=True, choices=[item.value for item in VehicleType])
    vehicle_parser.set_defaults(func=_vehicle)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), stream=sys.stderr)

    try:
        return args.func(args)
    except (ValueError, SimulationError, CommandFailedError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2


def _new_character(args: argparse.Namespace) -> int:
    store = _store(args)
    if store.exists(args.character):
        raise ValueError(f"Character already exists: {args.character}")
    character = create_character(
        args.character, args.name, _parse_date(args.start_date), args.wealth
    )
    engine = SimulationEngine(character, config=load_config(), store=store)
    store.save_character(engine.character)
    store.save_breakdown(engine.character, engine.breakdown())
    print(engine.character.character_id)
    return 0


def _show(args: argparse.Namespace) -> int:
    _print_json(_open_engine(args).summary())
    return 0


def _breakdown(args: argparse.Namespace) -> int:
    _print_json(_open_engine(args).breakdown().to_dict())
    return 0


def _statement(args: argparse.Namespace) -> int:
    _print_json(_open_engine(args).monthly_statement().to_dict())
    return 0


def _buy_asset(args: argparse.Namespace) -> int:
    engine = _open_engine(args)
    result = engine.buy_asset(
        args.asset_id,
        args.name or args.asset_id,
        args.category,
        args.quantity,
        args.price,
    )
    return _emit(result)


def _sell_asset(args: argparse.Namespace) -> int:
    engine = _open_engine(args)
    return _emit(engine.sell_asset(args.asset_id, args.quantity))


def _buy_property(args: argparse.Namespace) -> int:
    engine = _open_engine(args)
    listing = PropertyListing(
        listing_id=args.listing_id,
        name=args.name or args.listing_id,
        category=args.category,
        price=to_decimal(args.price),
        monthly_income=to_decimal(args.monthly_income),
        monthly_expenses=to_decimal(args.monthly_expenses),
        appreciation_rate=to_decimal(args.appreciation_rate),
    )
    result = engine.buy_property(listing, args.down_payment, args.term_years, args.rate)
    return _emit(result)


def _sell_property(args: argparse.Namespace) -> int:
    engine = _open_engine(args)
    if args.preview:
        _print_json(engine.preview_sale(args.property_id).to_dict())
        return 0
    return _emit(engine.sell_property(args.property_id))


def _advance(args: argparse.Namespace) -> int:
    if args.days <= 0:
        raise ValueError("--days must be positive.")
    engine = _open_engine(args)
    reports = []
    for _ in range(args.days):
        next_day = engine.character.current_date + timedelta(days=1)
        result = engine.advance_day(next_day)
        if not result.ok:
            raise CommandFailedError(f"{result.error.value}: {result.message}")
        reports.append(result.payload)
    _print_json({"days": reports, "cash": str(engine.cash), "net_worth": str(engine.net_worth)})
    return 0


def _housing(args: argparse.Namespace) -> int:
    return _emit(_open_engine(args).set_housing(args.type))


def _vehicle(args: argparse.Namespace) -> int:
    return _emit(_open_engine(args).set_vehicle(args.type))


def _add_context_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--state-dir", default=DEFAULT_STATE_DIR)
    parser.add_argument("--character", required=True)


def _store(args: argparse.Namespace) -> FileStateStore:
    return FileStateStore(Path(args.state_dir))


def _open_engine(args: argparse.Namespace) -> SimulationEngine:
    store = _store(args)
    character = store.load_character(args.character)
    return SimulationEngine(character, config=load_config(), store=store)


def _emit(result: CommandResult) -> int:
    if not result.ok:
        raise CommandFailedError(f"{result.error.value}: {result.message}")
    _print_json(result.to_dict())
    return 0


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Dates must be formatted as YYYY-MM-DD: {value}") from exc


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":
    raise SystemExit(main())
