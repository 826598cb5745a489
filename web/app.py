"""Local-first FastAPI shell for the life simulation engine."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ledger_core.config import load_config
from ledger_core.errors import SimulationError
from ledger_core.models import ItemEffects, Job, LifestyleListing, PropertyListing
from sim_engine.engine import CommandResult, SimulationEngine, create_character
from state_store.store import FileStateStore

app = FastAPI(title="LifeSim", description="Local-first simulation shell")

_CONTEXT: Dict[str, Optional[str]] = {"state_dir": None, "character_id": None}
_ENGINES: Dict[Tuple[str, str], SimulationEngine] = {}


class ContextRequest(BaseModel):
    state_dir: str
    character_id: str
    create: bool = False
    name: Optional[str] = None
    start_date: Optional[date] = None
    starting_wealth: str = "bootstrapped"


class AssetTradeRequest(BaseModel):
    action: str
    asset_id: str
    name: Optional[str] = None
    category: str = "equity"
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None


class PropertyRequest(BaseModel):
    action: str
    listing_id: Optional[str] = None
    property_id: Optional[str] = None
    name: Optional[str] = None
    category: str = "residential"
    price: Optional[Decimal] = None
    down_payment: Optional[Decimal] = None
    monthly_income: Decimal = Decimal("0")
    monthly_expenses: Decimal = Decimal("0")
    appreciation_rate: Decimal = Decimal("0")
    loan_term_years: Optional[int] = None
    annual_rate: Optional[Decimal] = None


class EffectsInput(BaseModel):
    health: float = 0.0
    time_commitment: float = 0.0
    social_status: float = 0.0
    environmental_impact: float = 0.0
    stress_reduction: float = 0.0


class LifestyleRequest(BaseModel):
    action: str
    item_id: Optional[str] = None
    holding_id: Optional[str] = None
    name: Optional[str] = None
    category: str = "general"
    price: Decimal = Decimal("0")
    maintenance_cost: Decimal = Decimal("0")
    happiness: float = 0.0
    prestige: float = 0.0
    effects: Optional[EffectsInput] = None
    duration_days: Optional[int] = None
    unique: bool = False
    requires_item_ids: Optional[List[str]] = None
    requires_net_worth: Optional[Decimal] = None
    excludes: Optional[List[str]] = None


class ChoiceRequest(BaseModel):
    type: str


class JobRequest(BaseModel):
    title: Optional[str] = None
    annual_salary: Optional[Decimal] = None
    stress: float = 0.0
    happiness_impact: float = 0.0
    skill_gain: float = 0.0
    time_commitment: float = 40.0


class AdvanceRequest(BaseModel):
    days: int = 1


@app.middleware("http")
async def _local_only(request: Request, call_next):
    client = request.client
    if client is not None:
        host = client.host
        if host not in {"127.0.0.1", "::1", "testclient"}:
            return JSONResponse({"error": "Remote access disabled."}, status_code=403)
    return await call_next(request)


async def _handle_errors(request: Request, exc: Exception):
    kind = getattr(exc, "kind", None)
    body = {"error": str(exc)}
    if kind is not None:
        body["kind"] = kind.value
    return JSONResponse(body, status_code=400)


for _exc_class in (SimulationError, ValueError, KeyError):
    app.add_exception_handler(_exc_class, _handle_errors)


@app.post("/api/context")
async def set_context(payload: ContextRequest):
    store = FileStateStore(Path(payload.state_dir))
    if payload.create:
        if store.exists(payload.character_id):
            raise ValueError(f"Character already exists: {payload.character_id}")
        character = create_character(
            payload.character_id,
            payload.name or payload.character_id,
            payload.start_date or date.today(),
            payload.starting_wealth,
        )
        store.save_character(character)
    else:
        store.load_character(payload.character_id)
    _CONTEXT["state_dir"] = payload.state_dir
    _CONTEXT["character_id"] = payload.character_id
    _ENGINES.pop((str(Path(payload.state_dir)), payload.character_id), None)
    return {"status": "ok"}


@app.get("/api/character")
async def character():
    return _get_engine().summary()


@app.get("/api/net-worth")
async def net_worth():
    return _get_engine().breakdown().to_dict()


@app.get("/api/statement")
async def statement():
    return _decimals_to_str(_get_engine().monthly_statement().to_dict())


@app.get("/api/properties/{property_id}/preview")
async def preview_property_sale(property_id: str):
    return _get_engine().preview_sale(property_id).to_dict()


@app.post("/api/assets")
async def trade_asset(payload: AssetTradeRequest):
    engine = _get_engine()
    action = payload.action.lower()
    if action == "buy":
        _require(payload.quantity is not None and payload.price is not None, "quantity and price required.")
        result = engine.buy_asset(
            payload.asset_id,
            payload.name or payload.asset_id,
            payload.category,
            payload.quantity,
            payload.price,
        )
    elif action == "sell":
        result = engine.sell_asset(payload.asset_id, payload.quantity)
    elif action == "price":
        _require(payload.price is not None, "price required.")
        result = engine.update_asset_price(payload.asset_id, payload.price)
    else:
        raise ValueError(f"Unsupported asset action: {payload.action}")
    return _respond(result)


@app.post("/api/properties")
async def trade_property(payload: PropertyRequest):
    engine = _get_engine()
    action = payload.action.lower()
    if action == "buy":
        _require(
            payload.listing_id is not None
            and payload.price is not None
            and payload.down_payment is not None,
            "listing_id, price and down_payment required.",
        )
        listing = PropertyListing(
            listing_id=payload.listing_id,
            name=payload.name or payload.listing_id,
            category=payload.category,
            price=payload.price,
            monthly_income=payload.monthly_income,
            monthly_expenses=payload.monthly_expenses,
            appreciation_rate=payload.appreciation_rate,
        )
        result = engine.buy_property(
            listing, payload.down_payment, payload.loan_term_years, payload.annual_rate
        )
    elif action == "sell":
        _require(payload.property_id is not None, "property_id required.")
        result = engine.sell_property(payload.property_id)
    else:
        raise ValueError(f"Unsupported property action: {payload.action}")
    return _respond(result)


@app.post("/api/lifestyle")
async def lifestyle(payload: LifestyleRequest):
    engine = _get_engine()
    action = payload.action.lower()
    if action == "acquire":
        _require(payload.item_id is not None, "item_id required.")
        effects = payload.effects or EffectsInput()
        listing = LifestyleListing(
            item_id=payload.item_id,
            name=payload.name or payload.item_id,
            category=payload.category,
            price=payload.price,
            maintenance_cost=payload.maintenance_cost,
            happiness=payload.happiness,
            prestige=payload.prestige,
            effects=ItemEffects(
                health=effects.health,
                time_commitment=effects.time_commitment,
                social_status=effects.social_status,
                environmental_impact=effects.environmental_impact,
                stress_reduction=effects.stress_reduction,
            ),
            duration_days=payload.duration_days,
            unique=payload.unique,
            requires_item_ids=tuple(payload.requires_item_ids or ()),
            requires_net_worth=payload.requires_net_worth,
            excludes=tuple(payload.excludes or ()),
        )
        result = engine.acquire_lifestyle_item(listing)
    elif action == "release":
        _require(payload.holding_id is not None, "holding_id required.")
        result = engine.release_lifestyle_item(payload.holding_id)
    else:
        raise ValueError(f"Unsupported lifestyle action: {payload.action}")
    return _respond(result)


@app.post("/api/housing")
async def housing(payload: ChoiceRequest):
    return _respond(_get_engine().set_housing(payload.type))


@app.post("/api/vehicle")
async def vehicle(payload: ChoiceRequest):
    return _respond(_get_engine().set_vehicle(payload.type))


@app.post("/api/job")
async def job(payload: JobRequest):
    engine = _get_engine()
    if payload.title is None:
        return _respond(engine.clear_job())
    _require(payload.annual_salary is not None, "annual_salary required.")
    return _respond(
        engine.set_job(
            Job(
                title=payload.title,
                annual_salary=payload.annual_salary,
                stress=payload.stress,
                happiness_impact=payload.happiness_impact,
                skill_gain=payload.skill_gain,
                time_commitment=payload.time_commitment,
            )
        )
    )


@app.post("/api/time/advance")
async def advance_time(payload: AdvanceRequest):
    if payload.days <= 0:
        raise HTTPException(status_code=400, detail="days must be positive.")
    engine = _get_engine()
    reports = []
    for _ in range(payload.days):
        result = engine.advance_day(engine.character.current_date + timedelta(days=1))
        _respond(result)
        reports.append(result.payload)
    return {"days": reports, "cash": str(engine.cash), "net_worth": str(engine.net_worth)}


def _require_context() -> Tuple[str, str]:
    state_dir = _CONTEXT.get("state_dir")
    character_id = _CONTEXT.get("character_id")
    if not state_dir or not character_id:
        raise HTTPException(status_code=400, detail="Context not set.")
    return state_dir, character_id


def _get_engine() -> SimulationEngine:
    state_dir, character_id = _require_context()
    key = (str(Path(state_dir)), character_id)
    engine = _ENGINES.get(key)
    if engine is None:
        store = FileStateStore(Path(state_dir))
        engine = SimulationEngine(
            store.load_character(character_id), config=load_config(), store=store
        )
        _ENGINES[key] = engine
    return engine


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise HTTPException(status_code=400, detail=message)


def _respond(result: CommandResult) -> dict:
    if not result.ok:
        raise HTTPException(
            status_code=400,
            detail={"kind": result.error.value, "message": result.message},
        )
    return result.to_dict()


def _decimals_to_str(data):
    if isinstance(data, dict):
        return {key: _decimals_to_str(value) for key, value in data.items()}
    if isinstance(data, Decimal):
        return str(data)
    return data


def _reset_state() -> None:
    _CONTEXT["state_dir"] = None
    _CONTEXT["character_id"] = None
    _ENGINES.clear()
