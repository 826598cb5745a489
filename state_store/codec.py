"""JSON-safe encoding of the character aggregate."""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from ledger_core.models import (
    Asset,
    AssetCategory,
    Attributes,
    BasicNeeds,
    Character,
    HousingType,
    ItemEffects,
    Job,
    LifestyleItem,
    Property,
    RecurringEntry,
    RecurringKind,
    VehicleType,
)

SCHEMA_VERSION = 1


def _date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def asset_to_dict(asset: Asset) -> Dict[str, Any]:
    return {
        "asset_id": asset.asset_id,
        "name": asset.name,
        "category": asset.category.value,
        "quantity": str(asset.quantity),
        "purchase_price": str(asset.purchase_price),
        "current_price": str(asset.current_price),
    }


def asset_from_dict(data: Dict[str, Any]) -> Asset:
    return Asset(
        asset_id=data["asset_id"],
        name=data["name"],
        category=AssetCategory(data["category"]),
        quantity=Decimal(data["quantity"]),
        purchase_price=Decimal(data["purchase_price"]),
        current_price=Decimal(data["current_price"]),
    )


def property_to_dict(prop: Property) -> Dict[str, Any]:
    return {
        "property_id": prop.property_id,
        "listing_id": prop.listing_id,
        "name": prop.name,
        "category": prop.category,
        "purchase_price": str(prop.purchase_price),
        "current_value": str(prop.current_value),
        "down_payment": str(prop.down_payment),
        "loan_amount": str(prop.loan_amount),
        "loan_term_years": prop.loan_term_years,
        "annual_interest_rate": str(prop.annual_interest_rate),
        "monthly_payment": str(prop.monthly_payment),
        "monthly_income": str(prop.monthly_income),
        "monthly_expenses": str(prop.monthly_expenses),
        "acquired_on": prop.acquired_on.isoformat(),
        "appreciation_rate": str(prop.appreciation_rate),
    }


def property_from_dict(data: Dict[str, Any]) -> Property:
    return Property(
        property_id=data["property_id"],
        listing_id=data["listing_id"],
        name=data["name"],
        category=data["category"],
        purchase_price=Decimal(data["purchase_price"]),
        current_value=Decimal(data["current_value"]),
        down_payment=Decimal(data["down_payment"]),
        loan_amount=Decimal(data["loan_amount"]),
        loan_term_years=int(data["loan_term_years"]),
        annual_interest_rate=Decimal(data["annual_interest_rate"]),
        monthly_payment=Decimal(data["monthly_payment"]),
        monthly_income=Decimal(data["monthly_income"]),
        monthly_expenses=Decimal(data["monthly_expenses"]),
        acquired_on=date.fromisoformat(data["acquired_on"]),
        appreciation_rate=Decimal(data.get("appreciation_rate", "0")),
    )


def lifestyle_item_to_dict(item: LifestyleItem) -> Dict[str, Any]:
    return {
        "holding_id": item.holding_id,
        "item_id": item.item_id,
        "name": item.name,
        "category": item.category,
        "price": str(item.price),
        "maintenance_cost": str(item.maintenance_cost),
        "happiness": item.happiness,
        "prestige": item.prestige,
        "effects": {
            "health": item.effects.health,
            "time_commitment": item.effects.time_commitment,
            "social_status": item.effects.social_status,
            "environmental_impact": item.effects.environmental_impact,
            "stress_reduction": item.effects.stress_reduction,
        },
        "acquired_on": item.acquired_on.isoformat(),
        "duration_days": item.duration_days,
        "end_date": item.end_date.isoformat() if item.end_date else None,
        "unique": item.unique,
        "excludes": list(item.excludes),
        "applied": {name: delta for name, delta in item.applied},
    }


def lifestyle_item_from_dict(data: Dict[str, Any]) -> LifestyleItem:
    return LifestyleItem(
        holding_id=data["holding_id"],
        item_id=data["item_id"],
        name=data["name"],
        category=data["category"],
        price=Decimal(data["price"]),
        maintenance_cost=Decimal(data["maintenance_cost"]),
        happiness=float(data["happiness"]),
        prestige=float(data["prestige"]),
        effects=ItemEffects(**data.get("effects", {})),
        acquired_on=date.fromisoformat(data["acquired_on"]),
        duration_days=data.get("duration_days"),
        unique=bool(data.get("unique", False)),
        excludes=tuple(data.get("excludes", [])),
        applied=tuple(sorted((name, float(delta)) for name, delta in data.get("applied", {}).items())),
    )


def job_to_dict(job: Optional[Job]) -> Optional[Dict[str, Any]]:
    if job is None:
        return None
    return {
        "title": job.title,
        "annual_salary": str(job.annual_salary),
        "stress": job.stress,
        "happiness_impact": job.happiness_impact,
        "skill_gain": job.skill_gain,
        "time_commitment": job.time_commitment,
        "tenure_months": job.tenure_months,
    }


def job_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Job]:
    if data is None:
        return None
    return Job(
        title=data["title"],
        annual_salary=Decimal(data["annual_salary"]),
        stress=float(data.get("stress", 0.0)),
        happiness_impact=float(data.get("happiness_impact", 0.0)),
        skill_gain=float(data.get("skill_gain", 0.0)),
        time_commitment=float(data.get("time_commitment", 40.0)),
        tenure_months=int(data.get("tenure_months", 0)),
    )


def character_to_dict(character: Character) -> Dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "character_id": character.character_id,
        "name": character.name,
        "cash": str(character.cash),
        "net_worth": str(character.net_worth),
        "current_date": character.current_date.isoformat(),
        "last_processed_date": (
            character.last_processed_date.isoformat() if character.last_processed_date else None
        ),
        "day_count": character.day_count,
        "revision": character.revision,
        "attributes": character.attributes.to_dict(),
        "needs": character.needs.to_dict(),
        "housing": character.housing.value,
        "vehicle": character.vehicle.value,
        "job": job_to_dict(character.job),
        "assets": [asset_to_dict(asset) for asset in character.assets.values()],
        "properties": [property_to_dict(prop) for prop in character.properties.values()],
        "lifestyle_items": [
            lifestyle_item_to_dict(item) for item in character.lifestyle_items.values()
        ],
        "recurring": [
            {
                "key": entry.key,
                "kind": entry.kind.value,
                "amount": str(entry.amount),
                "label": entry.label,
            }
            for entry in character.recurring.values()
        ],
        "income_total": str(character.income_total),
        "expense_total": str(character.expense_total),
    }


def character_from_dict(data: Dict[str, Any]) -> Character:
    version = data.get("schema_version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise ValueError(f"Unsupported character schema version: {version}")

    assets = (asset_from_dict(entry) for entry in data.get("assets", []))
    properties = (property_from_dict(entry) for entry in data.get("properties", []))
    items = (lifestyle_item_from_dict(entry) for entry in data.get("lifestyle_items", []))
    recurring = (
        RecurringEntry(
            key=entry["key"],
            kind=RecurringKind(entry["kind"]),
            amount=Decimal(entry["amount"]),
            label=entry.get("label", ""),
        )
        for entry in data.get("recurring", [])
    )
    return Character(
        character_id=data["character_id"],
        name=data["name"],
        cash=Decimal(data["cash"]),
        net_worth=Decimal(data.get("net_worth", "0")),
        current_date=date.fromisoformat(data["current_date"]),
        last_processed_date=_date(data.get("last_processed_date")),
        day_count=int(data.get("day_count", 0)),
        revision=int(data.get("revision", 0)),
        attributes=Attributes(**data.get("attributes", {})),
        needs=BasicNeeds(**data.get("needs", {})),
        housing=HousingType(data.get("housing", HousingType.RENTED.value)),
        vehicle=VehicleType(data.get("vehicle", VehicleType.NONE.value)),
        job=job_from_dict(data.get("job")),
        assets={asset.asset_id: asset for asset in assets},
        properties={prop.property_id: prop for prop in properties},
        lifestyle_items={item.holding_id: item for item in items},
        recurring={entry.key: entry for entry in recurring},
        income_total=Decimal(data.get("income_total", "0")),
        expense_total=Decimal(data.get("expense_total", "0")),
    )
