"""Investment and property holdings of a character."""

from dataclasses import replace
from decimal import Decimal
import logging
from typing import Dict, Tuple

from .errors import InvalidInputError, NotFoundError
from .models import Asset, AssetCategory, Character, Property

logger = logging.getLogger(__name__)


class Portfolio:
    """Owns the asset and property collections of the aggregate."""

    def __init__(self, character: Character) -> None:
        self._character = character

    @property
    def assets(self) -> Tuple[Asset, ...]:
        return tuple(self._character.assets.values())

    @property
    def properties(self) -> Tuple[Property, ...]:
        return tuple(self._character.properties.values())

    def get_asset(self, asset_id: str) -> Asset:
        asset = self._character.assets.get(asset_id)
        if asset is None:
            raise NotFoundError(f"Unknown asset_id: {asset_id}")
        return asset

    def get_property(self, property_id: str) -> Property:
        prop = self._character.properties.get(property_id)
        if prop is None:
            raise NotFoundError(f"Unknown property_id: {property_id}")
        return prop

    def add_asset(
        self,
        asset_id: str,
        name: str,
        category: AssetCategory,
        quantity: Decimal,
        price: Decimal,
    ) -> Asset:
        """Add units, folding repeated buys into a weighted average price."""

        existing = self._character.assets.get(asset_id)
        if existing is None:
            asset = Asset(
                asset_id=asset_id,
                name=name,
                category=category,
                quantity=quantity,
                purchase_price=price,
                current_price=price,
            )
        elif existing.category != category:
            raise InvalidInputError(
                f"Asset {asset_id} is held as {existing.category.value}, not {category.value}."
            )
        else:
            total_quantity = existing.quantity + quantity
            total_cost = existing.quantity * existing.purchase_price + quantity * price
            average = total_cost / total_quantity if total_quantity > 0 else price
            asset = replace(
                existing,
                quantity=total_quantity,
                purchase_price=average,
                current_price=price,
            )
        self._character.assets[asset_id] = asset
        return asset

    def remove_asset_units(self, asset_id: str, quantity: Decimal) -> Asset:
        """Remove units and drop the holding once its quantity reaches zero."""

        asset = self.get_asset(asset_id)
        if quantity > asset.quantity:
            raise InvalidInputError(
                f"Cannot remove {quantity} units of {asset_id}; holding {asset.quantity}."
            )
        remaining = asset.quantity - quantity
        updated = replace(asset, quantity=remaining)
        if remaining == 0:
            del self._character.assets[asset_id]
            logger.debug("Asset %s fully sold", asset_id)
        else:
            self._character.assets[asset_id] = updated
        return updated

    def set_asset_price(self, asset_id: str, price: Decimal) -> Asset:
        asset = replace(self.get_asset(asset_id), current_price=price)
        self._character.assets[asset_id] = asset
        return asset

    def add_property(self, prop: Property) -> None:
        self._character.properties[prop.property_id] = prop

    def remove_property(self, property_id: str) -> Property:
        prop = self.get_property(property_id)
        del self._character.properties[property_id]
        return prop

    def replace_property(self, prop: Property) -> None:
        self.get_property(prop.property_id)
        self._character.properties[prop.property_id] = prop

    def asset_values_by_category(self) -> Dict[AssetCategory, Decimal]:
        totals = {category: Decimal("0") for category in AssetCategory}
        for asset in self._character.assets.values():
            totals[asset.category] += asset.market_value
        return totals

    def property_gross_value(self) -> Decimal:
        return sum((prop.current_value for prop in self.properties), Decimal("0"))

    def property_debt(self) -> Decimal:
        return sum((prop.loan_amount for prop in self.properties), Decimal("0"))
