from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .base import Record


class MeasurementUnit:
    UNIT = "UNIT"
    KG = "KG"
    G = "G"
    L = "L"
    ML = "ML"
    M = "M"

    ALL = (UNIT, KG, G, L, ML, M)
    LEGACY_ALIASES = {"UNIDAD": UNIT}


class MovementType:
    """Inventory log entry types."""
    ENTRY = "ENTRY"
    SALE = "SALE"
    ADJUSTMENT = "ADJUSTMENT"
    DELETION = "DELETION"

    ALL = (ENTRY, SALE, ADJUSTMENT, DELETION)
    LEGACY_ALIASES = {
        "ENTRADA": ENTRY,
        "VENTA": SALE,
        "AJUSTE": ADJUSTMENT,
        "ELIMINACION": DELETION,
    }


@dataclass
class Product(Record):
    """
    Product master data.

    stock is a signed decimal. Under the default "reject" stock policy it
    never goes below zero; see InventoryLedger.
    """
    JSON_FIELDS: ClassVar[dict[str, str]] = {
        "id": "id",
        "name": "name",
        "description": "description",
        "price": "price",
        "cost": "cost",
        "stock": "stock",
        "min_stock": "minStock",
        "category": "category",
        "supplier_id": "supplierId",
        "measurement_unit": "measurementUnit",
        "measurement_value": "measurementValue",
        "image": "image",
    }
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"price", "cost", "stock", "min_stock", "measurement_value"}
    )

    id: str = ""
    name: str = ""
    description: str = ""
    price: float = 0.0
    cost: float = 0.0
    stock: float = 0.0
    min_stock: float = 5.0
    category: str = "General"
    supplier_id: str = ""
    measurement_unit: str = MeasurementUnit.UNIT
    measurement_value: float = 1.0
    image: str | None = None

    @classmethod
    def _coerce(cls, attr, value):
        if attr == "measurement_unit" and isinstance(value, str):
            return MeasurementUnit.LEGACY_ALIASES.get(value, value)
        return super()._coerce(attr, value)

    def to_dict(self) -> dict:
        out = super().to_dict()
        if out.get("image") is None:
            out.pop("image", None)
        return out

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock


@dataclass
class InventoryLogEntry(Record):
    """
    One stock movement. Append-only: entries are never mutated or deleted.

    quantity is the signed delta applied to the product at the time the
    entry was recorded; productName is a snapshot of the name at that time.
    """
    JSON_FIELDS: ClassVar[dict[str, str]] = {
        "id": "id",
        "date": "date",
        "product_id": "productId",
        "product_name": "productName",
        "type": "type",
        "quantity": "quantity",
        "user_id": "userId",
        "user_name": "userName",
    }
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset({"quantity"})

    id: str = ""
    date: str = ""
    product_id: str = ""
    product_name: str = ""
    type: str = MovementType.ADJUSTMENT
    quantity: float = 0.0
    user_id: str = ""
    user_name: str = ""

    @classmethod
    def _coerce(cls, attr, value):
        if attr == "type" and isinstance(value, str):
            return MovementType.LEGACY_ALIASES.get(value, value)
        return super()._coerce(attr, value)
