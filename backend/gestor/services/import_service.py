# Overview: Spreadsheet row normalisation for bulk product import.

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..models import MeasurementUnit, Product
from ..validation import ValidationError

DEFAULT_UNIT = MeasurementUnit.UNIT
DEFAULT_MIN_STOCK = 5
DEFAULT_CATEGORY = "General"

# Spreadsheet headers seen in the wild -> canonical product keys
HEADER_ALIASES = {
    "name": "name",
    "nombre": "name",
    "product": "name",
    "price": "price",
    "precio": "price",
    "cost": "cost",
    "costo": "cost",
    "stock": "stock",
    "quantity": "stock",
    "cantidad": "stock",
    "minstock": "minStock",
    "min_stock": "minStock",
    "stockminimo": "minStock",
    "category": "category",
    "categoria": "category",
    "unit": "measurementUnit",
    "unidad": "measurementUnit",
    "measurementunit": "measurementUnit",
    "measurementvalue": "measurementValue",
    "description": "description",
    "descripcion": "description",
    "supplierid": "supplierId",
    "supplier_id": "supplierId",
}


class ImportRowsError(ValidationError):
    """One or more rows were invalid; nothing from the batch was written."""

    def __init__(self, errors: list[dict]):
        super().__init__(f"{len(errors)} row(s) failed validation; nothing was imported")
        self.errors = errors


@dataclass
class ImportReport:
    created: list[Product] = field(default_factory=list)
    entries_logged: int = 0

    def to_dict(self) -> dict:
        return {
            "created": len(self.created),
            "entries_logged": self.entries_logged,
            "product_ids": [p.id for p in self.created],
        }


def _canonical_header(header: str) -> str:
    key = str(header or "").strip()
    return HEADER_ALIASES.get(key.lower().replace(" ", ""), key)


def normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    """
    Map a raw spreadsheet row onto product fields and fill documented defaults.

    Requires name and price. Empty cells count as missing. Numeric
    validation happens when the product is built.
    """
    data: dict[str, Any] = {}
    for header, value in (row or {}).items():
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            continue
        data[_canonical_header(header)] = value

    missing = [f for f in ("name", "price") if f not in data]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    data.setdefault("measurementUnit", DEFAULT_UNIT)
    data.setdefault("minStock", DEFAULT_MIN_STOCK)
    data.setdefault("category", DEFAULT_CATEGORY)
    data.setdefault("stock", 0)
    return data


def read_csv_rows(source: str | Iterable[str]) -> list[dict[str, str]]:
    """Rows of a CSV export (first line is the header) as dicts."""
    if isinstance(source, str):
        source = io.StringIO(source)
    return [dict(r) for r in csv.DictReader(source)]
