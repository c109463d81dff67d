from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .base import Record


@dataclass
class Supplier(Record):
    JSON_FIELDS: ClassVar[dict[str, str]] = {
        "id": "id",
        "name": "name",
        "contact_name": "contactName",
        "phone": "phone",
        "email": "email",
    }

    id: str = ""
    name: str = ""
    contact_name: str = ""
    phone: str = ""
    email: str = ""


@dataclass
class Customer(Record):
    JSON_FIELDS: ClassVar[dict[str, str]] = {
        "id": "id",
        "name": "name",
        "tax_id": "taxId",
        "email": "email",
        "phone": "phone",
        "address": "address",
    }

    id: str = ""
    name: str = ""
    tax_id: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""


@dataclass
class Expense(Record):
    JSON_FIELDS: ClassVar[dict[str, str]] = {
        "id": "id",
        "description": "description",
        "amount": "amount",
        "category": "category",
        "date": "date",
    }
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset({"amount"})

    id: str = ""
    description: str = ""
    amount: float = 0.0
    category: str = "General"
    date: str = ""
