from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from .base import Record

WEEK_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass
class BusinessConfig(Record):
    """Singleton business profile; replaced wholesale on save."""
    JSON_FIELDS: ClassVar[dict[str, str]] = {
        "name": "name",
        "tax_id": "taxId",
        "address": "address",
        "phone": "phone",
        "email": "email",
        "receipt_message": "receiptMessage",
        "currency_symbol": "currencySymbol",
        "logo": "logo",
        "theme": "theme",
        "language": "language",
        "opening_hours": "openingHours",
    }

    name: str = ""
    tax_id: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    receipt_message: str = ""
    currency_symbol: str = "$"
    logo: str | None = None
    theme: str = "light"
    language: str = "en"
    opening_hours: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        out = super().to_dict()
        if out.get("logo") is None:
            out.pop("logo", None)
        return out
