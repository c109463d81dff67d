from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import ClassVar

from .base import Record


class PaymentMethod:
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"

    ALL = (CASH, CARD, TRANSFER)
    LEGACY_ALIASES = {"EFECTIVO": CASH, "TARJETA": CARD, "TRANSFERENCIA": TRANSFER}


WALK_IN_CUSTOMER_NAME = "General Public"


def _money(value: float) -> Decimal:
    return Decimal(str(value))


@dataclass
class SaleLine(Record):
    """A cart/sale line. product_id is None for free (manually priced) items."""
    JSON_FIELDS: ClassVar[dict[str, str]] = {
        "product_id": "productId",
        "name": "name",
        "quantity": "quantity",
        "unit_price": "unitPrice",
        "discount": "discount",
        "cost": "cost",
    }
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset({"quantity", "unit_price", "discount", "cost"})

    product_id: str | None = None
    name: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0
    discount: float = 0.0
    cost: float = 0.0

    @property
    def is_free_item(self) -> bool:
        return not self.product_id

    def subtotal(self) -> Decimal:
        return (_money(self.unit_price) - _money(self.discount)) * _money(self.quantity)


def lines_total(lines: list[SaleLine]) -> float:
    """Σ (unitPrice - discount) * quantity, rounded half-up to cents."""
    total = sum((line.subtotal() for line in lines), Decimal("0"))
    return float(total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _load_lines(raw) -> list[SaleLine]:
    return [SaleLine.from_dict(item) for item in (raw or []) if isinstance(item, dict)]


@dataclass
class Sale(Record):
    JSON_FIELDS: ClassVar[dict[str, str]] = {
        "id": "id",
        "date": "date",
        "total": "total",
        "items": "items",
        "payment_method": "paymentMethod",
        "customer_id": "customerId",
        "customer_name": "customerName",
        "employee_id": "employeeId",
        "employee_name": "employeeName",
    }
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset({"total"})

    id: str = ""
    date: str = ""
    total: float = 0.0
    items: list[SaleLine] = field(default_factory=list)
    payment_method: str = PaymentMethod.CASH
    customer_id: str | None = None
    customer_name: str = WALK_IN_CUSTOMER_NAME
    employee_id: str | None = None
    employee_name: str | None = None

    @classmethod
    def _coerce(cls, attr, value):
        if attr == "items":
            return _load_lines(value)
        if attr == "payment_method" and isinstance(value, str):
            return PaymentMethod.LEGACY_ALIASES.get(value, value)
        return super()._coerce(attr, value)


@dataclass
class Quotation(Record):
    """Priced cart kept for a customer; never touches stock or the ledger."""
    JSON_FIELDS: ClassVar[dict[str, str]] = {
        "id": "id",
        "date": "date",
        "total": "total",
        "items": "items",
        "customer_id": "customerId",
        "customer_name": "customerName",
        "expiration_date": "expirationDate",
    }
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset({"total"})

    id: str = ""
    date: str = ""
    total: float = 0.0
    items: list[SaleLine] = field(default_factory=list)
    customer_id: str | None = None
    customer_name: str = WALK_IN_CUSTOMER_NAME
    expiration_date: str = ""

    @classmethod
    def _coerce(cls, attr, value):
        if attr == "items":
            return _load_lines(value)
        return super()._coerce(attr, value)
