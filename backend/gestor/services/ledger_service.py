# Overview: Append-only inventory log: entry construction, attribution and queries.

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..models import InventoryLogEntry, Product
from ..time_utils import now_iso
from .store_service import new_id
"""
Inventory Ledger Invariants (authoritative)

- Append-only: entries are added, never updated or deleted.
- Exactly one entry per stock-affecting operation on a product.
- quantity is the signed delta; its sign matches the stock change.
- productName is a snapshot taken when the entry is written.
- For a retired product the deltas of all its entries, DELETION included, sum to zero.
"""


@dataclass(frozen=True)
class ActorRef:
    id: str
    name: str


SYSTEM_ACTOR = ActorRef(id="system", name="System")


def resolve_actor(actor) -> ActorRef:
    """Attribution for an entry: the employee, or the system sentinel when there is none."""
    if actor is None or not getattr(actor, "id", None):
        return SYSTEM_ACTOR
    return ActorRef(id=actor.id, name=getattr(actor, "name", "") or actor.id)


def append_log_entry(
    logs: list[InventoryLogEntry],
    *,
    product: Product,
    movement_type: str,
    quantity: float,
    actor=None,
) -> InventoryLogEntry:
    """
    Append one ledger entry.

    - No domain logic here; callers have already applied the delta.
    - Newest entries go first, matching how the log is read.
    """
    who = resolve_actor(actor)
    entry = InventoryLogEntry(
        id=new_id(),
        date=now_iso(),
        product_id=product.id,
        product_name=product.name,
        type=movement_type,
        quantity=quantity,
        user_id=who.id,
        user_name=who.name,
    )
    logs.insert(0, entry)
    return entry


def list_entries(
    logs: list[InventoryLogEntry],
    *,
    product_id: str | None = None,
    entry_type: str | None = None,
    limit: int | None = None,
) -> list[InventoryLogEntry]:
    """Entries newest first, optionally filtered by product and type."""
    rows = [
        e for e in logs
        if (product_id is None or e.product_id == product_id)
        and (entry_type is None or e.type == entry_type)
    ]
    rows.sort(key=lambda e: e.date, reverse=True)
    return rows[:limit] if limit is not None else rows


def net_quantity(logs: list[InventoryLogEntry], product_id: str) -> float:
    """Sum of signed deltas recorded for a product."""
    total = sum((Decimal(str(e.quantity)) for e in logs if e.product_id == product_id), Decimal("0"))
    return float(total)
