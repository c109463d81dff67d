# Overview: Stock movements; every quantity change goes through here and leaves one ledger entry.

from __future__ import annotations

import logging
from decimal import Decimal

from ..models import InventoryLogEntry, MovementType, Product
from ..validation import ValidationError, coerce_number
from .ledger_service import append_log_entry
from .store_service import RecordNotFound, WorkingSet, find_record
"""
Inventory Invariants & Stock Policy (authoritative)

- Product.stock is only changed by InventoryLedger; each change appends
  exactly one InventoryLogEntry whose quantity equals the applied delta.
- ENTRY deltas are positive, SALE deltas negative, ADJUSTMENT either sign,
  DELETION is always -stock at retirement.
- Stock policy "reject" (default): a SALE or ADJUSTMENT may not leave stock
  below zero (InsufficientStock). Policy "allow": stock may go negative,
  which is how back-orders were recorded historically.
- The ledger works on a WorkingSet; persisting is the caller's job.
"""

logger = logging.getLogger(__name__)


class StockPolicy:
    REJECT = "reject"
    ALLOW = "allow"

    ALL = (REJECT, ALLOW)


class ProductNotFound(RecordNotFound):
    pass


class InsufficientStock(ValidationError):
    """A movement would leave stock below zero under the reject policy."""

    def __init__(self, product: Product, requested: float, available: float):
        super().__init__(
            f"Insufficient stock for {product.name}: requested {requested:g}, available {available:g}"
        )
        self.product_id = product.id
        self.requested = requested
        self.available = available


def _add(a: float, b: float) -> float:
    return float(Decimal(str(a)) + Decimal(str(b)))


class InventoryLedger:
    _GUARDED_TYPES = (MovementType.SALE, MovementType.ADJUSTMENT)

    def __init__(self, stock_policy: str = StockPolicy.REJECT):
        if stock_policy not in StockPolicy.ALL:
            raise ValueError(f"Unknown stock policy: {stock_policy}")
        self.stock_policy = stock_policy

    def find_product(self, working: WorkingSet, product_id: str) -> Product:
        try:
            return find_record(working.products, product_id, "Product")
        except RecordNotFound as exc:
            raise ProductNotFound(str(exc))

    def apply_movement(
        self,
        working: WorkingSet,
        product_id: str,
        delta,
        movement_type: str,
        actor=None,
    ) -> tuple[Product, InventoryLogEntry]:
        """
        Apply delta to the product's stock and append the matching ledger entry.

        Raises ValidationError for a zero delta or a delta whose sign
        contradicts the movement type, ProductNotFound for an unknown id and
        InsufficientStock when the policy forbids the resulting stock.
        """
        if movement_type not in MovementType.ALL:
            raise ValidationError(f"Unknown movement type: {movement_type}")
        if movement_type == MovementType.DELETION:
            raise ValidationError("Use retire() to remove a product from stock")

        delta = coerce_number(delta, "quantity")
        if delta == 0:
            raise ValidationError("quantity must not be zero")
        if movement_type == MovementType.ENTRY and delta < 0:
            raise ValidationError("ENTRY movements must add stock")
        if movement_type == MovementType.SALE and delta > 0:
            raise ValidationError("SALE movements must remove stock")

        product = self.find_product(working, product_id)
        new_stock = _add(product.stock, delta)
        self._check_policy(product, movement_type, delta, new_stock)

        product.stock = new_stock
        entry = append_log_entry(
            working.logs,
            product=product,
            movement_type=movement_type,
            quantity=delta,
            actor=actor,
        )
        logger.debug("Stock %s %+g for %s -> %g", movement_type, delta, product.id, new_stock)
        return product, entry

    def record_stock_edit(
        self,
        working: WorkingSet,
        product: Product,
        previous_stock: float,
        actor=None,
    ) -> InventoryLogEntry | None:
        """
        Log a stock change made through a direct field edit.

        Positive diffs are logged as ENTRY, negative ones as ADJUSTMENT;
        an unchanged stock logs nothing.
        """
        diff = _add(product.stock, -previous_stock)
        if diff == 0:
            return None
        movement_type = MovementType.ENTRY if diff > 0 else MovementType.ADJUSTMENT
        self._check_policy(product, movement_type, diff, product.stock, available=previous_stock)
        return append_log_entry(
            working.logs,
            product=product,
            movement_type=movement_type,
            quantity=diff,
            actor=actor,
        )

    def record_opening_stock(
        self,
        working: WorkingSet,
        product: Product,
        actor=None,
    ) -> InventoryLogEntry | None:
        """Add a new product; positive starting stock is logged as ENTRY."""
        if self.stock_policy == StockPolicy.REJECT and product.stock < 0:
            raise InsufficientStock(product, -product.stock, 0)
        working.products.append(product)
        if product.stock <= 0:
            return None
        return append_log_entry(
            working.logs,
            product=product,
            movement_type=MovementType.ENTRY,
            quantity=product.stock,
            actor=actor,
        )

    def retire(self, working: WorkingSet, product_id: str, actor=None) -> tuple[Product, InventoryLogEntry]:
        """
        Log the final DELETION entry (-stock) and remove the product.

        The entry is written even for zero stock so every retirement shows up
        in the ledger.
        """
        product = self.find_product(working, product_id)
        entry = append_log_entry(
            working.logs,
            product=product,
            movement_type=MovementType.DELETION,
            quantity=_add(0, -product.stock),
            actor=actor,
        )
        working.products[:] = [p for p in working.products if p is not product]
        logger.debug("Retired product %s with stock %g", product.id, product.stock)
        return product, entry

    def _check_policy(self, product, movement_type, delta, new_stock, available=None):
        if self.stock_policy != StockPolicy.REJECT:
            return
        if movement_type in self._GUARDED_TYPES and delta < 0 and new_stock < 0:
            have = product.stock if available is None else available
            raise InsufficientStock(product, -delta, have)
