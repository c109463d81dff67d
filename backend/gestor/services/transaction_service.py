# Overview: Unit-of-work facade for sales, quotations and catalog changes.

"""
Transaction Facade

WHY: A sale touches products, the inventory log and the sales list. Those
live in separate collections, so the facade loads them into one WorkingSet,
lets the ledger mutate the in-memory copies and writes every changed
collection with a single set_many. Either all of it lands or none of it.

RULES:
- Authorization is checked before anything is loaded.
- Any exception inside transaction() discards the working set.
- A failed write surfaces as StoreWriteError; nothing is half-written.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager

from ..models import Customer, MeasurementUnit, MovementType, PaymentMethod, Product, Quotation, Sale, SaleLine
from ..models.sales import WALK_IN_CUSTOMER_NAME, lines_total
from ..permissions import Action, Module
from ..time_utils import iso_in_days, now_iso
from ..validation import ConflictError, ValidationError, clean_str, coerce_number, pick
from .concurrency import LockTimeout, WriterLock
from .import_service import (
    DEFAULT_CATEGORY,
    DEFAULT_MIN_STOCK,
    ImportReport,
    ImportRowsError,
    normalize_row,
)
from .inventory_service import InventoryLedger
from .ledger_service import list_entries, resolve_actor
from .permission_service import AuthorizationPolicy
from .store_service import Collection, KeyedStore, StoreWriteError, WorkingSet, find_record, new_id

logger = logging.getLogger(__name__)

QUOTATION_VALID_DAYS = 7

PRODUCT_MUTABLE_FIELDS = {
    "name",
    "description",
    "price",
    "cost",
    "stock",
    "minStock",
    "category",
    "supplierId",
    "measurementUnit",
    "measurementValue",
    "image",
}


class StockDirection:
    ENTRY = "ENTRY"
    EXIT = "EXIT"

    ALL = (ENTRY, EXIT)


def _same_label(a: str, b: str) -> bool:
    return clean_str(a).casefold() == clean_str(b).casefold()


@contextmanager
def unit_of_work(store: KeyedStore, lock: WriterLock):
    """Yield a WorkingSet under the writer lock and persist its changes on clean exit."""
    try:
        with lock.hold():
            working = WorkingSet(store)
            try:
                yield working
            except Exception as exc:
                logger.warning("Unit of work rolled back: %s: %s", type(exc).__name__, exc)
                raise
            store.set_many(working.changes()).raise_for_error()
    except LockTimeout as exc:
        raise StoreWriteError(str(exc))


class TransactionFacade:
    def __init__(
        self,
        store: KeyedStore,
        lock: WriterLock,
        policy: AuthorizationPolicy,
        ledger: InventoryLedger,
    ):
        self.store = store
        self.lock = lock
        self.policy = policy
        self.ledger = ledger

    def transaction(self):
        return unit_of_work(self.store, self.lock)

    # -- point of sale --

    def checkout(self, actor, cart, payment_method, customer=None) -> Sale:
        """
        Complete a sale from cart lines.

        Catalog lines are priced from the stored product and each one logs a
        SALE entry of -quantity. The sale, the stock changes and the log
        entries persist together.
        """
        self.policy.require(actor, Module.POINT_OF_SALE, Action.CREATE)
        if not cart:
            raise ValidationError("Cart is empty")
        method = PaymentMethod.LEGACY_ALIASES.get(payment_method, payment_method) \
            if isinstance(payment_method, str) else payment_method
        if method not in PaymentMethod.ALL:
            raise ValidationError(f"payment method must be one of {', '.join(PaymentMethod.ALL)}")

        with self.transaction() as working:
            lines = self._build_lines(working, actor, cart)
            customer_id, customer_name = self._resolve_customer(working, customer)
            who = resolve_actor(actor)
            sale = Sale(
                id=new_id(),
                date=now_iso(),
                total=lines_total(lines),
                items=lines,
                payment_method=method,
                customer_id=customer_id,
                customer_name=customer_name,
                employee_id=who.id,
                employee_name=who.name,
            )
            for line in lines:
                if not line.is_free_item:
                    self.ledger.apply_movement(
                        working, line.product_id, -line.quantity, MovementType.SALE, actor
                    )
            working.sales.insert(0, sale)

        logger.info("Sale %s completed by %s: total %.2f", sale.id, sale.employee_id, sale.total)
        return sale

    def create_quotation(self, actor, cart, customer=None, valid_days: int = QUOTATION_VALID_DAYS) -> Quotation:
        self.policy.require(actor, Module.POINT_OF_SALE, Action.CREATE)
        if not cart:
            raise ValidationError("Cart is empty")
        if isinstance(valid_days, bool) or not isinstance(valid_days, int) or valid_days < 0:
            raise ValidationError("valid_days must be a non-negative integer")

        with self.transaction() as working:
            lines = self._build_lines(working, actor, cart)
            customer_id, customer_name = self._resolve_customer(working, customer)
            quotation = Quotation(
                id=new_id(),
                date=now_iso(),
                total=lines_total(lines),
                items=lines,
                customer_id=customer_id,
                customer_name=customer_name,
                expiration_date=iso_in_days(valid_days),
            )
            working.quotations.insert(0, quotation)
        return quotation

    def load_quotation(self, actor, quotation_id: str) -> list[SaleLine]:
        """Cart lines of a stored quotation. Read-only."""
        self.policy.require(actor, Module.POINT_OF_SALE, Action.VIEW)
        quotation = find_record(WorkingSet(self.store).quotations, quotation_id, "Quotation")
        return [line.copy_with() for line in quotation.items]

    def delete_sale(self, actor, sale_id: str) -> Sale:
        """Remove a sale from history. Stock and the inventory log are left as they are."""
        self.policy.require(actor, Module.SALES_HISTORY, Action.DELETE)
        with self.transaction() as working:
            sale = find_record(working.sales, sale_id, "Sale")
            working.sales[:] = [s for s in working.sales if s is not sale]
        logger.info("Sale %s deleted by %s; stock not restored", sale_id, getattr(actor, "id", None))
        return sale

    def _build_lines(self, working: WorkingSet, actor, cart) -> list[SaleLine]:
        if not isinstance(cart, (list, tuple)):
            raise ValidationError("items must be a list")
        lines = []
        for index, item in enumerate(cart, start=1):
            label = f"items[{index}]"
            if isinstance(item, SaleLine):
                raw = item.to_dict()
            elif isinstance(item, dict):
                raw = item
            else:
                raise ValidationError(f"{label} must be an object")
            quantity = coerce_number(raw.get("quantity"), f"{label}.quantity")
            if quantity <= 0:
                raise ValidationError(f"{label}.quantity must be positive")
            discount = coerce_number(raw.get("discount") or 0, f"{label}.discount", minimum=0)

            product_id = raw.get("productId")
            if product_id:
                product = self.ledger.find_product(working, product_id)
                line = SaleLine(
                    product_id=product.id,
                    name=product.name,
                    quantity=quantity,
                    unit_price=product.price,
                    discount=discount,
                    cost=product.cost,
                )
            else:
                self.policy.require(actor, Module.POINT_OF_SALE, Action.ADD_FREE_ITEM)
                name = clean_str(raw.get("name"))
                if not name:
                    raise ValidationError(f"{label}.name is required for a free item")
                unit_price = coerce_number(raw.get("unitPrice"), f"{label}.unitPrice")
                if unit_price <= 0:
                    raise ValidationError(f"{label}.unitPrice must be positive")
                line = SaleLine(product_id=None, name=name, quantity=quantity,
                                unit_price=unit_price, discount=discount)

            if discount > line.unit_price:
                raise ValidationError(f"{label}.discount cannot exceed the unit price")
            if discount > 0:
                self.policy.require(actor, Module.POINT_OF_SALE, Action.APPLY_DISCOUNT)
            lines.append(line)
        return lines

    def _resolve_customer(self, working: WorkingSet, customer) -> tuple[str | None, str]:
        if customer is None:
            return None, WALK_IN_CUSTOMER_NAME
        if isinstance(customer, Customer):
            return customer.id or None, customer.name or WALK_IN_CUSTOMER_NAME
        if isinstance(customer, str):
            customer = {"id": customer}
        if not isinstance(customer, dict):
            raise ValidationError("customer must be an object")

        customer_id = clean_str(customer.get("id")) or None
        name = clean_str(customer.get("name"))
        if customer_id:
            stored = find_record(working.load(Collection.CUSTOMERS), customer_id, "Customer")
            name = stored.name
        return customer_id, name or WALK_IN_CUSTOMER_NAME

    # -- catalog --

    def create_product(self, actor, data: dict) -> Product:
        self.policy.require(actor, Module.INVENTORY, Action.CREATE)
        with self.transaction() as working:
            product = self._new_product(working, data)
            self.ledger.record_opening_stock(working, product, actor)
        logger.info("Product %s created with stock %g", product.id, product.stock)
        return product

    def update_product(self, actor, product_id: str, changes: dict) -> Product:
        """Apply field edits; a changed stock is logged as ENTRY or ADJUSTMENT."""
        self.policy.require(actor, Module.INVENTORY, Action.EDIT)
        patch = pick(changes or {}, PRODUCT_MUTABLE_FIELDS)
        with self.transaction() as working:
            product = self.ledger.find_product(working, product_id)
            previous_stock = product.stock
            merged = {**product.to_dict(), **patch}
            fields = self._product_fields(merged)
            self._check_unique(working, fields["name"], fields["category"], exclude=product)
            for attr, value in fields.items():
                setattr(product, attr, value)
            self.ledger.record_stock_edit(working, product, previous_stock, actor)
        return product

    def delete_product(self, actor, product_id: str) -> Product:
        self.policy.require(actor, Module.INVENTORY, Action.DELETE)
        with self.transaction() as working:
            product, _entry = self.ledger.retire(working, product_id, actor)
        logger.info("Product %s deleted with stock %g", product_id, product.stock)
        return product

    def adjust_stock(self, actor, product_id: str, quantity, direction: str) -> Product:
        """
        Manual stock movement.

        direction ENTRY adds quantity and logs ENTRY; EXIT removes it and
        logs ADJUSTMENT. quantity is always given as a positive amount.
        """
        self.policy.require(actor, Module.INVENTORY, Action.MANAGE_STOCK)
        if direction not in StockDirection.ALL:
            raise ValidationError(f"direction must be one of {', '.join(StockDirection.ALL)}")
        quantity = coerce_number(quantity, "quantity")
        if quantity <= 0:
            raise ValidationError("quantity must be positive")

        if direction == StockDirection.ENTRY:
            delta, movement_type = quantity, MovementType.ENTRY
        else:
            delta, movement_type = -quantity, MovementType.ADJUSTMENT

        with self.transaction() as working:
            product, _entry = self.ledger.apply_movement(working, product_id, delta, movement_type, actor)
        return product

    def receive_stock(self, actor, product_id: str, quantity) -> Product:
        return self.adjust_stock(actor, product_id, quantity, StockDirection.ENTRY)

    def issue_stock(self, actor, product_id: str, quantity) -> Product:
        return self.adjust_stock(actor, product_id, quantity, StockDirection.EXIT)

    def bulk_import(self, actor, rows) -> ImportReport:
        """
        Create one product per row.

        All-or-nothing: every row is validated first and, if any row fails,
        ImportRowsError lists them by 1-based row number and nothing is written.
        """
        self.policy.require(actor, Module.INVENTORY, Action.CREATE)
        rows = list(rows or [])
        if not rows:
            raise ValidationError("No rows to import")

        report = ImportReport()
        errors = []
        with self.transaction() as working:
            for row_number, row in enumerate(rows, start=1):
                try:
                    product = self._new_product(working, normalize_row(row))
                    entry = self.ledger.record_opening_stock(working, product, actor)
                except ValidationError as exc:
                    errors.append({"row": row_number, "error": str(exc)})
                    continue
                report.created.append(product)
                if entry is not None:
                    report.entries_logged += 1
            if errors:
                raise ImportRowsError(errors)

        logger.info("Imported %d products (%d ledger entries)", len(report.created), report.entries_logged)
        return report

    def _new_product(self, working: WorkingSet, data: dict) -> Product:
        fields = self._product_fields(data or {})
        self._check_unique(working, fields["name"], fields["category"])
        return Product(id=new_id(), **fields)

    def _product_fields(self, data: dict) -> dict:
        name = clean_str(data.get("name"))
        if not name:
            raise ValidationError("name is required")
        if data.get("price") is None or data.get("price") == "":
            raise ValidationError("price is required")

        unit = clean_str(data.get("measurementUnit")) or MeasurementUnit.UNIT
        unit = MeasurementUnit.LEGACY_ALIASES.get(unit.upper(), unit.upper())
        if unit not in MeasurementUnit.ALL:
            raise ValidationError(f"measurementUnit must be one of {', '.join(MeasurementUnit.ALL)}")

        measurement_value = data.get("measurementValue")
        image = data.get("image")
        return {
            "name": name,
            "description": clean_str(data.get("description")),
            "price": coerce_number(data.get("price"), "price", minimum=0),
            "cost": coerce_number(data.get("cost") or 0, "cost", minimum=0),
            "stock": coerce_number(data.get("stock") or 0, "stock"),
            "min_stock": coerce_number(
                DEFAULT_MIN_STOCK if data.get("minStock") in (None, "") else data.get("minStock"),
                "minStock",
                minimum=0,
            ),
            "category": clean_str(data.get("category")) or DEFAULT_CATEGORY,
            "supplier_id": clean_str(data.get("supplierId")),
            "measurement_unit": unit,
            "measurement_value": 1.0 if measurement_value in (None, "")
            else coerce_number(measurement_value, "measurementValue", minimum=0),
            "image": image or None,
        }

    @staticmethod
    def _check_unique(working: WorkingSet, name: str, category: str, exclude: Product | None = None) -> None:
        for other in working.products:
            if other is exclude:
                continue
            if _same_label(other.name, name) and _same_label(other.category, category):
                raise ConflictError(f"A product named {name} already exists in {category}")

    # -- reads --

    def list_products(self) -> list[Product]:
        return WorkingSet(self.store).products

    def get_product(self, product_id: str) -> Product:
        return self.ledger.find_product(WorkingSet(self.store), product_id)

    def low_stock_products(self) -> list[Product]:
        return [p for p in self.list_products() if p.is_low_stock]

    def list_sales(self) -> list[Sale]:
        return WorkingSet(self.store).sales

    def list_quotations(self) -> list[Quotation]:
        return WorkingSet(self.store).quotations

    def list_inventory_logs(self, product_id=None, entry_type=None, limit=None):
        return list_entries(
            WorkingSet(self.store).logs,
            product_id=product_id,
            entry_type=entry_type,
            limit=limit,
        )
