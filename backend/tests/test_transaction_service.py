"""
Transaction facade tests.

Verifies:
- Checkout prices from the catalog, logs one SALE per line and persists atomically
- Discounts and free items are gated by their own permissions
- A failure at any point, including the final write, leaves the store untouched
- Quotations never touch stock; deleting a sale never restores it
- Catalog edits, manual adjustments and bulk import keep the ledger in step
"""

import threading

import pytest

from gestor.models import MovementType, PaymentMethod
from gestor.services.concurrency import WriterLock
from gestor.services.import_service import ImportRowsError
from gestor.services.inventory_service import InsufficientStock
from gestor.services.ledger_service import net_quantity
from gestor.services.permission_service import AuthorizationDenied
from gestor.services.store_service import (
    Collection,
    RecordNotFound,
    StoreWriteError,
    WriteResult,
)
from gestor.services.transaction_service import StockDirection, TransactionFacade
from gestor.validation import ConflictError, ValidationError


@pytest.fixture
def facade(services):
    return services.facade


@pytest.fixture
def widget(services):
    services.store.write_collection(Collection.PRODUCTS, [
        {"id": "p1", "name": "Widget", "price": 5, "cost": 2, "stock": 10, "minStock": 2,
         "category": "Hardware"},
        {"id": "p2", "name": "Bolt", "price": 0.25, "cost": 0.1, "stock": 1, "minStock": 5,
         "category": "Hardware"},
    ])
    return "p1"


def snapshot(services):
    store = services.store
    return {c: store.raw(store.key_for(c)) for c in Collection.ALL}


def product(services, product_id):
    return next(p for p in services.facade.list_products() if p.id == product_id)


class TestCheckout:

    def test_example_sale(self, services, facade, widget, clerk):
        sale = facade.checkout(clerk, [{"productId": "p1", "quantity": 3}], PaymentMethod.CASH)

        assert sale.total == 15
        assert product(services, "p1").stock == 7
        logs = facade.list_inventory_logs(product_id="p1")
        assert len(logs) == 1
        assert (logs[0].type, logs[0].quantity, logs[0].user_id) == (MovementType.SALE, -3, "e2")
        assert [s.id for s in facade.list_sales()] == [sale.id]
        assert sale.customer_name == "General Public"
        assert (sale.employee_id, sale.employee_name) == ("e2", "Store Clerk 1")

    def test_prices_come_from_catalog(self, facade, widget, clerk):
        sale = facade.checkout(
            clerk, [{"productId": "p1", "quantity": 1, "unitPrice": 0.01, "name": "Cheap"}], "CARD"
        )
        assert sale.items[0].unit_price == 5
        assert sale.items[0].name == "Widget"
        assert sale.items[0].cost == 2

    def test_discount_total(self, facade, widget, manager):
        sale = facade.checkout(manager, [{"productId": "p1", "quantity": 2, "discount": 1.5}], "TRANSFER")
        assert sale.total == 7

    def test_total_rounds_to_cents(self, facade, widget, manager):
        sale = facade.checkout(manager, [{"productId": "p2", "quantity": 0.5, "discount": 0.015}], "CASH")
        assert sale.total == 0.12

    def test_legacy_payment_method(self, facade, widget, clerk):
        sale = facade.checkout(clerk, [{"productId": "p1", "quantity": 1}], "EFECTIVO")
        assert sale.payment_method == PaymentMethod.CASH

    def test_customer_by_id(self, facade, widget, clerk):
        sale = facade.checkout(clerk, [{"productId": "p1", "quantity": 1}], "CASH", customer={"id": "c2"})
        assert (sale.customer_id, sale.customer_name) == ("c2", "Example Company Ltd.")

    def test_unknown_customer(self, services, facade, widget, clerk):
        before = snapshot(services)
        with pytest.raises(RecordNotFound):
            facade.checkout(clerk, [{"productId": "p1", "quantity": 1}], "CASH", customer={"id": "zz"})
        assert snapshot(services) == before

    def test_free_item_needs_permission(self, services, facade, widget, clerk):
        before = snapshot(services)
        with pytest.raises(AuthorizationDenied):
            facade.checkout(clerk, [{"name": "Gift wrap", "unitPrice": 2, "quantity": 1}], "CASH")
        assert snapshot(services) == before

    def test_free_item_has_no_stock_effect(self, facade, widget, manager):
        sale = facade.checkout(manager, [
            {"productId": "p1", "quantity": 1},
            {"name": "Gift wrap", "unitPrice": 2, "quantity": 1},
        ], "CASH")
        assert sale.total == 7
        assert sale.items[1].product_id is None
        assert len(facade.list_inventory_logs()) == 1

    def test_discount_needs_permission(self, services, facade, widget, clerk):
        before = snapshot(services)
        with pytest.raises(AuthorizationDenied):
            facade.checkout(clerk, [{"productId": "p1", "quantity": 1, "discount": 1}], "CASH")
        assert snapshot(services) == before

    def test_warehouse_cannot_sell(self, facade, widget, warehouse):
        with pytest.raises(AuthorizationDenied):
            facade.checkout(warehouse, [{"productId": "p1", "quantity": 1}], "CASH")

    def test_missing_actor_cannot_sell(self, facade, widget):
        with pytest.raises(AuthorizationDenied):
            facade.checkout(None, [{"productId": "p1", "quantity": 1}], "CASH")

    @pytest.mark.parametrize("cart,method", [
        ([], "CASH"),
        ([{"productId": "p1", "quantity": 1}], None),
        ([{"productId": "p1", "quantity": 1}], "CHEQUE"),
        ([{"productId": "p1", "quantity": 0}], "CASH"),
        ([{"productId": "p1", "quantity": -2}], "CASH"),
        ([{"productId": "p1", "quantity": 1, "discount": 6}], "CASH"),
        ([{"productId": "p1", "quantity": 1, "discount": -1}], "CASH"),
        ([{"name": "", "unitPrice": 2, "quantity": 1}], "CASH"),
        ([{"name": "Fee", "unitPrice": 0, "quantity": 1}], "CASH"),
        (["abc"], "CASH"),
        ([{"productId": "p1", "quantity": 1}, 7], "CASH"),
        ("p1", "CASH"),
        ({"productId": "p1", "quantity": 1}, "CASH"),
        (5, "CASH"),
    ])
    def test_invalid_carts(self, services, facade, widget, manager, cart, method):
        before = snapshot(services)
        with pytest.raises(ValidationError):
            facade.checkout(manager, cart, method)
        assert snapshot(services) == before

    @pytest.mark.parametrize("customer", [7, ["c2"], 1.5])
    def test_malformed_customer(self, services, facade, widget, clerk, customer):
        before = snapshot(services)
        with pytest.raises(ValidationError):
            facade.checkout(clerk, [{"productId": "p1", "quantity": 1}], "CASH", customer=customer)
        with pytest.raises(ValidationError):
            facade.create_quotation(clerk, [{"productId": "p1", "quantity": 1}], customer=customer)
        assert snapshot(services) == before


class TestAtomicity:

    def test_failure_on_later_line_rolls_back_earlier_lines(self, services, facade, widget, clerk):
        before = snapshot(services)
        with pytest.raises(InsufficientStock):
            facade.checkout(clerk, [
                {"productId": "p1", "quantity": 3},
                {"productId": "p2", "quantity": 2},
            ], "CASH")
        assert snapshot(services) == before
        assert product(services, "p1").stock == 10

    def test_same_product_on_two_lines_is_checked_cumulatively(self, services, facade, widget, clerk):
        with pytest.raises(InsufficientStock):
            facade.checkout(clerk, [
                {"productId": "p1", "quantity": 6},
                {"productId": "p1", "quantity": 5},
            ], "CASH")
        assert product(services, "p1").stock == 10

    def test_permission_revoked_mid_operation(self, services, widget, manager):
        class RevokingPolicy:
            """Grants the first check only."""

            def __init__(self):
                self.calls = 0

            def require(self, actor, module, action):
                self.calls += 1
                if self.calls > 1:
                    raise AuthorizationDenied(actor.role, module, action)

        facade = TransactionFacade(services.store, services.lock, RevokingPolicy(), services.ledger)
        before = snapshot(services)
        with pytest.raises(AuthorizationDenied):
            facade.checkout(manager, [
                {"productId": "p1", "quantity": 1},
                {"productId": "p1", "quantity": 1, "discount": 1},
            ], "CASH")
        assert snapshot(services) == before

    def test_failed_write_persists_nothing(self, services, facade, widget, clerk, monkeypatch):
        before = snapshot(services)
        monkeypatch.setattr(
            services.store, "set_many",
            lambda items: WriteResult(False, tuple(items), StoreWriteError("medium full")),
        )
        with pytest.raises(StoreWriteError):
            facade.checkout(clerk, [{"productId": "p1", "quantity": 3}], "CASH")
        monkeypatch.undo()
        assert snapshot(services) == before

    def test_lock_timeout_is_a_write_error(self, services, widget, clerk):
        lock = WriterLock(timeout=0.05)
        facade = TransactionFacade(services.store, lock, services.policy, services.ledger)
        held = threading.Event()
        release = threading.Event()

        def holder():
            with lock.hold():
                held.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        try:
            held.wait(5)
            with pytest.raises(StoreWriteError):
                facade.checkout(clerk, [{"productId": "p1", "quantity": 1}], "CASH")
        finally:
            release.set()
            thread.join()


class TestQuotationsAndHistory:

    def test_quotation_has_no_stock_effect(self, services, facade, widget, clerk):
        quotation = facade.create_quotation(clerk, [{"productId": "p1", "quantity": 4}], customer={"id": "c2"})
        assert quotation.total == 20
        assert quotation.expiration_date > quotation.date
        assert product(services, "p1").stock == 10
        assert facade.list_inventory_logs() == []
        assert [q.id for q in facade.list_quotations()] == [quotation.id]

    def test_load_quotation_returns_cart_lines(self, facade, widget, clerk):
        quotation = facade.create_quotation(clerk, [{"productId": "p1", "quantity": 4}])
        lines = facade.load_quotation(clerk, quotation.id)
        assert [(line.product_id, line.quantity) for line in lines] == [("p1", 4)]

    def test_load_unknown_quotation(self, facade, clerk):
        with pytest.raises(RecordNotFound):
            facade.load_quotation(clerk, "missing")

    def test_delete_sale_keeps_stock_and_log(self, services, facade, widget, clerk, manager):
        sale = facade.checkout(clerk, [{"productId": "p1", "quantity": 3}], "CASH")
        facade.delete_sale(manager, sale.id)

        assert facade.list_sales() == []
        assert product(services, "p1").stock == 7
        assert len(facade.list_inventory_logs()) == 1

    def test_only_manager_deletes_sales(self, facade, widget, clerk, admin):
        sale = facade.checkout(clerk, [{"productId": "p1", "quantity": 1}], "CASH")
        for actor in (clerk, admin):
            with pytest.raises(AuthorizationDenied):
                facade.delete_sale(actor, sale.id)
        assert len(facade.list_sales()) == 1


class TestCatalog:

    def test_create_product_defaults_and_entry(self, facade, admin):
        created = facade.create_product(admin, {"name": "Lamp", "price": "12,5", "stock": 4})
        assert created.price == 12.5
        assert (created.category, created.min_stock, created.measurement_unit) == ("General", 5, "UNIT")
        logs = facade.list_inventory_logs(product_id=created.id)
        assert [(e.type, e.quantity, e.user_id) for e in logs] == [(MovementType.ENTRY, 4, "a1")]

    def test_create_without_stock_logs_nothing(self, facade, admin):
        created = facade.create_product(admin, {"name": "Lamp", "price": 3})
        assert facade.list_inventory_logs(product_id=created.id) == []

    def test_duplicate_name_in_category(self, facade, widget, admin):
        with pytest.raises(ConflictError):
            facade.create_product(admin, {"name": "  widget ", "price": 1, "category": "HARDWARE"})
        # Same name in another category is fine
        facade.create_product(admin, {"name": "Widget", "price": 1, "category": "Toys"})

    @pytest.mark.parametrize("data", [
        {"price": 1},
        {"name": "Lamp"},
        {"name": "Lamp", "price": -1},
        {"name": "Lamp", "price": 1, "cost": -1},
        {"name": "Lamp", "price": 1, "measurementUnit": "BARREL"},
        {"name": "Lamp", "price": 1, "stock": -3},
    ])
    def test_invalid_products(self, services, facade, admin, data):
        before = snapshot(services)
        with pytest.raises(ValidationError):
            facade.create_product(admin, data)
        assert snapshot(services) == before

    def test_warehouse_cannot_create(self, facade, warehouse):
        with pytest.raises(AuthorizationDenied):
            facade.create_product(warehouse, {"name": "Lamp", "price": 1})

    def test_update_logs_stock_difference(self, facade, widget, admin):
        updated = facade.update_product(admin, "p1", {"stock": 4, "price": 6, "id": "hijack"})
        assert (updated.id, updated.price, updated.stock) == ("p1", 6, 4)
        [entry] = facade.list_inventory_logs(product_id="p1")
        assert (entry.type, entry.quantity) == (MovementType.ADJUSTMENT, -6)

    def test_update_without_stock_change_logs_nothing(self, facade, widget, admin):
        facade.update_product(admin, "p1", {"description": "Steel"})
        assert facade.list_inventory_logs() == []

    def test_update_cannot_duplicate_another_product(self, facade, widget, admin):
        with pytest.raises(ConflictError):
            facade.update_product(admin, "p2", {"name": "WIDGET"})

    def test_delete_product_nets_to_zero(self, facade, admin):
        created = facade.create_product(admin, {"name": "Lamp", "price": 3, "stock": 9})
        facade.adjust_stock(admin, created.id, 2, StockDirection.EXIT)
        facade.delete_product(admin, created.id)

        logs = facade.list_inventory_logs(product_id=created.id)
        assert logs[0].type == MovementType.DELETION
        assert logs[0].quantity == -7
        assert net_quantity(logs, created.id) == 0
        assert all(p.id != created.id for p in facade.list_products())

    def test_delete_unknown_product(self, facade, admin):
        with pytest.raises(RecordNotFound):
            facade.delete_product(admin, "missing")


class TestStockAdjustments:

    def test_receive_and_issue(self, services, facade, widget, warehouse):
        facade.receive_stock(warehouse, "p1", 5)
        facade.issue_stock(warehouse, "p1", 2)
        assert product(services, "p1").stock == 13
        types = [e.type for e in facade.list_inventory_logs(product_id="p1")]
        assert sorted(types) == [MovementType.ADJUSTMENT, MovementType.ENTRY]

    def test_issue_below_zero_rejected(self, services, facade, widget, warehouse):
        with pytest.raises(InsufficientStock):
            facade.issue_stock(warehouse, "p2", 2)
        assert product(services, "p2").stock == 1

    @pytest.mark.parametrize("quantity,direction", [(0, "ENTRY"), (-1, "EXIT"), (1, "SIDEWAYS")])
    def test_invalid_adjustments(self, facade, widget, warehouse, quantity, direction):
        with pytest.raises(ValidationError):
            facade.adjust_stock(warehouse, "p1", quantity, direction)

    def test_sales_role_cannot_adjust(self, facade, widget, clerk):
        with pytest.raises(AuthorizationDenied):
            facade.receive_stock(clerk, "p1", 1)

    def test_low_stock(self, facade, widget):
        assert [p.id for p in facade.low_stock_products()] == ["p2"]


class TestBulkImport:

    def test_rows_create_products_and_entries(self, facade, admin):
        report = facade.bulk_import(admin, [
            {"Nombre": "Tea", "Precio": "3.5", "Stock": "10", "Categoria": "Drinks"},
            {"name": "Mug", "price": "8", "stock": "0"},
            {"name": "Spoon", "price": "1", "unit": "unidad", "stock": "4"},
        ])
        assert len(report.created) == 3
        assert report.entries_logged == 2
        by_name = {p.name: p for p in facade.list_products()}
        assert by_name["Tea"].category == "Drinks"
        assert by_name["Mug"].min_stock == 5
        assert by_name["Spoon"].measurement_unit == "UNIT"

    def test_any_invalid_row_aborts_batch(self, services, facade, admin):
        before = snapshot(services)
        with pytest.raises(ImportRowsError) as exc:
            facade.bulk_import(admin, [
                {"name": "Tea", "price": "3"},
                {"name": "Mug"},
                {"name": "Pot", "price": "abc"},
            ])
        assert [e["row"] for e in exc.value.errors] == [2, 3]
        assert snapshot(services) == before

    def test_duplicate_within_batch(self, facade, admin):
        with pytest.raises(ImportRowsError) as exc:
            facade.bulk_import(admin, [{"name": "Tea", "price": 1}, {"name": "TEA", "price": 2}])
        assert exc.value.errors[0]["row"] == 2

    def test_empty_batch(self, facade, admin):
        with pytest.raises(ValidationError):
            facade.bulk_import(admin, [])
