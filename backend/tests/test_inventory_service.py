"""
Inventory ledger tests.

Verifies:
- Every stock change appends exactly one entry with the signed delta
- Direct stock edits log the difference as ENTRY or ADJUSTMENT
- Retirement logs -stock so a product's entries net to zero
- The negative-stock policy is enforced for SALE and ADJUSTMENT only
"""

import pytest

from gestor.extensions import db
from gestor.models import MovementType, Product
from gestor.services.inventory_service import (
    InsufficientStock,
    InventoryLedger,
    ProductNotFound,
    StockPolicy,
)
from gestor.services.ledger_service import SYSTEM_ACTOR, list_entries, net_quantity
from gestor.services.store_service import KeyedStore, WorkingSet
from gestor.validation import ValidationError


@pytest.fixture
def working(app):
    return WorkingSet(KeyedStore(db.session, "ledger"))


@pytest.fixture
def ledger():
    return InventoryLedger()


class TestApplyMovement:

    def test_entry_adds_stock_and_logs(self, ledger, working, manager):
        product, entry = ledger.apply_movement(working, "1", 3, MovementType.ENTRY, manager)
        assert product.stock == 8
        assert entry.quantity == 3
        assert entry.type == MovementType.ENTRY
        assert entry.product_name == "Gaming Laptop Xtreme"
        assert (entry.user_id, entry.user_name) == ("e1", "Main Manager")
        assert working.logs == [entry]

    def test_newest_entry_first(self, ledger, working):
        ledger.apply_movement(working, "2", 1, MovementType.ENTRY)
        latest = ledger.apply_movement(working, "2", -2, MovementType.SALE)[1]
        assert working.logs[0] is latest

    def test_missing_actor_is_attributed_to_system(self, ledger, working):
        _, entry = ledger.apply_movement(working, "2", -1, MovementType.ADJUSTMENT)
        assert entry.user_id == SYSTEM_ACTOR.id

    def test_decimal_quantities_do_not_drift(self, ledger, working):
        ledger.apply_movement(working, "3", -0.1, MovementType.SALE)
        product, _ = ledger.apply_movement(working, "3", -0.2, MovementType.SALE)
        assert product.stock == 99.7

    @pytest.mark.parametrize("delta,movement_type", [
        (0, MovementType.ENTRY),
        (-1, MovementType.ENTRY),
        (1, MovementType.SALE),
        (1, "RETURN"),
        (-1, MovementType.DELETION),
        ("lots", MovementType.ENTRY),
    ])
    def test_rejects_inconsistent_movements(self, ledger, working, delta, movement_type):
        with pytest.raises(ValidationError):
            ledger.apply_movement(working, "1", delta, movement_type)
        assert working.logs == []

    def test_unknown_product(self, ledger, working):
        with pytest.raises(ProductNotFound):
            ledger.apply_movement(working, "nope", 1, MovementType.ENTRY)


class TestNegativeStockPolicy:

    def test_reject_blocks_sale_below_zero(self, ledger, working):
        with pytest.raises(InsufficientStock) as exc:
            ledger.apply_movement(working, "1", -6, MovementType.SALE)
        assert exc.value.available == 5
        assert exc.value.requested == 6
        assert ledger.find_product(working, "1").stock == 5
        assert working.logs == []

    def test_reject_allows_reaching_zero(self, ledger, working):
        product, _ = ledger.apply_movement(working, "1", -5, MovementType.ADJUSTMENT)
        assert product.stock == 0

    def test_allow_policy_goes_negative(self, working):
        ledger = InventoryLedger(StockPolicy.ALLOW)
        product, entry = ledger.apply_movement(working, "1", -7, MovementType.SALE)
        assert product.stock == -2
        assert entry.quantity == -7

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            InventoryLedger("sometimes")


class TestStockEdits:

    def test_increase_logs_entry(self, ledger, working, admin):
        product = ledger.find_product(working, "2")
        product.stock = 60
        entry = ledger.record_stock_edit(working, product, 48, admin)
        assert (entry.type, entry.quantity) == (MovementType.ENTRY, 12)

    def test_decrease_logs_adjustment(self, ledger, working):
        product = ledger.find_product(working, "2")
        product.stock = 40
        entry = ledger.record_stock_edit(working, product, 48)
        assert (entry.type, entry.quantity) == (MovementType.ADJUSTMENT, -8)

    def test_unchanged_logs_nothing(self, ledger, working):
        product = ledger.find_product(working, "2")
        assert ledger.record_stock_edit(working, product, 48) is None
        assert working.logs == []

    def test_edit_below_zero_rejected(self, ledger, working):
        product = ledger.find_product(working, "2")
        product.stock = -1
        with pytest.raises(InsufficientStock):
            ledger.record_stock_edit(working, product, 48)


class TestRetirement:

    def test_entries_net_to_zero(self, ledger, working, manager):
        ledger.apply_movement(working, "1", 4, MovementType.ENTRY, manager)
        ledger.apply_movement(working, "1", -2, MovementType.SALE, manager)
        product, entry = ledger.retire(working, "1", manager)

        assert entry.type == MovementType.DELETION
        assert entry.quantity == -7
        assert all(p.id != "1" for p in working.products)
        # Seed stock predates the log, so count it as the opening balance.
        assert net_quantity(working.logs, "1") + 5 == 0

    def test_zero_stock_still_logged(self, ledger, working):
        ledger.apply_movement(working, "1", -5, MovementType.SALE)
        _, entry = ledger.retire(working, "1")
        assert entry.quantity == 0
        assert len(list_entries(working.logs, entry_type=MovementType.DELETION)) == 1

    def test_opening_stock_then_retire_nets_to_zero(self, ledger, working):
        product = Product(id="p9", name="Candles", price=3, stock=12)
        ledger.record_opening_stock(working, product)
        ledger.apply_movement(working, "p9", -2, MovementType.SALE)
        ledger.retire(working, "p9")
        assert net_quantity(working.logs, "p9") == 0

    def test_opening_stock_zero_logs_nothing(self, ledger, working):
        entry = ledger.record_opening_stock(working, Product(id="p0", name="Empty", price=1))
        assert entry is None
        assert working.products[-1].id == "p0"


class TestQueries:

    def test_list_entries_filters_and_limits(self, ledger, working):
        ledger.apply_movement(working, "1", 1, MovementType.ENTRY)
        ledger.apply_movement(working, "2", 1, MovementType.ENTRY)
        ledger.apply_movement(working, "2", -1, MovementType.SALE)

        assert len(list_entries(working.logs, product_id="2")) == 2
        assert [e.type for e in list_entries(working.logs, entry_type=MovementType.SALE)] == [MovementType.SALE]
        assert len(list_entries(working.logs, limit=1)) == 1
