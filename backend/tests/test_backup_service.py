"""
Backup and restore tests.

Verifies:
- export then restore reproduces every stored payload byte for byte
- Invalid documents are rejected before anything is written
- Collections missing from a document are restored empty
"""

import copy

import pytest

from gestor.services.backup_service import BACKUP_VERSION, DOCUMENT_KEYS
from gestor.services.permission_service import AuthorizationDenied
from gestor.services.store_service import Collection
from gestor.validation import ValidationError


def payloads(services):
    store = services.store
    return {c: store.raw(store.key_for(c)) for c in Collection.ALL}


@pytest.fixture
def busy_store(services, manager):
    services.facade.create_product(manager, {"name": "Café molido", "price": 4.2, "stock": 3})
    services.facade.checkout(manager, [{"productId": "2", "quantity": 2}], "CASH")
    services.catalog.create_expense(manager, {"description": "Rent", "amount": 300})
    services.credentials.login("admin@system.local", "admin@123*")
    return services


class TestExport:

    def test_document_shape(self, services):
        document = services.backups.export_document()
        assert document["version"] == BACKUP_VERSION
        assert document["timestamp"].endswith("Z")
        assert isinstance(document["config"], dict)
        for key in DOCUMENT_KEYS:
            assert isinstance(document[key], list)

    def test_logs_key_holds_inventory_log(self, busy_store):
        document = busy_store.backups.export_document()
        assert {e["type"] for e in document["logs"]} == {"ENTRY", "SALE"}


class TestRestore:

    def test_round_trip_is_byte_identical(self, busy_store, manager):
        before = payloads(busy_store)
        document = busy_store.backups.export_document()

        busy_store.facade.create_product(manager, {"name": "Noise", "price": 1, "stock": 1})
        busy_store.backups.restore(manager, document)

        after = payloads(busy_store)
        for collection in Collection.ALL:
            if before[collection] is not None:
                assert after[collection] == before[collection], collection

    def test_missing_collections_become_empty(self, services, manager):
        document = services.backups.export_document()
        del document["products"]
        del document["logs"]
        counts = services.backups.restore(manager, document)

        assert counts["products"] == 0
        assert services.store.read_collection(Collection.PRODUCTS) == []
        assert services.store.raw(services.store.key_for(Collection.LOGS)) == "[]"

    @pytest.mark.parametrize("mutate", [
        lambda d: d.update(version="2.0"),
        lambda d: d.pop("version"),
        lambda d: d.update(config=[]),
        lambda d: d.pop("config"),
        lambda d: d.update(products={"id": "1"}),
        lambda d: d.update(sales="none"),
    ])
    def test_invalid_document_writes_nothing(self, busy_store, manager, mutate):
        before = payloads(busy_store)
        document = copy.deepcopy(busy_store.backups.export_document())
        mutate(document)
        with pytest.raises(ValidationError):
            busy_store.backups.restore(manager, document)
        assert payloads(busy_store) == before

    @pytest.mark.parametrize("mutate", [
        lambda d: d["products"][0].update(stock=None),
        lambda d: d["products"][0].update(price="cheap"),
        lambda d: d["products"].append("1"),
        lambda d: d["expenses"][0].update(amount=float("nan")),
        lambda d: d["sales"][0]["items"][0].update(quantity=None),
        lambda d: d["sales"][0].update(items={"productId": "2"}),
        lambda d: d["logs"].append(None),
    ])
    def test_bad_records_write_nothing(self, busy_store, manager, mutate):
        before = payloads(busy_store)
        document = copy.deepcopy(busy_store.backups.export_document())
        mutate(document)
        with pytest.raises(ValidationError):
            busy_store.backups.restore(manager, document)
        assert payloads(busy_store) == before

    def test_null_stock_rejected_then_stock_still_moves(self, services, manager):
        document = services.backups.export_document()
        document["products"][0]["stock"] = None
        with pytest.raises(ValidationError):
            services.backups.restore(manager, document)

        product = services.facade.receive_stock(manager, document["products"][0]["id"], 1)
        assert product.stock == 6

    def test_stored_null_stock_reads_as_default(self, services, manager):
        products = services.store.read_collection(Collection.PRODUCTS)
        products[0]["stock"] = None
        products[0]["minStock"] = None
        services.store.write_collection(Collection.PRODUCTS, products).raise_for_error()

        product = services.facade.adjust_stock(manager, products[0]["id"], 1, "ENTRY")
        assert product.stock == 1
        assert product.min_stock == 5

    def test_not_a_document(self, services, manager):
        with pytest.raises(ValidationError):
            services.backups.restore(manager, ["products"])

    def test_requires_settings_edit(self, services, clerk):
        document = services.backups.export_document()
        with pytest.raises(AuthorizationDenied):
            services.backups.restore(clerk, document)
