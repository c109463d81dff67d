# Overview: Keyed JSON store over the store_entries table, plus in-memory working copies.

"""
Keyed Store Invariants (authoritative)

- One addressable blob per collection, keyed "{namespace}_{suffix}".
- Blobs are canonical JSON text; re-encoding parsed data gives identical bytes.
- Reads never fail: absent, corrupt or unreadable blobs fall back to the
  seeded default and the recovery is logged.
- Writes never fail silently: every write returns a WriteResult and failures
  carry a StoreWriteError the caller can raise.
- There are no partial-record updates; callers load a collection, change it
  in memory and write the whole collection back.
"""

from __future__ import annotations

import copy
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..models import (
    BusinessConfig,
    Customer,
    Employee,
    Expense,
    InventoryLogEntry,
    Product,
    Quotation,
    Sale,
    StoreEntry,
    Supplier,
)
from ..seed_data import SEED_DATA
from .concurrency import run_with_retry

logger = logging.getLogger(__name__)


class StoreReadError(Exception):
    """A blob could not be read or parsed. Logged and recovered, never raised to callers."""


class StoreWriteError(Exception):
    """Persistence failed; the operation that needed it did not take effect."""


class RecordNotFound(LookupError):
    """No record with the given id exists in the collection."""


class Collection:
    PRODUCTS = "products"
    SUPPLIERS = "suppliers"
    CUSTOMERS = "customers"
    EMPLOYEES = "employees"
    SALES = "sales"
    EXPENSES = "expenses"
    QUOTATIONS = "quotations"
    CONFIG = "config"
    LOGS = "inventory_logs"

    ALL = (PRODUCTS, SUPPLIERS, CUSTOMERS, EMPLOYEES, SALES, EXPENSES, QUOTATIONS, CONFIG, LOGS)

    RECORD_TYPES = {
        PRODUCTS: Product,
        SUPPLIERS: Supplier,
        CUSTOMERS: Customer,
        EMPLOYEES: Employee,
        SALES: Sale,
        EXPENSES: Expense,
        QUOTATIONS: Quotation,
        CONFIG: BusinessConfig,
        LOGS: InventoryLogEntry,
    }


def encode(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def new_id() -> str:
    return str(uuid.uuid4())


def find_record(records: list, record_id: str, label: str = "Record"):
    for record in records:
        if record.id == record_id:
            return record
    raise RecordNotFound(f"{label} {record_id} not found")


@dataclass(frozen=True)
class WriteResult:
    ok: bool
    keys: tuple[str, ...]
    error: StoreWriteError | None = None

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class KeyedStore:
    """
    get/set over the store_entries table through the SQLAlchemy session
    given to the constructor. Several stores may share one database as long
    as their namespaces differ.
    """

    def __init__(self, session, namespace: str = "gp_db", *, write_attempts: int = 3, seed: dict | None = None):
        self.session = session
        self.namespace = namespace
        self.write_attempts = write_attempts
        self.seed = SEED_DATA if seed is None else seed

    def key_for(self, collection: str) -> str:
        if collection not in Collection.ALL:
            raise ValueError(f"Unknown collection: {collection}")
        return f"{self.namespace}_{collection}"

    def default_for(self, collection: str) -> Any:
        fallback = {} if collection == Collection.CONFIG else []
        return copy.deepcopy(self.seed.get(collection, fallback))

    # -- reads --

    def raw(self, key: str) -> str | None:
        """Stored text for key, or None when absent or unreadable."""
        try:
            entry = self.session.get(StoreEntry, key)
        except SQLAlchemyError as exc:
            self.session.rollback()
            self._recovered(StoreReadError(f"{key}: read failed: {exc}"))
            return None
        return entry.payload if entry is not None else None

    def get(self, key: str, default: Any = None) -> Any:
        """
        Parsed value for key.

        Falls back to a deep copy of default when the key is absent, the
        payload is not JSON, or its top-level type differs from default's.
        """
        payload = self.raw(key)
        if payload is None:
            return copy.deepcopy(default)
        try:
            value = json.loads(payload)
        except ValueError as exc:
            self._recovered(StoreReadError(f"{key}: corrupt payload: {exc}"))
            return copy.deepcopy(default)
        if default is not None and not isinstance(value, type(default)):
            self._recovered(StoreReadError(
                f"{key}: expected {type(default).__name__}, found {type(value).__name__}"
            ))
            return copy.deepcopy(default)
        return value

    def read_collection(self, collection: str) -> Any:
        return self.get(self.key_for(collection), self.default_for(collection))

    def _recovered(self, error: StoreReadError) -> None:
        logger.warning("Falling back to default data: %s", error)

    # -- writes --

    def set(self, key: str, value: Any) -> WriteResult:
        return self.set_many({key: value})

    def write_collection(self, collection: str, value: Any) -> WriteResult:
        return self.set(self.key_for(collection), value)

    def set_many(self, items: dict[str, Any]) -> WriteResult:
        """Write every key in one database transaction; all or nothing."""
        keys = tuple(items)
        if not items:
            return WriteResult(True, keys)

        try:
            encoded = {key: encode(value) for key, value in items.items()}
        except (TypeError, ValueError) as exc:
            error = StoreWriteError(f"cannot serialize {', '.join(keys)}: {exc}")
            logger.error("Store write rejected: %s", error)
            return WriteResult(False, keys, error)

        def _op():
            for key, text in encoded.items():
                entry = self.session.get(StoreEntry, key)
                if entry is None:
                    self.session.add(StoreEntry(key=key, payload=text))
                else:
                    entry.payload = text
            self.session.commit()

        try:
            run_with_retry(_op, session=self.session, attempts=self.write_attempts)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Store write failed for %s", ", ".join(keys))
            return WriteResult(False, keys, StoreWriteError(f"write failed for {', '.join(keys)}: {exc}"))
        return WriteResult(True, keys)


class WorkingSet:
    """
    Typed, in-memory copies of collections for one unit of work.

    Nothing reaches the store until the owner persists changes(); dropping
    the working set is the rollback.
    """

    def __init__(self, store: KeyedStore):
        self.store = store
        self._records: dict[str, Any] = {}
        self._baseline: dict[str, str] = {}

    def load(self, collection: str):
        if collection not in self._records:
            records = self._to_records(collection, self.store.read_collection(collection))
            # Baseline is the normalised form, so loading alone never counts as a change.
            self._baseline[collection] = encode(self._to_plain(collection, records))
            self._records[collection] = records
        return self._records[collection]

    def replace(self, collection: str, value) -> None:
        self.load(collection)
        self._records[collection] = value

    def changes(self) -> dict[str, Any]:
        """Plain JSON values of every loaded collection that differs from what was read."""
        out = {}
        for collection, records in self._records.items():
            plain = self._to_plain(collection, records)
            if encode(plain) != self._baseline[collection]:
                out[self.store.key_for(collection)] = plain
        return out

    @staticmethod
    def _to_records(collection: str, raw):
        record_type = Collection.RECORD_TYPES[collection]
        if collection == Collection.CONFIG:
            return record_type.from_dict(raw)
        skipped = [item for item in raw if not isinstance(item, dict)]
        if skipped:
            logger.warning("Dropping %d malformed entries from %s", len(skipped), collection)
        return [record_type.from_dict(item) for item in raw if isinstance(item, dict)]

    @staticmethod
    def _to_plain(collection: str, records):
        if collection == Collection.CONFIG:
            return records.to_dict()
        return [record.to_dict() for record in records]

    # Convenience accessors

    @property
    def products(self) -> list[Product]:
        return self.load(Collection.PRODUCTS)

    @property
    def logs(self) -> list[InventoryLogEntry]:
        return self.load(Collection.LOGS)

    @property
    def sales(self) -> list[Sale]:
        return self.load(Collection.SALES)

    @property
    def quotations(self) -> list[Quotation]:
        return self.load(Collection.QUOTATIONS)

    @property
    def employees(self) -> list[Employee]:
        return self.load(Collection.EMPLOYEES)

    @property
    def config(self) -> BusinessConfig:
        return self.load(Collection.CONFIG)
