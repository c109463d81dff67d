# Overview: Whole-store export and restore as a single JSON document.

"""
Backup document layout:

    {"version": "1.0", "timestamp": "...Z", "config": {...},
     "products": [...], "suppliers": [...], "customers": [...],
     "employees": [...], "sales": [...], "expenses": [...],
     "quotations": [...], "logs": [...]}

Restore is validate-then-write: the whole document is checked before the
first byte is written, and every collection is replaced in one write.
Collections absent from the document are restored as empty lists.
"""

from __future__ import annotations

import logging

from ..models import Quotation, Sale, SaleLine
from ..permissions import Action, Module
from ..time_utils import now_iso
from ..validation import ValidationError, coerce_number
from .concurrency import LockTimeout
from .permission_service import AuthorizationPolicy
from .store_service import Collection, KeyedStore, StoreWriteError

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"

# document key -> collection
DOCUMENT_KEYS = {
    "products": Collection.PRODUCTS,
    "suppliers": Collection.SUPPLIERS,
    "customers": Collection.CUSTOMERS,
    "employees": Collection.EMPLOYEES,
    "sales": Collection.SALES,
    "expenses": Collection.EXPENSES,
    "quotations": Collection.QUOTATIONS,
    "logs": Collection.LOGS,
}


class BackupService:
    def __init__(self, store: KeyedStore, lock, policy: AuthorizationPolicy):
        self.store = store
        self.lock = lock
        self.policy = policy

    def export_document(self) -> dict:
        document = {
            "version": BACKUP_VERSION,
            "timestamp": now_iso(),
            "config": self.store.read_collection(Collection.CONFIG),
        }
        for key, collection in DOCUMENT_KEYS.items():
            document[key] = self.store.read_collection(collection)
        return document

    def validate_document(self, document) -> None:
        if not isinstance(document, dict):
            raise ValidationError("Backup must be a JSON object")
        if document.get("version") != BACKUP_VERSION:
            raise ValidationError(f"Unsupported backup version: {document.get('version')!r}")
        if not isinstance(document.get("config"), dict):
            raise ValidationError("Backup config must be an object")
        for key, collection in DOCUMENT_KEYS.items():
            value = document.get(key)
            if value is None:
                continue
            if not isinstance(value, list):
                raise ValidationError(f"Backup {key} must be a list")
            record_type = Collection.RECORD_TYPES[collection]
            for index, record in enumerate(value):
                self._validate_record(record_type, record, f"{key}[{index}]")

    @staticmethod
    def _validate_record(record_type, record, label: str) -> None:
        if not isinstance(record, dict):
            raise ValidationError(f"Backup {label} must be an object")
        for attr, json_key in record_type.JSON_FIELDS.items():
            if attr in record_type.NUMERIC_FIELDS and json_key in record:
                coerce_number(record[json_key], f"Backup {label}.{json_key}")
        if record_type in (Sale, Quotation):
            lines = record.get("items") or []
            if not isinstance(lines, list):
                raise ValidationError(f"Backup {label}.items must be a list")
            for line_index, line in enumerate(lines):
                BackupService._validate_record(SaleLine, line, f"{label}.items[{line_index}]")

    def restore(self, actor, document) -> dict[str, int]:
        """
        Replace every collection with the document's contents.

        Returns the number of records restored per document key.
        """
        self.policy.require(actor, Module.SETTINGS, Action.EDIT)
        self.validate_document(document)

        items = {self.store.key_for(Collection.CONFIG): document["config"]}
        counts = {}
        for key, collection in DOCUMENT_KEYS.items():
            records = document.get(key) or []
            items[self.store.key_for(collection)] = records
            counts[key] = len(records)

        try:
            with self.lock.hold():
                self.store.set_many(items).raise_for_error()
        except LockTimeout as exc:
            raise StoreWriteError(str(exc))

        logger.info("Restored backup from %s: %s", document.get("timestamp"), counts)
        return counts
