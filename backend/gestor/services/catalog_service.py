# Overview: Suppliers, customers and expenses; plain authorised CRUD over their collections.

from __future__ import annotations

from ..models import Customer, Expense, Supplier
from ..permissions import Action, Module
from ..time_utils import now_iso
from ..validation import ValidationError, clean_str, coerce_number, pick
from .permission_service import AuthorizationPolicy
from .store_service import Collection, KeyedStore, WorkingSet, find_record, new_id
from .transaction_service import unit_of_work

SUPPLIER_FIELDS = {"name", "contactName", "phone", "email"}
CUSTOMER_FIELDS = {"name", "taxId", "email", "phone", "address"}
EXPENSE_FIELDS = {"description", "amount", "category", "date"}


class CatalogService:
    """
    One collection, one module:
      suppliers -> suppliers, customers -> customers, expenses -> expenses.
    Expenses have no edit action; they are created or deleted.
    """

    def __init__(self, store: KeyedStore, lock, policy: AuthorizationPolicy):
        self.store = store
        self.lock = lock
        self.policy = policy

    # -- suppliers --

    def list_suppliers(self) -> list[Supplier]:
        return WorkingSet(self.store).load(Collection.SUPPLIERS)

    def create_supplier(self, actor, data: dict) -> Supplier:
        self.policy.require(actor, Module.SUPPLIERS, Action.CREATE)
        supplier = Supplier.from_dict(self._clean(data, SUPPLIER_FIELDS))
        supplier.id = new_id()
        return self._append(Collection.SUPPLIERS, supplier)

    def update_supplier(self, actor, supplier_id: str, data: dict) -> Supplier:
        self.policy.require(actor, Module.SUPPLIERS, Action.EDIT)
        return self._update(Collection.SUPPLIERS, supplier_id, self._clean(data, SUPPLIER_FIELDS, partial=True))

    def delete_supplier(self, actor, supplier_id: str) -> Supplier:
        self.policy.require(actor, Module.SUPPLIERS, Action.DELETE)
        return self._remove(Collection.SUPPLIERS, supplier_id)

    # -- customers --

    def list_customers(self) -> list[Customer]:
        return WorkingSet(self.store).load(Collection.CUSTOMERS)

    def create_customer(self, actor, data: dict) -> Customer:
        self.policy.require(actor, Module.CUSTOMERS, Action.CREATE)
        customer = Customer.from_dict(self._clean(data, CUSTOMER_FIELDS))
        customer.id = new_id()
        return self._append(Collection.CUSTOMERS, customer)

    def update_customer(self, actor, customer_id: str, data: dict) -> Customer:
        self.policy.require(actor, Module.CUSTOMERS, Action.EDIT)
        return self._update(Collection.CUSTOMERS, customer_id, self._clean(data, CUSTOMER_FIELDS, partial=True))

    def delete_customer(self, actor, customer_id: str) -> Customer:
        self.policy.require(actor, Module.CUSTOMERS, Action.DELETE)
        return self._remove(Collection.CUSTOMERS, customer_id)

    # -- expenses --

    def list_expenses(self) -> list[Expense]:
        return WorkingSet(self.store).load(Collection.EXPENSES)

    def create_expense(self, actor, data: dict) -> Expense:
        self.policy.require(actor, Module.EXPENSES, Action.CREATE)
        data = pick(data or {}, EXPENSE_FIELDS)
        description = clean_str(data.get("description"))
        if not description:
            raise ValidationError("description is required")
        expense = Expense(
            id=new_id(),
            description=description,
            amount=coerce_number(data.get("amount"), "amount", minimum=0),
            category=clean_str(data.get("category")) or "General",
            date=clean_str(data.get("date")) or now_iso(),
        )
        return self._append(Collection.EXPENSES, expense)

    def delete_expense(self, actor, expense_id: str) -> Expense:
        self.policy.require(actor, Module.EXPENSES, Action.DELETE)
        return self._remove(Collection.EXPENSES, expense_id)

    # -- shared --

    @staticmethod
    def _clean(data: dict, allowed: set[str], partial: bool = False) -> dict:
        out = {k: clean_str(v) for k, v in pick(data or {}, allowed).items()}
        if (not partial or "name" in out) and not out.get("name"):
            raise ValidationError("name is required")
        return out

    def _append(self, collection: str, record):
        with unit_of_work(self.store, self.lock) as working:
            working.load(collection).append(record)
        return record

    def _update(self, collection: str, record_id: str, patch: dict):
        with unit_of_work(self.store, self.lock) as working:
            record = find_record(working.load(collection), record_id, collection[:-1].capitalize())
            for attr, key in type(record).JSON_FIELDS.items():
                if key in patch:
                    setattr(record, attr, patch[key])
        return record

    def _remove(self, collection: str, record_id: str):
        with unit_of_work(self.store, self.lock) as working:
            records = working.load(collection)
            record = find_record(records, record_id, collection[:-1].capitalize())
            records[:] = [r for r in records if r is not record]
        return record
