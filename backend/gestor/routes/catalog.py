# Overview: Flask API routes for suppliers, customers and expenses.

from flask import Blueprint, g, jsonify

from ..decorators import handle_service_errors, json_body, require_auth, require_permission
from ..permissions import Action, Module

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")
customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")
expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


def _listing(records):
    return jsonify({"items": [r.to_dict() for r in records], "count": len(records)})


# -- suppliers --

@suppliers_bp.get("")
@require_auth
@require_permission(Module.SUPPLIERS, Action.VIEW)
@handle_service_errors
def list_suppliers_route():
    return _listing(g.services.catalog.list_suppliers())


@suppliers_bp.post("")
@require_auth
@require_permission(Module.SUPPLIERS, Action.CREATE)
@handle_service_errors
def create_supplier_route():
    supplier = g.services.catalog.create_supplier(g.current_employee, json_body())
    return jsonify(supplier.to_dict()), 201


@suppliers_bp.put("/<supplier_id>")
@require_auth
@require_permission(Module.SUPPLIERS, Action.EDIT)
@handle_service_errors
def update_supplier_route(supplier_id: str):
    supplier = g.services.catalog.update_supplier(
        g.current_employee, supplier_id, json_body()
    )
    return jsonify(supplier.to_dict())


@suppliers_bp.delete("/<supplier_id>")
@require_auth
@require_permission(Module.SUPPLIERS, Action.DELETE)
@handle_service_errors
def delete_supplier_route(supplier_id: str):
    supplier = g.services.catalog.delete_supplier(g.current_employee, supplier_id)
    return jsonify({"deleted": supplier.id})


# -- customers --

@customers_bp.get("")
@require_auth
@require_permission(Module.CUSTOMERS, Action.VIEW)
@handle_service_errors
def list_customers_route():
    return _listing(g.services.catalog.list_customers())


@customers_bp.post("")
@require_auth
@require_permission(Module.CUSTOMERS, Action.CREATE)
@handle_service_errors
def create_customer_route():
    customer = g.services.catalog.create_customer(g.current_employee, json_body())
    return jsonify(customer.to_dict()), 201


@customers_bp.put("/<customer_id>")
@require_auth
@require_permission(Module.CUSTOMERS, Action.EDIT)
@handle_service_errors
def update_customer_route(customer_id: str):
    customer = g.services.catalog.update_customer(
        g.current_employee, customer_id, json_body()
    )
    return jsonify(customer.to_dict())


@customers_bp.delete("/<customer_id>")
@require_auth
@require_permission(Module.CUSTOMERS, Action.DELETE)
@handle_service_errors
def delete_customer_route(customer_id: str):
    customer = g.services.catalog.delete_customer(g.current_employee, customer_id)
    return jsonify({"deleted": customer.id})


# -- expenses --

@expenses_bp.get("")
@require_auth
@require_permission(Module.EXPENSES, Action.VIEW)
@handle_service_errors
def list_expenses_route():
    return _listing(g.services.catalog.list_expenses())


@expenses_bp.post("")
@require_auth
@require_permission(Module.EXPENSES, Action.CREATE)
@handle_service_errors
def create_expense_route():
    expense = g.services.catalog.create_expense(g.current_employee, json_body())
    return jsonify(expense.to_dict()), 201


@expenses_bp.delete("/<expense_id>")
@require_auth
@require_permission(Module.EXPENSES, Action.DELETE)
@handle_service_errors
def delete_expense_route(expense_id: str):
    expense = g.services.catalog.delete_expense(g.current_employee, expense_id)
    return jsonify({"deleted": expense.id})
