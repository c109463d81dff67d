# Overview: Flask API routes for checkout, sales history and quotations.

# backend/gestor/routes/sales.py
"""
Point of sale routes.

Checkout body:
    {"items": [{"productId": "1", "quantity": 2, "discount": 0},
               {"name": "Gift wrap", "unitPrice": 3, "quantity": 1}],
     "paymentMethod": "CASH",
     "customer": {"id": "c2"}}

Lines without productId are free items and need add-free-item; lines with a
discount need apply-discount. Both are checked by the service.
"""

from flask import Blueprint, g, jsonify

from ..decorators import handle_service_errors, json_body, require_auth, require_permission
from ..permissions import Action, Module

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")
quotations_bp = Blueprint("quotations", __name__, url_prefix="/api/quotations")


@sales_bp.post("")
@require_auth
@require_permission(Module.POINT_OF_SALE, Action.CREATE)
@handle_service_errors
def checkout_route():
    data = json_body()
    sale = g.services.facade.checkout(
        g.current_employee,
        data.get("items") or [],
        data.get("paymentMethod"),
        customer=data.get("customer"),
    )
    return jsonify(sale.to_dict()), 201


@sales_bp.get("")
@require_auth
@require_permission(Module.SALES_HISTORY, Action.VIEW)
@handle_service_errors
def list_sales_route():
    sales = g.services.facade.list_sales()
    return jsonify({"items": [s.to_dict() for s in sales], "count": len(sales)})


@sales_bp.delete("/<sale_id>")
@require_auth
@require_permission(Module.SALES_HISTORY, Action.DELETE)
@handle_service_errors
def delete_sale_route(sale_id: str):
    sale = g.services.facade.delete_sale(g.current_employee, sale_id)
    return jsonify({"deleted": sale.id, "stock_restored": False})


@quotations_bp.post("")
@require_auth
@require_permission(Module.POINT_OF_SALE, Action.CREATE)
@handle_service_errors
def create_quotation_route():
    data = json_body()
    kwargs = {}
    if data.get("validDays") is not None:
        kwargs["valid_days"] = data["validDays"]
    quotation = g.services.facade.create_quotation(
        g.current_employee,
        data.get("items") or [],
        customer=data.get("customer"),
        **kwargs,
    )
    return jsonify(quotation.to_dict()), 201


@quotations_bp.get("")
@require_auth
@require_permission(Module.POINT_OF_SALE, Action.VIEW)
@handle_service_errors
def list_quotations_route():
    quotations = g.services.facade.list_quotations()
    return jsonify({"items": [q.to_dict() for q in quotations], "count": len(quotations)})


@quotations_bp.get("/<quotation_id>/cart")
@require_auth
@require_permission(Module.POINT_OF_SALE, Action.VIEW)
@handle_service_errors
def load_quotation_route(quotation_id: str):
    lines = g.services.facade.load_quotation(g.current_employee, quotation_id)
    return jsonify({"items": [line.to_dict() for line in lines]})
