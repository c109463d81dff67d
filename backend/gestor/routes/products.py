# Overview: Flask API routes for products; parses input and returns JSON responses.

# backend/gestor/routes/products.py
"""
Product management routes.

- Read operations require inventory:view
- Create/edit/delete require the matching inventory action
- Stock changes made here are written to the inventory log
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, json_body, require_auth, require_permission
from ..permissions import Action, Module

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_permission(Module.INVENTORY, Action.VIEW)
@handle_service_errors
def list_products():
    """
    Query params:
    - category: str (optional) - exact category, case-insensitive
    - q: str (optional) - substring of the product name
    """
    products = g.services.facade.list_products()
    category = (request.args.get("category") or "").strip().lower()
    query = (request.args.get("q") or "").strip().lower()
    if category:
        products = [p for p in products if p.category.lower() == category]
    if query:
        products = [p for p in products if query in p.name.lower()]
    return jsonify({"items": [p.to_dict() for p in products], "count": len(products)})


@products_bp.get("/<product_id>")
@require_auth
@require_permission(Module.INVENTORY, Action.VIEW)
@handle_service_errors
def get_product(product_id: str):
    return jsonify(g.services.facade.get_product(product_id).to_dict())


@products_bp.post("")
@require_auth
@require_permission(Module.INVENTORY, Action.CREATE)
@handle_service_errors
def create_product_route():
    payload = json_body()
    product = g.services.facade.create_product(g.current_employee, payload)
    return jsonify(product.to_dict()), 201


@products_bp.put("/<product_id>")
@require_auth
@require_permission(Module.INVENTORY, Action.EDIT)
@handle_service_errors
def update_product_route(product_id: str):
    payload = json_body()
    product = g.services.facade.update_product(g.current_employee, product_id, payload)
    return jsonify(product.to_dict())


@products_bp.delete("/<product_id>")
@require_auth
@require_permission(Module.INVENTORY, Action.DELETE)
@handle_service_errors
def delete_product_route(product_id: str):
    product = g.services.facade.delete_product(g.current_employee, product_id)
    return jsonify({"deleted": product.id})
