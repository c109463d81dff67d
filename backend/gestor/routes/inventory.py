# Overview: Flask API routes for stock movements and the inventory log.

# backend/gestor/routes/inventory.py
from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, json_body, require_auth, require_permission
from ..models import MovementType
from ..permissions import Action, Module

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/adjust")
@require_auth
@require_permission(Module.INVENTORY, Action.MANAGE_STOCK)
@handle_service_errors
def adjust_stock_route():
    """
    Manual stock movement.

    Body: {"productId": "...", "quantity": 5, "direction": "ENTRY" | "EXIT"}
    """
    data = json_body()
    product = g.services.facade.adjust_stock(
        g.current_employee,
        data.get("productId"),
        data.get("quantity"),
        (data.get("direction") or "").upper(),
    )
    return jsonify(product.to_dict())


@inventory_bp.get("/logs")
@require_auth
@require_permission(Module.INVENTORY, Action.AUDIT)
@handle_service_errors
def inventory_logs_route():
    """
    Query params:
    - product_id: str (optional)
    - type: ENTRY | SALE | ADJUSTMENT | DELETION (optional)
    - limit: int (optional)
    """
    entry_type = request.args.get("type")
    if entry_type:
        entry_type = MovementType.LEGACY_ALIASES.get(entry_type.upper(), entry_type.upper())
        if entry_type not in MovementType.ALL:
            return jsonify({"error": f"type must be one of {', '.join(MovementType.ALL)}"}), 400
    limit = request.args.get("limit", type=int)
    if limit is not None and limit < 0:
        return jsonify({"error": "limit must be >= 0"}), 400

    entries = g.services.facade.list_inventory_logs(
        product_id=request.args.get("product_id"),
        entry_type=entry_type,
        limit=limit,
    )
    return jsonify({"items": [e.to_dict() for e in entries], "count": len(entries)})


@inventory_bp.get("/low-stock")
@require_auth
@require_permission(Module.INVENTORY, Action.VIEW)
@handle_service_errors
def low_stock_route():
    products = g.services.facade.low_stock_products()
    return jsonify({"items": [p.to_dict() for p in products], "count": len(products)})
