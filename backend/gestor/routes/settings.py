# Overview: Flask API routes for the business profile and the role table.

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, require_auth, require_permission
from ..permissions import Action, Module, Role

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")
permissions_bp = Blueprint("permissions", __name__, url_prefix="/api/permissions")


@settings_bp.get("")
@require_auth
@handle_service_errors
def get_settings_route():
    """Every signed-in employee needs the profile for receipts and headers."""
    return jsonify(g.services.settings.get_config().to_dict())


@settings_bp.put("")
@require_auth
@require_permission(Module.SETTINGS, Action.EDIT)
@handle_service_errors
def save_settings_route():
    config = g.services.settings.save_config(g.current_employee, request.get_json(silent=True))
    return jsonify(config.to_dict())


@permissions_bp.get("")
@require_auth
def role_table_route():
    """
    Query params:
    - role: str (optional) - only that role; defaults to every role
    """
    policy = g.services.policy
    role = request.args.get("role")
    if role:
        role = Role.LEGACY_ALIASES.get(role, role)
        if role not in Role.ALL:
            return jsonify({"error": f"role must be one of {', '.join(Role.ALL)}"}), 400
        return jsonify({role: policy.permissions_for(role)})
    return jsonify({r: policy.permissions_for(r) for r in Role.ALL})
