# Overview: Flask API routes for whole-store backup and restore.

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, require_auth, require_permission
from ..permissions import Action, Module

backup_bp = Blueprint("backup", __name__, url_prefix="/api/backup")


@backup_bp.get("")
@require_auth
@require_permission(Module.SETTINGS, Action.EDIT)
@handle_service_errors
def export_backup_route():
    return jsonify(g.services.backups.export_document())


@backup_bp.post("")
@require_auth
@require_permission(Module.SETTINGS, Action.EDIT)
@handle_service_errors
def restore_backup_route():
    """Replaces every collection. Collections missing from the body are emptied."""
    counts = g.services.backups.restore(g.current_employee, request.get_json(silent=True))
    return jsonify({"restored": counts})
