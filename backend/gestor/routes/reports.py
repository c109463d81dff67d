# Overview: Flask API route for the revenue, expense and profit summary.

# backend/gestor/routes/reports.py
from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, require_auth, require_permission
from ..permissions import Action, Module

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/summary")
@require_auth
@require_permission(Module.REPORTING_TOOLS, Action.VIEW)
@handle_service_errors
def summary_route():
    """
    Query params:
    - start: ISO-8601 date or datetime (optional)
    - end: ISO-8601 date or datetime (optional, a bare date covers the whole day)
    """
    report = g.services.reports.summary(
        g.current_employee,
        start=request.args.get("start"),
        end=request.args.get("end"),
    )
    return jsonify(report)
