# Overview: Flask API routes for employee administration.

# backend/gestor/routes/employees.py
"""
Employee routes. Responses never include the stored credential digest.

Deleting an employee also revokes every session token they hold.
"""

from flask import Blueprint, g, jsonify

from ..decorators import handle_service_errors, json_body, require_auth, require_permission
from ..permissions import Action, Module

employees_bp = Blueprint("employees", __name__, url_prefix="/api/employees")


@employees_bp.get("")
@require_auth
@require_permission(Module.EMPLOYEES, Action.VIEW)
@handle_service_errors
def list_employees_route():
    employees = g.services.employees.list_employees()
    return jsonify({"items": [e.to_public_dict() for e in employees], "count": len(employees)})


@employees_bp.post("")
@require_auth
@require_permission(Module.EMPLOYEES, Action.CREATE)
@handle_service_errors
def create_employee_route():
    data = json_body()
    employee = g.services.employees.create_employee(g.current_employee, data)
    return jsonify(employee.to_public_dict()), 201


@employees_bp.put("/<employee_id>")
@require_auth
@require_permission(Module.EMPLOYEES, Action.EDIT)
@handle_service_errors
def update_employee_route(employee_id: str):
    data = json_body()
    employee = g.services.employees.update_employee(g.current_employee, employee_id, data)
    return jsonify(employee.to_public_dict())


@employees_bp.delete("/<employee_id>")
@require_auth
@require_permission(Module.EMPLOYEES, Action.DELETE)
@handle_service_errors
def delete_employee_route(employee_id: str):
    employee = g.services.employees.delete_employee(g.current_employee, employee_id)
    revoked = g.services.sessions.revoke_employee_sessions(employee.id)
    return jsonify({"deleted": employee.id, "sessions_revoked": revoked})
