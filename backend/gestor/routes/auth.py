# Overview: Flask API routes for login, logout and the current session.

# backend/gestor/routes/auth.py
"""
Authentication API routes

- Login by email and password returns a bearer token
- Legacy plaintext credentials are upgraded during login
- Failures never reveal whether the email exists
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import handle_service_errors, require_auth
from ..services import get_services
from ..services.auth_service import AuthenticationFailure
from ..services.store_service import StoreWriteError
from ..time_utils import to_utc_z

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate an employee and create a session token.

    Body: {"email": "...", "password": "..."}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    identifier = data.get("email") or data.get("identifier")
    password = data.get("password")
    if not identifier or not password:
        return jsonify({"error": "email and password required"}), 400

    services = get_services()
    try:
        employee = services.credentials.login(identifier, password)
    except AuthenticationFailure as e:
        current_app.logger.info("Failed login for %s", identifier)
        return jsonify({"error": str(e)}), 401
    except StoreWriteError:
        current_app.logger.exception("Credential upgrade failed during login")
        return jsonify({"error": "Could not complete login, try again"}), 503

    session, token = services.sessions.create_session(employee)
    return jsonify({
        "token": token,
        "expires_at": to_utc_z(session.expires_at),
        "employee": employee.to_public_dict(),
        "permissions": services.policy.permissions_for(employee.role),
    })


@auth_bp.post("/logout")
@require_auth
@handle_service_errors
def logout_route():
    token = request.headers["Authorization"].split(" ", 1)[1]
    g.services.sessions.revoke_session(token)
    return jsonify({"status": "logged_out"})


@auth_bp.get("/me")
@require_auth
def me_route():
    employee = g.current_employee
    return jsonify({
        "employee": employee.to_public_dict(),
        "permissions": g.services.policy.permissions_for(employee.role),
        "session": g.session_context.session.to_dict(),
    })
