# Overview: Request and permission decorators for API routes.

from functools import wraps

from flask import current_app, g, jsonify, request

from .services import get_services
from .services.auth_service import AuthenticationFailure, PasswordValidationError
from .services.import_service import ImportRowsError
from .services.inventory_service import InsufficientStock
from .services.permission_service import AuthorizationDenied
from .services.store_service import RecordNotFound, StoreWriteError
from .validation import ConflictError, ValidationError


def require_auth(f):
    """
    Require a valid bearer token.

    Sets:
    - g.services: the Services bound to this request
    - g.current_employee: the authenticated Employee
    - g.session_context: the full SessionContext

    Returns 401 when the header is missing or the token is invalid, expired,
    revoked, or belongs to an employee that no longer exists.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1]
        services = get_services()
        context = services.sessions.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.services = services
        g.current_employee = context.employee
        g.session_context = context
        return f(*args, **kwargs)

    return decorated_function


def require_permission(module: str, action: str):
    """Gate a route on one module/action pair of the role table."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(g, "current_employee"):
                return jsonify({"error": "Authentication required"}), 401

            employee = g.current_employee
            if not g.services.policy.allows(employee.role, module, action):
                current_app.logger.warning(
                    "Permission denied: employee=%s role=%s %s %s",
                    employee.id, employee.role, request.method, request.path,
                )
                return jsonify({
                    "error": "Permission denied",
                    "required_permission": f"{module}:{action}",
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def handle_service_errors(f):
    """Translate service exceptions into JSON error responses."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except AuthorizationDenied as e:
            return jsonify({"error": "Permission denied", "message": str(e)}), 403
        except AuthenticationFailure as e:
            return jsonify({"error": str(e)}), 401
        except RecordNotFound as e:
            return jsonify({"error": str(e)}), 404
        except InsufficientStock as e:
            return jsonify({
                "error": str(e),
                "product_id": e.product_id,
                "requested": e.requested,
                "available": e.available,
            }), 409
        except ImportRowsError as e:
            return jsonify({"error": str(e), "rows": e.errors}), 400
        except PasswordValidationError as e:
            return jsonify({"error": str(e), "problems": e.problems}), 400
        except ConflictError as e:
            return jsonify({"error": str(e)}), 409
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except StoreWriteError as e:
            current_app.logger.error("Store write failed on %s %s: %s", request.method, request.path, e)
            return jsonify({"error": "Could not save changes, try again"}), 503
        except Exception:
            current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
            return jsonify({"error": "Internal server error"}), 500

    return decorated_function


def json_body() -> dict:
    """Request JSON as a dict; no body reads as {}. Call under handle_service_errors."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
