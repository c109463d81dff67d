# backend/gestor/routes/system.py
"""
System health endpoint.

Checks that the store table and the session table answer queries. The
store check reads raw rows only, so a corrupt collection does not make the
service unhealthy; reads recover from that on their own.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import SessionToken, StoreEntry
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_store_health() -> dict:
    start_time = time.time()
    try:
        prefix = current_app.config["STORE_NAMESPACE"] + "_"
        keys = db.session.query(StoreEntry.key).filter(StoreEntry.key.startswith(prefix)).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"namespace": current_app.config["STORE_NAMESPACE"], "persisted_collections": keys},
        }
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Store health check failed")
        return {"status": "unhealthy", "latency_ms": round(elapsed_ms, 2), "error": "Database error"}


def check_session_service_health() -> dict:
    start_time = time.time()
    try:
        now = utcnow()
        active_sessions = db.session.query(SessionToken).filter(
            SessionToken.is_revoked.is_(False),
            SessionToken.expires_at > now,
        ).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"active_sessions": active_sessions},
        }
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Session service health check failed")
        return {"status": "unhealthy", "latency_ms": round(elapsed_ms, 2), "error": "Session service error"}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: all checks healthy
    - 503: one or more checks unhealthy
    """
    start_time = time.time()
    checks = {
        "store": check_store_health(),
        "session_service": check_session_service_health(),
    }
    unhealthy = any(check["status"] == "unhealthy" for check in checks.values())

    response = {
        "status": "unhealthy" if unhealthy else "healthy",
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": checks,
    }
    return response, 503 if unhealthy else 200
