# Overview: Bearer session tokens for the HTTP API.

"""
Session Token Management

WHY: The HTTP surface needs to know which employee is acting so every
mutation can be authorized and attributed. Tokens are random, stored
hashed, and time-limited.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage
- Absolute timeout (SESSION_TTL_HOURS)
- Revocable on logout, and all at once when an employee is removed
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from ..models import Employee, SessionToken
from ..time_utils import utcnow
from .store_service import Collection, KeyedStore


@dataclass
class SessionContext:
    employee: Employee
    session: SessionToken


def generate_token() -> str:
    """64-character hex string; sent to the client once, never stored."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionService:
    def __init__(self, store: KeyedStore, *, ttl_hours: int = 12):
        self.store = store
        self.session = store.session
        self.ttl = timedelta(hours=ttl_hours)

    def create_session(self, employee: Employee) -> tuple[SessionToken, str]:
        """Returns (session_record, plaintext_token)."""
        plaintext_token = generate_token()
        now = utcnow()
        record = SessionToken(
            employee_id=employee.id,
            token_hash=hash_token(plaintext_token),
            created_at=now,
            expires_at=now + self.ttl,
            is_revoked=False,
        )
        self.session.add(record)
        self.session.commit()
        return record, plaintext_token

    def validate_session(self, token: str) -> SessionContext | None:
        """
        SessionContext for a live token, None otherwise.

        None when the token is unknown, revoked or expired, or when its
        employee no longer exists.
        """
        if not token:
            return None
        record = self.session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
        if record is None or record.is_revoked:
            return None
        if record.expires_at <= utcnow():
            return None

        employee = self._employee(record.employee_id)
        if employee is None:
            return None
        return SessionContext(employee=employee, session=record)

    def revoke_session(self, token: str) -> bool:
        record = self.session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
        if record is None or record.is_revoked:
            return False
        record.is_revoked = True
        record.revoked_at = utcnow()
        self.session.commit()
        return True

    def revoke_employee_sessions(self, employee_id: str) -> int:
        now = utcnow()
        records = self.session.query(SessionToken).filter_by(employee_id=employee_id, is_revoked=False).all()
        for record in records:
            record.is_revoked = True
            record.revoked_at = now
        self.session.commit()
        return len(records)

    def _employee(self, employee_id: str) -> Employee | None:
        for raw in self.store.read_collection(Collection.EMPLOYEES):
            if isinstance(raw, dict) and raw.get("id") == employee_id:
                return Employee.from_dict(raw)
        return None
