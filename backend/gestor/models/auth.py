from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from ..extensions import db
from ..permissions.categories import Role
from ..time_utils import to_utc_z
from .base import Record


@dataclass
class Employee(Record):
    """
    Staff member and login identity.

    email is the login identifier (unique, compared case-insensitively).
    password holds the credential digest; legacy records may still hold the
    plaintext until their next successful login migrates it.
    """
    JSON_FIELDS: ClassVar[dict[str, str]] = {
        "id": "id",
        "name": "name",
        "role": "role",
        "phone": "phone",
        "email": "email",
        "password": "password",
    }

    id: str = ""
    name: str = ""
    role: str = Role.SALES
    phone: str = ""
    email: str = ""
    password: str | None = None

    @classmethod
    def _coerce(cls, attr, value):
        if attr == "role" and isinstance(value, str):
            return Role.LEGACY_ALIASES.get(value, value)
        return super()._coerce(attr, value)

    def to_public_dict(self) -> dict:
        """Employee data safe to hand to clients (no credential)."""
        out = self.to_dict()
        out.pop("password", None)
        return out


class SessionToken(db.Model):
    """
    Bearer token issued on login.

    Tokens are stored as SHA-256 hashes; the plaintext is only returned to
    the client once. employee_id references a record inside the employees
    collection, not a SQL row, so there is no foreign key.
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_employee_active", "employee_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.String(64), nullable=False, index=True)
    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<SessionToken id={self.id} employee_id={self.employee_id!r} revoked={self.is_revoked}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "created_at": to_utc_z(self.created_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
