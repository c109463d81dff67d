# Overview: Credential hashing, password policy and employee login.

"""
Credential Service

WHY: Every mutation is attributed to an employee, so logging in is the
entry point of attribution. Stored credentials are one-way digests.

SECURITY NOTES:
- Digest: bcrypt.kdf over the plaintext with an installation salt,
  32 bytes hex-encoded (64 chars). Deterministic so the digest can be stored
  in the employee record and compared on login.
- Legacy records that still hold the plaintext are upgraded to a digest on
  their first successful login. The upgrade is one-way.
- Login failures never say whether the identifier exists.
- Password policy: 7+ chars, a letter, a digit and one of * / + - # @
"""

from __future__ import annotations

import hmac
import logging
import re

import bcrypt

from ..models import Employee
from ..validation import ValidationError
from .concurrency import LockTimeout, WriterLock
from .store_service import Collection, KeyedStore, StoreWriteError, WorkingSet

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 7
PASSWORD_SYMBOLS = "*/+-#@"
DIGEST_BYTES = 32


class AuthenticationFailure(Exception):
    """No employee matches the given credentials."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class PasswordValidationError(ValidationError):
    """Raised when a password doesn't meet the acceptance policy."""

    def __init__(self, problems: list[str]):
        super().__init__("Password " + "; ".join(problems))
        self.problems = problems


def validate_password(password: str) -> None:
    """
    Validate a new plaintext password.

    Requirements:
    - Minimum 7 characters
    - At least one letter
    - At least one digit
    - At least one of * / + - # @

    Raises PasswordValidationError listing every unmet requirement.
    """
    if not isinstance(password, str):
        raise PasswordValidationError(["must be a string"])

    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[A-Za-z]", password):
        problems.append("must contain at least one letter")
    if not re.search(r"\d", password):
        problems.append("must contain at least one digit")
    if not any(ch in PASSWORD_SYMBOLS for ch in password):
        problems.append(f"must contain at least one of {' '.join(PASSWORD_SYMBOLS)}")
    if problems:
        raise PasswordValidationError(problems)


def _is_digest(value: str) -> bool:
    # A legacy plaintext that is itself 64 lowercase hex chars looks like a
    # digest, so it can never log in or be upgraded. Reset such passwords.
    if not isinstance(value, str) or len(value) != DIGEST_BYTES * 2:
        return False
    return all(ch in "0123456789abcdef" for ch in value)


def _same(stored: str, candidate: str) -> bool:
    # compare_digest only accepts ASCII str, so compare the UTF-8 bytes
    return hmac.compare_digest(str(stored).encode("utf-8"), candidate.encode("utf-8"))


class CredentialService:
    def __init__(self, store: KeyedStore, lock: WriterLock, *, salt: str, rounds: int = 50):
        if not salt:
            raise ValueError("credential salt must not be empty")
        self.store = store
        self.lock = lock
        self.salt = salt.encode("utf-8")
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Fixed-length hex digest; same input and configuration, same output."""
        digest = bcrypt.kdf(
            password=plaintext.encode("utf-8"),
            salt=self.salt,
            desired_key_bytes=DIGEST_BYTES,
            rounds=self.rounds,
            ignore_few_rounds=True,
        )
        return digest.hex()

    def set_password(self, employee: Employee, plaintext: str) -> None:
        """Validate against the policy and store the digest on the record."""
        validate_password(plaintext)
        employee.password = self.hash(plaintext)

    def login(self, identifier: str, plaintext: str) -> Employee:
        """
        Authenticate by email (case-insensitive) and password.

        Returns the Employee on success, raises AuthenticationFailure otherwise.
        Raises StoreWriteError when a legacy credential matched but its
        upgrade could not be persisted.
        """
        if not isinstance(identifier, str) or not isinstance(plaintext, str):
            raise AuthenticationFailure()
        if not identifier.strip() or not plaintext:
            raise AuthenticationFailure()

        wanted = identifier.strip().lower()
        employees = [Employee.from_dict(e) for e in self.store.read_collection(Collection.EMPLOYEES)
                     if isinstance(e, dict)]
        employee = next((e for e in employees if (e.email or "").strip().lower() == wanted), None)
        digest = self.hash(plaintext)

        if employee is None or not employee.password:
            raise AuthenticationFailure()

        if _same(employee.password, digest):
            return employee

        # A stored digest is never accepted as a plaintext password.
        if not _is_digest(employee.password) and _same(employee.password, plaintext):
            return self._upgrade_legacy_credential(employee.id, plaintext, digest)

        raise AuthenticationFailure()

    def _upgrade_legacy_credential(self, employee_id: str, plaintext: str, digest: str) -> Employee:
        try:
            with self.lock.hold():
                working = WorkingSet(self.store)
                stored = next((e for e in working.employees if e.id == employee_id), None)
                # Re-check under the lock: another request may have upgraded it already.
                if stored is None or stored.password not in (plaintext, digest):
                    raise AuthenticationFailure()
                stored.password = digest
                self.store.set_many(working.changes()).raise_for_error()
        except LockTimeout as exc:
            raise StoreWriteError(str(exc))

        logger.info("Upgraded legacy plaintext credential for employee %s", employee_id)
        return stored
