# Overview: Single-writer lock and commit retry helpers shared by every mutating service.

from __future__ import annotations

import threading
import time
from contextlib import contextmanager

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError


class LockTimeout(Exception):
    """Raised when the writer lock could not be acquired in time."""


class WriterLock:
    """
    Serializes read-modify-write cycles on whole collections.

    The store's unit of update is an entire collection, so two concurrent
    writers would otherwise lose each other's changes. Re-entrant so a
    service may call another service while already holding it.
    """

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self._lock = threading.RLock()

    @contextmanager
    def hold(self, timeout: float | None = None):
        wait = self.timeout if timeout is None else timeout
        if not self._lock.acquire(timeout=wait):
            raise LockTimeout(f"writer lock not acquired within {wait:g}s")
        try:
            yield
        finally:
            self._lock.release()


def run_with_retry(func, *, session, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (database locked) and StaleDataError.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
