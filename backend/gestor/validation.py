from __future__ import annotations

import math
from typing import Any, Iterable


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValidationError):
    """409-level business rule conflict (e.g., duplicate product name in a category)."""


def require_fields(payload: dict, fields: Iterable[str]) -> None:
    missing = [
        f for f in fields
        if payload.get(f) is None or (isinstance(payload.get(f), str) and not payload.get(f).strip())
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def coerce_number(value: Any, field: str, *, minimum: float | None = None) -> float:
    """
    Normalize numeric input coming from JSON or a spreadsheet cell.

    - bool is rejected (it is an int subclass)
    - strings are stripped and may use a decimal comma ("12,5")
    - NaN/inf are rejected
    """
    if value is None:
        raise ValidationError(f"{field} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")

    if isinstance(value, str):
        stripped = value.strip().replace(",", ".")
        if not stripped:
            raise ValidationError(f"{field} must be a number")
        try:
            number = float(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be a number")
    elif isinstance(value, (int, float)):
        number = float(value)
    else:
        raise ValidationError(f"{field} must be a number")

    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field} must be a finite number")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be >= {minimum:g}")
    return number


def clean_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip()


def pick(payload: dict, allowed: Iterable[str]) -> dict:
    """Keep only writable keys from an incoming patch (security boundary)."""
    allowed = set(allowed)
    return {k: v for k, v in payload.items() if k in allowed}
