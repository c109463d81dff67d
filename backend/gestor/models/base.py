from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar


@dataclass
class Record:
    """
    Base for records persisted as JSON objects inside a keyed collection.

    JSON_FIELDS maps dataclass attribute -> JSON key. Keys found in stored
    JSON but not mapped are kept in ``extra`` and written back by
    ``to_dict()``, so fields written by other clients survive a
    read-modify-write cycle.
    """

    JSON_FIELDS: ClassVar[dict[str, str]] = {}
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset()

    extra: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict) -> "Record":
        remaining = dict(data or {})
        kwargs: dict[str, Any] = {}
        for attr, key in cls.JSON_FIELDS.items():
            if key in remaining:
                kwargs[attr] = cls._coerce(attr, remaining.pop(key))
        obj = cls(**kwargs)
        obj.extra = remaining
        return obj

    @classmethod
    def _coerce(cls, attr: str, value: Any) -> Any:
        if attr not in cls.NUMERIC_FIELDS:
            return value
        # null, garbage and NaN/inf read back as the field default
        try:
            number = float(value)
        except (TypeError, ValueError):
            return cls._field_default(attr)
        return number if math.isfinite(number) else cls._field_default(attr)

    @classmethod
    def _field_default(cls, attr: str) -> Any:
        for f in fields(cls):
            if f.name == attr:
                return f.default
        raise AttributeError(attr)

    def to_dict(self) -> dict:
        out = {key: self._dump(getattr(self, attr)) for attr, key in self.JSON_FIELDS.items()}
        for key, value in self.extra.items():
            out.setdefault(key, value)
        return out

    @staticmethod
    def _dump(value: Any) -> Any:
        if isinstance(value, Record):
            return value.to_dict()
        if isinstance(value, list):
            return [v.to_dict() if isinstance(v, Record) else v for v in value]
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    def copy_with(self, **changes) -> "Record":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        values["extra"] = dict(self.extra)
        return type(self)(**values)
