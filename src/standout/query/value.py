"""Typed field values seen by query clauses."""
from __future__ import annotations

import datetime as _dt
import enum
import math
from dataclasses import dataclass
from typing import Any, Optional


class ValueKind(str, enum.Enum):
    NONE = "none"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ENUM = "enum"
    TIMESTAMP = "timestamp"


@dataclass(frozen=True, order=True)
class Timestamp:
    """Milliseconds since the Unix epoch."""

    millis: int

    @classmethod
    def from_secs(cls, secs: int) -> "Timestamp":
        return cls(int(secs) * 1000)

    @classmethod
    def from_datetime(cls, value: _dt.datetime) -> "Timestamp":
        if value.tzinfo is None:
            value = value.replace(tzinfo=_dt.timezone.utc)
        return cls(int(value.timestamp() * 1000))

    @classmethod
    def from_date(cls, value: _dt.date) -> "Timestamp":
        return cls.from_datetime(_dt.datetime(value.year, value.month, value.day))

    @property
    def secs(self) -> int:
        return self.millis // 1000


def enum_discriminant(member: enum.Enum) -> int:
    """Integer identity of an enum member: its value when it is an int, else its declaration index."""

    if isinstance(member.value, int) and not isinstance(member.value, bool):
        return member.value
    return list(type(member)).index(member)


@dataclass(frozen=True)
class Value:
    """
    A field value tagged with its kind.

    Accessors may return plain Python values; :meth:`of` converts them.
    ``bool`` maps to ``BOOL`` (never ``NUMBER``), ``int``/``float`` to
    ``NUMBER``, ``enum.Enum`` members to ``ENUM`` discriminants, and
    ``datetime``/``date`` to ``TIMESTAMP``.
    """

    kind: ValueKind
    data: Any = None

    @classmethod
    def none(cls) -> "Value":
        return _NONE

    @classmethod
    def boolean(cls, value: bool) -> "Value":
        return cls(ValueKind.BOOL, bool(value))

    @classmethod
    def number(cls, value: float) -> "Value":
        return cls(ValueKind.NUMBER, value)

    @classmethod
    def string(cls, value: str) -> "Value":
        return cls(ValueKind.STRING, value)

    @classmethod
    def enum(cls, discriminant: int) -> "Value":
        return cls(ValueKind.ENUM, int(discriminant))

    @classmethod
    def timestamp(cls, value: Timestamp) -> "Value":
        return cls(ValueKind.TIMESTAMP, value)

    @classmethod
    def of(cls, raw: Any) -> "Value":
        if isinstance(raw, Value):
            return raw
        if raw is None:
            return _NONE
        if isinstance(raw, bool):
            return cls.boolean(raw)
        if isinstance(raw, enum.Enum):
            return cls.enum(enum_discriminant(raw))
        if isinstance(raw, (int, float)):
            return cls.number(raw)
        if isinstance(raw, str):
            return cls.string(raw)
        if isinstance(raw, Timestamp):
            return cls.timestamp(raw)
        if isinstance(raw, _dt.datetime):
            return cls.timestamp(Timestamp.from_datetime(raw))
        if isinstance(raw, _dt.date):
            return cls.timestamp(Timestamp.from_date(raw))
        raise TypeError(f"cannot use {type(raw).__name__} as a query value")

    @property
    def is_none(self) -> bool:
        return self.kind is ValueKind.NONE

    def compare(self, other: "Value") -> Optional[int]:
        """
        Three-way compare within one kind: negative, zero or positive.

        Returns ``None`` for different kinds and for NaN.
        """
        if self.kind is not other.kind:
            return None
        if self.kind is ValueKind.NONE:
            return 0
        left, right = self.data, other.data
        if self.kind is ValueKind.NUMBER and (_is_nan(left) or _is_nan(right)):
            return None
        if left == right:
            return 0
        return -1 if left < right else 1


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


_NONE = Value(ValueKind.NONE)
