"""Sort keys for query results."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .value import Value


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def apply(self, ordering: int) -> int:
        return ordering if self is Direction.ASC else -ordering


def compare_values(left: Value, right: Value) -> Optional[int]:
    """Compare two field values; missing values sort after present ones, mismatched kinds do not compare."""

    if left.is_none and right.is_none:
        return 0
    if left.is_none:
        return 1
    if right.is_none:
        return -1
    return left.compare(right)


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: Direction = Direction.ASC

    @classmethod
    def asc(cls, field: str) -> "OrderBy":
        return cls(field, Direction.ASC)

    @classmethod
    def desc(cls, field: str) -> "OrderBy":
        return cls(field, Direction.DESC)

    @classmethod
    def parse(cls, raw: str) -> "OrderBy":
        """Parse ``"field"``, ``"-field"`` or ``"field desc"``."""

        text = raw.strip()
        if text.startswith("-"):
            return cls.desc(text[1:])
        field, _, direction = text.partition(" ")
        return cls(field, Direction(direction.strip().lower() or "asc"))

    def compare(self, left: Value, right: Value) -> Optional[int]:
        ordering = compare_values(left, right)
        if ordering is None:
            return None
        return self.direction.apply(ordering)

