"""Comparison operators and the value kinds they apply to."""
from __future__ import annotations

from enum import Enum
from typing import FrozenSet

from .value import ValueKind


class Op(str, Enum):
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    CONTAINS = "contains"
    STARTS_WITH = "startswith"
    ENDS_WITH = "endswith"
    REGEX = "regex"
    IN = "in"
    BEFORE = "before"
    AFTER = "after"
    IS = "is"

    def normalize(self) -> "Op":
        """Map the aliases ``before``, ``after`` and ``is`` onto ``lt``, ``gt`` and ``eq``."""

        return _ALIASES.get(self, self)

    def eval_ordering(self, ordering: int) -> bool:
        op = self.normalize()
        if op is Op.EQ:
            return ordering == 0
        if op is Op.NE:
            return ordering != 0
        if op is Op.GT:
            return ordering > 0
        if op is Op.GTE:
            return ordering >= 0
        if op is Op.LT:
            return ordering < 0
        if op is Op.LTE:
            return ordering <= 0
        return False

    def applies_to(self, kind: ValueKind) -> bool:
        return self in _APPLICABLE.get(kind, frozenset())


_ALIASES = {Op.BEFORE: Op.LT, Op.AFTER: Op.GT, Op.IS: Op.EQ}

_ORDERED: FrozenSet[Op] = frozenset({Op.EQ, Op.NE, Op.GT, Op.GTE, Op.LT, Op.LTE})

_APPLICABLE = {
    ValueKind.NONE: frozenset({Op.EQ, Op.NE}),
    ValueKind.BOOL: frozenset({Op.EQ, Op.NE, Op.IS}),
    ValueKind.NUMBER: _ORDERED,
    ValueKind.STRING: frozenset({Op.EQ, Op.NE, Op.CONTAINS, Op.STARTS_WITH, Op.ENDS_WITH, Op.REGEX}),
    ValueKind.ENUM: frozenset({Op.EQ, Op.NE, Op.IN}),
    ValueKind.TIMESTAMP: _ORDERED | {Op.BEFORE, Op.AFTER},
}
