"""Single filter predicates: field, operator, value."""
from __future__ import annotations

import enum
import re
from typing import Any, FrozenSet, Iterable, Pattern, Union

from ..errors import QueryCompileError
from .op import Op
from .value import Value, ValueKind, enum_discriminant


def _discriminants(values: Iterable[Any]) -> FrozenSet[int]:
    result = set()
    for value in values:
        if isinstance(value, enum.Enum):
            result.add(enum_discriminant(value))
        elif isinstance(value, int) and not isinstance(value, bool):
            result.add(value)
        else:
            raise TypeError(f"'in' clauses take enum members or discriminants, not {type(value).__name__}")
    return frozenset(result)


class Clause:
    """
    ``field op value``, prepared once when the query is built.

    Regex patterns compile here, so an invalid pattern raises
    :class:`QueryCompileError` from the builder call rather than while
    filtering. ``in`` takes an iterable of enum members or integer
    discriminants.
    """

    __slots__ = ("field", "op", "value", "pattern", "members")

    def __init__(self, field: str, op: Union[Op, str], value: Any) -> None:
        self.field = field
        self.op = Op(op)
        self.pattern: Union[Pattern[str], None] = None
        self.members: FrozenSet[int] = frozenset()
        self.value: Value = Value.none()
        if self.op is Op.REGEX:
            try:
                self.pattern = re.compile(str(value))
            except re.error as exc:
                raise QueryCompileError(str(value), str(exc)) from exc
        elif self.op is Op.IN:
            if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
                raise TypeError("'in' clauses take an iterable of enum values")
            self.members = _discriminants(value)
        else:
            self.value = Value.of(value)

    def __repr__(self) -> str:
        shown = self.pattern.pattern if self.pattern is not None else (
            sorted(self.members) if self.op is Op.IN else self.value.data
        )
        return f"Clause({self.field!r} {self.op.value} {shown!r})"

    def matches(self, field_value: Any) -> bool:
        """Evaluate against one field value; unsupported operator and kind pairs do not match."""

        value = Value.of(field_value)
        op = self.op
        if op is Op.REGEX:
            return value.kind is ValueKind.STRING and self.pattern is not None and bool(
                self.pattern.search(value.data)
            )
        if op is Op.IN:
            return value.kind is ValueKind.ENUM and value.data in self.members
        if value.kind is not self.value.kind:
            # values of different kinds are never equal
            return op.normalize() is Op.NE
        if not op.applies_to(value.kind):
            return False
        if value.kind is ValueKind.STRING and op in (Op.CONTAINS, Op.STARTS_WITH, Op.ENDS_WITH):
            text, needle = value.data, self.value.data
            if op is Op.CONTAINS:
                return needle in text
            if op is Op.STARTS_WITH:
                return text.startswith(needle)
            return text.endswith(needle)
        ordering = value.compare(self.value)
        if ordering is None:
            return False
        return op.eval_ordering(ordering)
