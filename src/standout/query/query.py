"""In-memory filtering, ordering and paging for list views."""
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union

from .clause import Clause
from .op import Op
from .ordering import Direction, OrderBy
from .value import Value

logger = logging.getLogger(__name__)

T = TypeVar("T")
Accessor = Callable[[Any, str], Any]

_MISSING = object()


def default_accessor(item: Any, field: str) -> Value:
    """Read ``field`` from a mapping key or attribute; missing fields are ``None`` values."""

    if isinstance(item, Mapping):
        raw = item.get(field, _MISSING)
    else:
        raw = getattr(item, field, _MISSING)
    if raw is _MISSING or callable(raw):
        return Value.none()
    return Value.of(raw)


def _clause_builder(group: str, op: Op) -> Callable[..., "Query"]:
    def builder(self: "Query", field: str, value: Any) -> "Query":
        return self.add(group, field, op, value)

    builder.__name__ = f"{group}_{op.name.lower()}"
    builder.__doc__ = f"Add ``field {op.value} value`` to the {group.upper()} group."
    return builder


class Query:
    """
    Filter, sort and page a sequence of items.

    An item matches when every AND clause matches, at least one OR clause
    matches (or there are none), and no NOT clause matches. Sorting is
    stable; offset is applied before limit, both after sorting.

    Builder methods mutate and return the query so calls chain::

        Query().and_gte("priority", 3).or_contains("name", "Urgent").not_eq("archived", True)

    Fields are read with ``accessor(item, field)``, which may return a
    :class:`Value` or a plain Python value. The default reads mapping keys or
    attributes.
    """

    def __init__(self, accessor: Optional[Accessor] = None) -> None:
        self.accessor: Accessor = accessor or default_accessor
        self.and_clauses: List[Clause] = []
        self.or_clauses: List[Clause] = []
        self.not_clauses: List[Clause] = []
        self.orderings: List[OrderBy] = []
        self.offset_count: Optional[int] = None
        self.limit_count: Optional[int] = None

    def __repr__(self) -> str:
        return (
            f"Query(and={self.and_clauses!r}, or={self.or_clauses!r}, not={self.not_clauses!r}, "
            f"order={self.orderings!r}, offset={self.offset_count}, limit={self.limit_count})"
        )

    # --- building ------------------------------------------------------------

    def add(self, group: str, field: str, op: Union[Op, str], value: Any) -> "Query":
        """
        Append a clause to ``group`` (``"and"``, ``"or"`` or ``"not"``).

        Raises:
            QueryCompileError: For an invalid regular expression.
        """
        clauses = {"and": self.and_clauses, "or": self.or_clauses, "not": self.not_clauses}.get(group)
        if clauses is None:
            raise ValueError(f"unknown clause group '{group}'")
        clauses.append(Clause(field, op, value))
        return self

    def and_(self, field: str, op: Union[Op, str], value: Any) -> "Query":
        return self.add("and", field, op, value)

    def or_(self, field: str, op: Union[Op, str], value: Any) -> "Query":
        return self.add("or", field, op, value)

    def not_(self, field: str, op: Union[Op, str], value: Any) -> "Query":
        return self.add("not", field, op, value)

    and_eq = _clause_builder("and", Op.EQ)
    and_ne = _clause_builder("and", Op.NE)
    and_gt = _clause_builder("and", Op.GT)
    and_gte = _clause_builder("and", Op.GTE)
    and_lt = _clause_builder("and", Op.LT)
    and_lte = _clause_builder("and", Op.LTE)
    and_contains = _clause_builder("and", Op.CONTAINS)
    and_startswith = _clause_builder("and", Op.STARTS_WITH)
    and_endswith = _clause_builder("and", Op.ENDS_WITH)
    and_regex = _clause_builder("and", Op.REGEX)
    and_in = _clause_builder("and", Op.IN)
    and_before = _clause_builder("and", Op.BEFORE)
    and_after = _clause_builder("and", Op.AFTER)
    and_is = _clause_builder("and", Op.IS)

    or_eq = _clause_builder("or", Op.EQ)
    or_ne = _clause_builder("or", Op.NE)
    or_gt = _clause_builder("or", Op.GT)
    or_gte = _clause_builder("or", Op.GTE)
    or_lt = _clause_builder("or", Op.LT)
    or_lte = _clause_builder("or", Op.LTE)
    or_contains = _clause_builder("or", Op.CONTAINS)
    or_startswith = _clause_builder("or", Op.STARTS_WITH)
    or_endswith = _clause_builder("or", Op.ENDS_WITH)
    or_regex = _clause_builder("or", Op.REGEX)
    or_in = _clause_builder("or", Op.IN)
    or_before = _clause_builder("or", Op.BEFORE)
    or_after = _clause_builder("or", Op.AFTER)
    or_is = _clause_builder("or", Op.IS)

    not_eq = _clause_builder("not", Op.EQ)
    not_ne = _clause_builder("not", Op.NE)
    not_gt = _clause_builder("not", Op.GT)
    not_gte = _clause_builder("not", Op.GTE)
    not_lt = _clause_builder("not", Op.LT)
    not_lte = _clause_builder("not", Op.LTE)
    not_contains = _clause_builder("not", Op.CONTAINS)
    not_startswith = _clause_builder("not", Op.STARTS_WITH)
    not_endswith = _clause_builder("not", Op.ENDS_WITH)
    not_regex = _clause_builder("not", Op.REGEX)
    not_in = _clause_builder("not", Op.IN)
    not_before = _clause_builder("not", Op.BEFORE)
    not_after = _clause_builder("not", Op.AFTER)
    not_is = _clause_builder("not", Op.IS)

    def order_by(self, field: Union[str, OrderBy], direction: Union[Direction, str] = Direction.ASC) -> "Query":
        if isinstance(field, OrderBy):
            self.orderings.append(field)
        else:
            self.orderings.append(OrderBy(field, Direction(direction)))
        return self

    def order_asc(self, field: str) -> "Query":
        return self.order_by(field, Direction.ASC)

    def order_desc(self, field: str) -> "Query":
        return self.order_by(field, Direction.DESC)

    def offset(self, count: int) -> "Query":
        self.offset_count = max(0, int(count))
        return self

    def limit(self, count: int) -> "Query":
        self.limit_count = max(0, int(count))
        return self

    def is_empty(self) -> bool:
        """True when the query has no clauses, orderings, offset or limit."""

        return not (
            self.and_clauses
            or self.or_clauses
            or self.not_clauses
            or self.orderings
            or self.offset_count
            or self.limit_count is not None
        )

    # --- evaluation ----------------------------------------------------------

    def _field(self, item: Any, field: str) -> Value:
        return Value.of(self.accessor(item, field))

    def _clause_matches(self, clause: Clause, item: Any) -> bool:
        return clause.matches(self._field(item, clause.field))

    def matches(self, item: Any) -> bool:
        if not all(self._clause_matches(clause, item) for clause in self.and_clauses):
            return False
        if self.or_clauses and not any(self._clause_matches(clause, item) for clause in self.or_clauses):
            return False
        return not any(self._clause_matches(clause, item) for clause in self.not_clauses)

    def _compare(self, left: Any, right: Any) -> int:
        for ordering in self.orderings:
            result = ordering.compare(self._field(left, ordering.field), self._field(right, ordering.field))
            # mismatched kinds compare equal and fall through to the next key
            if result:
                return result
        return 0

    def filter(self, items: Iterable[T]) -> List[T]:
        """Return matching items, sorted and paged."""

        matched = [item for item in items if self.matches(item)]
        if self.orderings:
            matched = sorted(matched, key=functools.cmp_to_key(self._compare))
        start = self.offset_count or 0
        if start:
            matched = matched[start:]
        if self.limit_count is not None:
            matched = matched[: self.limit_count]
        logger.debug("Query matched %d item(s)", len(matched))
        return matched

    def count(self, items: Iterable[T]) -> int:
        return len(self.filter(items))

    def any(self, items: Iterable[T]) -> bool:
        return any(self.matches(item) for item in items)

    def all(self, items: Iterable[T]) -> bool:
        return all(self.matches(item) for item in items)

    def find(self, items: Iterable[T]) -> Optional[T]:
        """First item in input order that matches, ignoring ordering and paging."""

        for item in items:
            if self.matches(item):
                return item
        return None

    def position(self, items: Sequence[T]) -> Optional[int]:
        for index, item in enumerate(items):
            if self.matches(item):
                return index
        return None
