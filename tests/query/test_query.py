"""Filtering, ordering and paging of in-memory items."""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass
from typing import Optional

import pytest

from src.standout.errors import QueryCompileError
from src.standout.query import Direction, Op, OrderBy, Query, Timestamp, Value, ValueKind


class Status(enum.Enum):
    OPEN = 1
    BLOCKED = 2
    DONE = 3


@dataclass
class Task:
    name: str
    priority: int
    archived: bool
    status: Status = Status.OPEN
    due: Optional[dt.date] = None


@pytest.fixture
def tasks() -> list[Task]:
    return [
        Task("A", 1, False),
        Task("B", 2, False),
        Task("Urgent", 5, False),
        Task("Critical", 5, True),
        Task("Done", 3, True),
    ]


def test_and_or_not_groups(tasks: list[Task]) -> None:
    query = (
        Query()
        .and_gte("priority", 3)
        .or_contains("name", "Urgent")
        .or_contains("name", "Done")
        .not_eq("archived", True)
    )

    assert [task.name for task in query.filter(tasks)] == ["Urgent"]


def test_empty_query_returns_everything_in_order(tasks: list[Task]) -> None:
    query = Query()

    assert query.is_empty()
    assert query.filter(tasks) == tasks


@pytest.mark.parametrize(
    ("build", "expected"),
    [
        (lambda: Query().and_gte("priority", 2), 4),
        (lambda: Query().and_gte("priority", 2).order_desc("priority").offset(1).limit(2), 2),
        (lambda: Query().not_eq("archived", True).order_asc("name").offset(2), 1),
        (lambda: Query().and_lt("priority", 3).limit(10), 2),
        (lambda: Query().order_asc("name").offset(9), 0),
        (lambda: Query().and_eq("archived", False).order_desc("name").limit(0), 0),
    ],
)
def test_count_agrees_with_filter(tasks: list[Task], build, expected: int) -> None:
    query = build()

    assert query.count(tasks) == len(query.filter(tasks)) == expected


def test_sorting_is_stable_and_supports_multiple_keys(tasks: list[Task]) -> None:
    by_priority = Query().order_desc("priority").filter(tasks)
    by_priority_then_name = Query().order_desc("priority").order_asc("name").filter(tasks)

    assert [task.name for task in by_priority] == ["Urgent", "Critical", "Done", "B", "A"]
    assert [task.name for task in by_priority_then_name] == ["Critical", "Urgent", "Done", "B", "A"]


def test_offset_applies_before_limit(tasks: list[Task]) -> None:
    query = Query().order_asc("priority").offset(1).limit(2)

    assert [task.name for task in query.filter(tasks)] == ["B", "Done"]
    assert query.count(tasks) == 2


def test_missing_values_sort_last_ascending() -> None:
    items = [{"n": "x"}, {"n": "y", "rank": 2}, {"n": "z", "rank": 1}]

    assert [item["n"] for item in Query().order_asc("rank").filter(items)] == ["z", "y", "x"]
    assert [item["n"] for item in Query().order_desc("rank").filter(items)] == ["x", "y", "z"]


def test_values_of_different_kinds_never_compare_equal() -> None:
    items = [{"v": 1}, {"v": "1"}, {"v": None}, {}]

    assert Query().and_eq("v", 1).count(items) == 1
    assert Query().and_ne("v", 1).count(items) == 3
    assert Query().and_gt("v", "0").count(items) == 0


def test_string_operators() -> None:
    names = [{"name": n} for n in ("release-1.0", "release-2.0", "hotfix-1.1")]

    assert Query().and_startswith("name", "release").count(names) == 2
    assert Query().and_endswith("name", ".1").count(names) == 1
    assert Query().and_regex("name", r"-\d\.0$").count(names) == 2


def test_invalid_regex_fails_when_the_clause_is_built() -> None:
    with pytest.raises(QueryCompileError) as excinfo:
        Query().and_regex("name", "([unclosed")

    assert excinfo.value.pattern == "([unclosed"


def test_enum_membership(tasks: list[Task]) -> None:
    tasks[1].status = Status.BLOCKED
    tasks[4].status = Status.DONE

    query = Query().and_in("status", [Status.BLOCKED, Status.DONE])

    assert [task.name for task in query.filter(tasks)] == ["B", "Done"]
    assert Query().and_eq("status", Status.OPEN).count(tasks) == 3


def test_timestamps_support_before_and_after() -> None:
    items = [
        {"id": 1, "due": dt.date(2024, 1, 10)},
        {"id": 2, "due": dt.datetime(2024, 3, 1, 12, 0)},
        {"id": 3},
    ]

    assert [item["id"] for item in Query().and_before("due", dt.date(2024, 2, 1)).filter(items)] == [1]
    assert [item["id"] for item in Query().and_after("due", Timestamp.from_secs(0)).filter(items)] == [1, 2]


def test_bool_is_alias_and_ordering_ops_do_not_apply_to_bools(tasks: list[Task]) -> None:
    assert Query().and_is("archived", True).count(tasks) == 2
    assert Query().and_gt("archived", False).count(tasks) == 0


def test_custom_accessor() -> None:
    rows = [("a", 3), ("b", 1)]
    query = Query(accessor=lambda row, field: row[1] if field == "size" else Value.none()).and_lt("size", 2)

    assert query.filter(rows) == [("b", 1)]


def test_find_any_all_position(tasks: list[Task]) -> None:
    query = Query().and_eq("archived", True)

    assert query.find(tasks).name == "Critical"
    assert query.position(tasks) == 3
    assert query.any(tasks)
    assert not query.all(tasks)
    assert Query().and_("priority", Op.GT, 10).find(tasks) is None


def test_value_kinds() -> None:
    assert Value.of(True).kind is ValueKind.BOOL
    assert Value.of(2.5).kind is ValueKind.NUMBER
    assert Value.of(Status.DONE) == Value.enum(3)
    assert Value.of(float("nan")).compare(Value.of(1)) is None
    with pytest.raises(TypeError):
        Value.of(object())


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("name", OrderBy("name")), ("-name", OrderBy("name", Direction.DESC)), ("name desc", OrderBy.desc("name"))],
)
def test_order_by_parse(raw: str, expected: OrderBy) -> None:
    assert OrderBy.parse(raw) == expected
