"""Column width resolution."""

from __future__ import annotations

import pytest

from src.standout.errors import LayoutError
from src.standout.tabular.resolve import resolve_widths
from src.standout.tabular.types import Bounded, Col, Fill, Fixed, Fraction, TabularSpec, parse_width


def test_fill_takes_space_left_by_fixed_columns() -> None:
    spec = TabularSpec.build([Col.fixed(10), Col.fill(), Col.fixed(10)], separator="  ")

    assert resolve_widths(spec, 80).as_list() == [10, 56, 10]


def test_fractions_split_space_by_weight() -> None:
    spec = TabularSpec.build([Col.fraction(1), Col.fraction(2), Col.fraction(1)])

    widths = resolve_widths(spec, 100)

    assert widths.as_list() == [25, 50, 25]
    assert widths.total() == 100


@pytest.mark.parametrize("total", [31, 80, 101, 333])
def test_flex_columns_fill_the_row_exactly(total: int) -> None:
    spec = TabularSpec.build(
        [Col.fixed(3), Col.fraction(3), Col.fill(), Col.fraction(2)],
        separator=" | ",
        prefix="[",
        suffix="]",
    )

    widths = resolve_widths(spec, total)

    assert widths.total() + spec.overhead() == total


def test_bounded_columns_size_to_content_within_bounds() -> None:
    spec = TabularSpec.build([Col.bounded(4, 8), Col.bounded(2, 6), Col.fixed(5)], separator=" ")
    rows = [["ab", "abcdefghij", "x"], ["abcdefghijkl", "a", "y"]]

    assert resolve_widths(spec, 19, rows).as_list()[:2] == [8, 6]


def test_bounded_without_data_uses_minimum() -> None:
    spec = TabularSpec.build([Col.min(4), Col.fixed(5)], separator=" ")

    # the rightmost bounded column absorbs what is left of the row
    assert resolve_widths(spec, 20).as_list() == [14, 5]


def test_leftover_goes_past_max_of_rightmost_bounded_column() -> None:
    spec = TabularSpec.build([Col.bounded(2, 4), Col.bounded(2, 4)])

    assert resolve_widths(spec, 20, [["ab", "ab"]]).as_list() == [2, 18]


def test_decorations_wider_than_row_give_zero_widths() -> None:
    spec = TabularSpec.build([Col.fixed(5), Col.fill()], separator=" | ", prefix="<<", suffix=">>")

    assert resolve_widths(spec, 6).as_list() == [0, 0]


def test_empty_spec_has_no_widths() -> None:
    assert resolve_widths(TabularSpec(), 80).as_list() == []


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (8, Fixed(8)),
        ("12", Fixed(12)),
        ("fill", Fill()),
        ("3fr", Fraction(3)),
        (None, Bounded()),
        ({"min": 2, "max": 9}, Bounded(2, 9)),
    ],
)
def test_parse_width(raw, expected) -> None:
    assert parse_width(raw) == expected


@pytest.mark.parametrize("raw", [-1, "wide", True, {"minimum": 3}, 1.5, "0fr", {"fraction": 0}])
def test_parse_width_rejects_invalid(raw) -> None:
    with pytest.raises(LayoutError):
        parse_width(raw)


@pytest.mark.parametrize("weight", [0, -2])
def test_fraction_weight_must_be_positive(weight: int) -> None:
    with pytest.raises(LayoutError):
        Fraction(weight)


@pytest.mark.parametrize("weights", [(1,), (1, 1), (1, 3), (2, 5, 1)])
def test_fraction_columns_fill_available_width_exactly(weights) -> None:
    spec = TabularSpec.build([Col.fraction(weight) for weight in weights])

    assert sum(resolve_widths(spec, 40).as_list()) == 40
