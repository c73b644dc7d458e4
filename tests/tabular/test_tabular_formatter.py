"""Row formatting and bordered tables."""

from __future__ import annotations

from dataclasses import dataclass

from src.standout.tabular import (
    Align,
    Anchor,
    BorderStyle,
    Col,
    Table,
    TabularFormatter,
    TabularSpec,
    TruncateAt,
    Wrap,
)
from src.standout.text import display_width


@dataclass
class Task:
    name: str
    owner: dict


def test_rows_are_padded_and_truncated_to_their_widths() -> None:
    spec = TabularSpec.build([Col.fixed(5), Col.fixed(4, align=Align.RIGHT)], separator=" ")
    formatter = TabularFormatter(spec, 10)

    assert formatter.format_row(["alpha-beta", 7]) == "alph…    7"
    assert formatter.format_row(["ab"]) == "ab       -"


def test_every_formatted_row_has_the_same_width() -> None:
    spec = TabularSpec.build(
        [Col.fixed(6), Col.fill(), Col.fraction(2, align=Align.CENTER)],
        separator=" | ",
        prefix="> ",
    )
    formatter = TabularFormatter(spec, 60)
    rows = [["x", "y", "z"], ["a very long cell value", "日本語のテキスト", "\x1b[31mred\x1b[0m"], []]

    assert {display_width(line) for line in formatter.format_rows(rows)} == {60}


def test_truncation_position_follows_the_column() -> None:
    spec = TabularSpec.build(
        [
            Col.fixed(6).with_truncate(TruncateAt.START),
            Col.fixed(6).with_truncate(TruncateAt.MIDDLE).with_ellipsis(".."),
        ],
        separator=" ",
    )
    formatter = TabularFormatter(spec, 13)

    assert formatter.format_row(["abcdefghij", "abcdefghij"]) == "…fghij ab..ij"


def test_right_anchored_columns_end_at_the_right_edge() -> None:
    spec = TabularSpec.build([Col.fixed(4), Col.fixed(3, anchor=Anchor.RIGHT)])
    formatter = TabularFormatter(spec, 12)

    row = formatter.format_row(["ab", "xyz"])

    assert row == "ab" + " " * 7 + "xyz"
    assert display_width(row) == 12


def test_rows_can_be_pulled_from_mappings_and_objects() -> None:
    spec = TabularSpec.build(
        [Col.fixed(6, key="name"), Col.fixed(6, key="owner.login"), Col.fixed(4, key="missing", null_repr="n/a")],
        separator=" ",
    )
    formatter = TabularFormatter(spec, 18)

    assert formatter.row_from({"name": "build", "owner": {"login": "ci"}}) == "build  ci     n/a "
    assert formatter.row_from(Task("lint", {"login": "dev"})) == "lint   dev    n/a "


def test_wrap_columns_continue_on_following_lines() -> None:
    spec = TabularSpec.build([Col.fixed(3), Col.fixed(8, overflow=Wrap())], separator=" ")
    formatter = TabularFormatter(spec, 12)

    lines = formatter.format_row_lines(["id", "wrap this text please"])

    assert lines == ["id  wrap    ", "    this    ", "    text    ", "    please  "]


def test_style_columns_wrap_cells_in_tags() -> None:
    spec = TabularSpec.build([Col.fixed(4, style="ok"), Col.fixed(5, style_from_value=True)], separator=" ")
    formatter = TabularFormatter(spec, 10)

    assert formatter.format_row(["a", "warn"]) == "[ok]a   [/ok] [warn]warn [/warn]"


def test_ascii_table_with_header() -> None:
    spec = TabularSpec.build([Col.fixed(4, header="id"), Col.fixed(6, header="name")])
    table = Table.from_spec(spec, 15, border=BorderStyle.ASCII)

    rendered = table.render([[1, "alpha"], [2, "beta"]])

    assert rendered.splitlines() == [
        "+-----+-------+",
        "|id   | name  |",
        "+-----+-------+",
        "|1    | alpha |",
        "|2    | beta  |",
        "+-----+-------+",
    ]


def test_header_style_wraps_padded_header() -> None:
    spec = TabularSpec.build([Col.fixed(4)], separator=" ")
    table = Table(spec, 4, headers=["id"], header_style="title")

    assert table.header_row() == "[title]id  [/title]"
    assert table.top_border() == ""
