from __future__ import annotations

import pytest

from src.standout.errors import InvalidColor, InvalidShorthand, UnknownAttribute
from src.standout.style.attributes import StyleAttributes
from src.standout.style.color import NamedColor, PaletteColor, RgbColor, parse_color
from src.standout.style.colorspace import Rgb
from src.standout.terminal import ColorCapability


def test_shorthand_sets_foreground_and_flags() -> None:
    attributes = StyleAttributes.from_shorthand("yellow italic bold")

    assert attributes.fg == NamedColor("yellow")
    assert attributes.italic is True
    assert attributes.bold is True
    assert attributes.underline is None


@pytest.mark.parametrize("text", ["", "red blue", "bold sparkly"])
def test_invalid_shorthand(text: str) -> None:
    with pytest.raises(InvalidShorthand):
        StyleAttributes.from_shorthand(text)


def test_mapping_rejects_unknown_keys() -> None:
    with pytest.raises(UnknownAttribute) as excinfo:
        StyleAttributes.from_mapping({"fg": "red", "shiny": True}, style="title")

    assert excinfo.value.attribute == "shiny"
    assert "title" in str(excinfo.value)


def test_merge_right_wins_and_empty_is_identity() -> None:
    left = StyleAttributes(fg=NamedColor("red"), bold=True)
    right = StyleAttributes(fg=NamedColor("blue"), italic=True)
    empty = StyleAttributes()

    merged = left.merge(right)

    assert merged.fg == NamedColor("blue")
    assert merged.bold is True
    assert merged.italic is True
    assert left.merge(empty) == left
    assert empty.merge(left) == left


def test_merge_is_associative() -> None:
    a = StyleAttributes(fg=NamedColor("red"), bold=True)
    b = StyleAttributes(bg=PaletteColor(236), bold=False)
    c = StyleAttributes(fg=NamedColor("cyan"), underline=True)

    assert a.merge(b).merge(c) == a.merge(b.merge(c))


def test_sgr_encoding() -> None:
    attributes = StyleAttributes(fg=NamedColor("green"), bg=PaletteColor(236), bold=True)

    assert attributes.sgr() == "\x1b[1;32;48;5;236m"
    assert attributes.sgr(capability=ColorCapability.NONE) == ""
    assert StyleAttributes().sgr() == ""


def test_truecolor_only_when_capability_allows() -> None:
    attributes = StyleAttributes(fg=RgbColor(Rgb(255, 0, 0)))

    assert attributes.sgr(capability=ColorCapability.TRUECOLOR) == "\x1b[38;2;255;0;0m"
    assert attributes.sgr(capability=ColorCapability.ANSI256) == "\x1b[38;5;196m"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("red", NamedColor("red")),
        (9, PaletteColor(9)),
        ("#ff0000", RgbColor(Rgb(255, 0, 0))),
        ("#f00", RgbColor(Rgb(255, 0, 0))),
        ([0, 128, 255], RgbColor(Rgb(0, 128, 255))),
    ],
)
def test_parse_color_forms(raw, expected) -> None:
    assert parse_color(raw) == expected


@pytest.mark.parametrize("raw", [256, -1, "#12", [1, 2], [0, 0, 300], True, "chartreuse"])
def test_parse_color_rejects_invalid(raw) -> None:
    with pytest.raises(InvalidColor):
        parse_color(raw)
