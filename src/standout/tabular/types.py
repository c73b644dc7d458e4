"""Column and table specifications for width-aware text layout."""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..errors import LayoutError
from ..text import DEFAULT_ELLIPSIS, display_width

_FRACTION_RE = re.compile(r"^\s*(\d+)\s*fr\s*$")


class Align(str, Enum):
    """Horizontal placement of a value inside its cell."""

    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


class TruncateAt(str, Enum):
    """Which part of an over-long value is cut."""

    END = "end"
    START = "start"
    MIDDLE = "middle"


class Anchor(str, Enum):
    """Which edge of the row a column sticks to."""

    LEFT = "left"
    RIGHT = "right"


# --- widths ------------------------------------------------------------------


@dataclass(frozen=True)
class Fixed:
    width: int


@dataclass(frozen=True)
class Bounded:
    """Content-driven width clamped to ``[min, max]``; ``None`` bounds are open."""

    min: Optional[int] = None
    max: Optional[int] = None


@dataclass(frozen=True)
class Fraction:
    """Flexible width weighted against the other flexible columns."""

    weight: int

    def __post_init__(self) -> None:
        if isinstance(self.weight, bool) or not isinstance(self.weight, int) or self.weight < 1:
            raise LayoutError(f"Fraction weight must be a positive integer, got {self.weight!r}")


@dataclass(frozen=True)
class Fill:
    """Flexible width with weight 1."""

    @property
    def weight(self) -> int:
        return 1


Width = Union[Fixed, Bounded, Fraction, Fill]


def is_flex(width: Width) -> bool:
    return isinstance(width, (Fill, Fraction))


def parse_width(raw: Any) -> Width:
    """
    Coerce a template- or config-supplied width into a :data:`Width`.

    Accepts an existing width, a non-negative ``int``, ``"fill"``, ``"<n>fr"``,
    a numeric string, or a mapping with ``min``/``max`` or ``fraction`` keys.

    Raises:
        LayoutError: When ``raw`` matches none of the accepted shapes.
    """
    if isinstance(raw, (Fixed, Bounded, Fraction, Fill)):
        return raw
    if raw is None:
        return Bounded()
    if isinstance(raw, bool):
        raise LayoutError(f"Invalid width: {raw!r}")
    if isinstance(raw, int):
        if raw < 0:
            raise LayoutError(f"Width must be non-negative, got {raw}")
        return Fixed(raw)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text == "fill":
            return Fill()
        fraction = _FRACTION_RE.match(text)
        if fraction:
            return Fraction(int(fraction.group(1)))
        if text.isdigit():
            return Fixed(int(text))
        raise LayoutError(f"Invalid width string: '{raw}'. Expected 'fill' or '<n>fr'.")
    if isinstance(raw, Mapping):
        if "fraction" in raw:
            return Fraction(int(raw["fraction"]))
        unknown = set(map(str, raw)) - {"min", "max"}
        if unknown:
            raise LayoutError(f"Invalid width keys: {', '.join(sorted(unknown))}")
        minimum = raw.get("min")
        maximum = raw.get("max")
        return Bounded(
            None if minimum is None else int(minimum),
            None if maximum is None else int(maximum),
        )
    raise LayoutError(f"Invalid width: {raw!r}")


# --- overflow ----------------------------------------------------------------


@dataclass(frozen=True)
class Truncate:
    at: TruncateAt = TruncateAt.END
    marker: str = DEFAULT_ELLIPSIS


@dataclass(frozen=True)
class Wrap:
    indent: int = 0


@dataclass(frozen=True)
class Clip:
    """Cut at the width without a marker."""


@dataclass(frozen=True)
class Expand:
    """Never shrink; the cell may push the row past its width."""


Overflow = Union[Truncate, Wrap, Clip, Expand]


# --- columns -----------------------------------------------------------------


@dataclass(frozen=True)
class Column:
    """
    One column of a table.

    ``key`` is a dotted path used to pull the cell out of a row mapping or
    object; ``null_repr`` is shown when the path does not resolve. ``style``
    wraps each cell in a style tag, and ``style_from_value`` uses the cell's
    own text as the style name.
    """

    width: Width = field(default_factory=Bounded)
    align: Align = Align.LEFT
    anchor: Anchor = Anchor.LEFT
    overflow: Overflow = field(default_factory=Truncate)
    null_repr: str = "-"
    style: Optional[str] = None
    style_from_value: bool = False
    key: Optional[str] = None
    header: Optional[str] = None
    name: Optional[str] = None

    @property
    def ellipsis(self) -> str:
        if isinstance(self.overflow, Truncate):
            return self.overflow.marker
        return DEFAULT_ELLIPSIS

    @property
    def truncate_at(self) -> TruncateAt:
        if isinstance(self.overflow, Truncate):
            return self.overflow.at
        return TruncateAt.END

    def with_truncate(self, at: Union[TruncateAt, str]) -> "Column":
        return replace(self, overflow=Truncate(TruncateAt(at), self.ellipsis))

    def with_ellipsis(self, marker: str) -> "Column":
        return replace(self, overflow=Truncate(self.truncate_at, marker))

    def title(self) -> str:
        """Return the header text: ``header``, then ``name``, then ``key``."""

        return self.header or self.name or self.key or ""


class Col:
    """Shorthand constructors for common column shapes."""

    @staticmethod
    def fixed(width: int, **options: Any) -> Column:
        return Column(width=Fixed(width), **options)

    @staticmethod
    def min(minimum: int, **options: Any) -> Column:
        return Column(width=Bounded(min=minimum), **options)

    @staticmethod
    def max(maximum: int, **options: Any) -> Column:
        return Column(width=Bounded(max=maximum), **options)

    @staticmethod
    def bounded(minimum: int, maximum: int, **options: Any) -> Column:
        return Column(width=Bounded(minimum, maximum), **options)

    @staticmethod
    def fill(**options: Any) -> Column:
        return Column(width=Fill(), **options)

    @staticmethod
    def fraction(weight: int, **options: Any) -> Column:
        return Column(width=Fraction(weight), **options)


def column_from_mapping(raw: Mapping[str, Any]) -> Column:
    """
    Build a column from a template-friendly mapping.

    Recognized keys: ``width``, ``align``, ``anchor``, ``truncate``,
    ``ellipsis``, ``overflow`` (``truncate``/``wrap``/``clip``/``expand``),
    ``indent``, ``null_repr``, ``style``, ``style_from_value``, ``key``,
    ``header`` and ``name``.

    Raises:
        LayoutError: For unknown keys or invalid values.
    """
    allowed = {
        "width", "align", "anchor", "truncate", "ellipsis", "overflow", "indent",
        "null_repr", "style", "style_from_value", "key", "header", "name",
    }
    unknown = set(map(str, raw)) - allowed
    if unknown:
        raise LayoutError(f"Unknown column option(s): {', '.join(sorted(unknown))}")
    try:
        align = Align(str(raw.get("align", "left")).lower())
        anchor = Anchor(str(raw.get("anchor", "left")).lower())
        at = TruncateAt(str(raw.get("truncate", "end")).lower())
    except ValueError as exc:
        raise LayoutError(str(exc)) from exc
    marker = str(raw.get("ellipsis", DEFAULT_ELLIPSIS))
    mode = str(raw.get("overflow", "truncate")).lower()
    overflow: Overflow
    if mode == "truncate":
        overflow = Truncate(at, marker)
    elif mode == "wrap":
        overflow = Wrap(int(raw.get("indent", 0)))
    elif mode == "clip":
        overflow = Clip()
    elif mode == "expand":
        overflow = Expand()
    else:
        raise LayoutError(f"Invalid overflow mode: '{mode}'")
    return Column(
        width=parse_width(raw.get("width")),
        align=align,
        anchor=anchor,
        overflow=overflow,
        null_repr=str(raw.get("null_repr", "-")),
        style=raw.get("style"),
        style_from_value=bool(raw.get("style_from_value", False)),
        key=raw.get("key"),
        header=raw.get("header"),
        name=raw.get("name"),
    )


def coerce_column(raw: Any) -> Column:
    if isinstance(raw, Column):
        return raw
    if isinstance(raw, Mapping):
        return column_from_mapping(raw)
    return Column(width=parse_width(raw))


# --- table spec --------------------------------------------------------------


@dataclass(frozen=True)
class Decorations:
    """Static text placed around and between cells of every row."""

    column_sep: str = ""
    row_prefix: str = ""
    row_suffix: str = ""

    def overhead(self, num_columns: int) -> int:
        """Return the cells taken by decorations for ``num_columns`` columns."""

        if num_columns == 0:
            return 0
        return (
            display_width(self.row_prefix)
            + display_width(self.row_suffix)
            + (num_columns - 1) * display_width(self.column_sep)
        )


@dataclass(frozen=True)
class TabularSpec:
    """Ordered columns plus the decorations joining them."""

    columns: Sequence[Column] = ()
    decorations: Decorations = field(default_factory=Decorations)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))

    @classmethod
    def build(
        cls,
        columns: Sequence[Any],
        *,
        separator: str = "",
        prefix: str = "",
        suffix: str = "",
    ) -> "TabularSpec":
        return cls(
            tuple(coerce_column(column) for column in columns),
            Decorations(separator, prefix, suffix),
        )

    def __len__(self) -> int:
        return len(self.columns)

    def overhead(self) -> int:
        return self.decorations.overhead(len(self.columns))

    def has_headers(self) -> bool:
        return any(column.title() for column in self.columns)

    def headers(self) -> List[str]:
        return [column.title() for column in self.columns]
