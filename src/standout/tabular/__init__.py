"""Column layout: width resolution, cell formatting and bordered tables."""

from .decorator import BorderStyle, Table
from .formatter import TabularFormatter, cell_text, extract_row, format_cell, lookup_path
from .resolve import ResolvedWidths, resolve_widths
from .types import (
    Align,
    Anchor,
    Bounded,
    Clip,
    Col,
    Column,
    Decorations,
    Expand,
    Fill,
    Fixed,
    Fraction,
    TabularSpec,
    Truncate,
    TruncateAt,
    Width,
    Wrap,
    coerce_column,
    parse_width,
)

__all__ = [
    "Align",
    "Anchor",
    "BorderStyle",
    "Bounded",
    "Clip",
    "Col",
    "Column",
    "Decorations",
    "Expand",
    "Fill",
    "Fixed",
    "Fraction",
    "ResolvedWidths",
    "Table",
    "TabularFormatter",
    "TabularSpec",
    "Truncate",
    "TruncateAt",
    "Width",
    "Wrap",
    "cell_text",
    "coerce_column",
    "extract_row",
    "format_cell",
    "lookup_path",
    "parse_width",
    "resolve_widths",
]
