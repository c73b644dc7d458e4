"""Filters and global functions installed into every template environment.

Filters operate on the string form of their input::

    {{ name | col(20) }}                       pad or truncate to 20 cells
    {{ name | col('fill', width=80) }}         'fill' needs an explicit width
    {{ path | truncate_at(30, 'middle') }}
    {{ status | style('ok') }}                 -> [ok]...[/ok]

``tabular(columns, ...)`` and ``table(columns, ...)`` return formatter
objects whose methods (``row``, ``row_from``, ``header_row``...) templates
call inside loops.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..errors import LayoutError
from ..tabular.decorator import BorderStyle, Table
from ..tabular.formatter import TabularFormatter, align_text, extract_row, truncate_text
from ..tabular.types import Align, TabularSpec, TruncateAt, coerce_column
from ..text import (
    DEFAULT_ELLIPSIS,
    display_width,
    pad_center,
    pad_left,
    pad_right,
    truncate_end,
    truncate_middle,
    truncate_start,
)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def style_filter(value: Any, name: str) -> str:
    """Wrap ``value`` in a style tag; an empty style name leaves it untouched."""

    text = _text(value)
    if not name:
        return text
    return f"[{name}]{text}[/{name}]"


def _parse_choice(raw: Optional[str], enum_type: Any, default: Any) -> Any:
    if not raw:
        return default
    try:
        return enum_type(str(raw).lower())
    except ValueError:
        return default


def col_filter(
    value: Any,
    width: Any,
    align: Optional[str] = None,
    truncate: Optional[str] = None,
    ellipsis: str = DEFAULT_ELLIPSIS,
    **kwargs: Any,
) -> str:
    """
    Fit ``value`` into a column ``width`` cells wide.

    ``width`` is an integer, or ``"fill"`` together with a ``width=`` keyword.

    Raises:
        LayoutError: For an invalid width or ``"fill"`` without ``width=``.
    """
    if isinstance(width, str):
        if width != "fill":
            raise LayoutError(f"Invalid width string: '{width}'. Use number or 'fill'")
        if "width" not in kwargs:
            raise LayoutError("Using col('fill') requires explicit 'width' argument (e.g. width=80)")
        width = kwargs.pop("width")
    if kwargs:
        raise LayoutError(f"Unknown col() argument(s): {', '.join(sorted(kwargs))}")
    if isinstance(width, bool) or not isinstance(width, int):
        raise LayoutError("Width value must be an integer or 'fill'")
    if width <= 0:
        return ""
    text = _text(value)
    at = _parse_choice(truncate, TruncateAt, TruncateAt.END)
    fitted = truncate_text(text, width, at, ellipsis)
    return align_text(fitted, width, _parse_choice(align, Align, Align.LEFT))


def truncate_at_filter(
    value: Any,
    width: int,
    position: Optional[str] = None,
    ellipsis: Optional[str] = None,
) -> str:
    at = _parse_choice(position, TruncateAt, TruncateAt.END)
    return truncate_text(_text(value), width, at, DEFAULT_ELLIPSIS if ellipsis is None else ellipsis)


class TabularObject:
    """Template-facing wrapper around :class:`TabularFormatter`."""

    def __init__(self, formatter: TabularFormatter) -> None:
        self.formatter = formatter

    @property
    def widths(self) -> List[int]:
        return self.formatter.widths

    @property
    def separator(self) -> str:
        return self.formatter.separator

    @property
    def num_columns(self) -> int:
        return self.formatter.num_columns

    def row(self, values: Sequence[Any]) -> str:
        return self.formatter.format_row(list(values))

    def row_lines(self, values: Sequence[Any]) -> List[str]:
        return self.formatter.format_row_lines(list(values))

    def row_from(self, data: Any) -> str:
        return self.formatter.row_from(data)

    def header_row(self) -> str:
        return self.formatter.header_row()

    def render_all(self, items: Sequence[Any]) -> str:
        return "\n".join(self.formatter.row_from(item) for item in items)


class TableObject:
    """Template-facing wrapper around :class:`Table`."""

    def __init__(self, table: Table) -> None:
        self.table = table

    @property
    def widths(self) -> List[int]:
        return self.table.widths

    @property
    def num_columns(self) -> int:
        return self.table.num_columns

    def row(self, values: Sequence[Any]) -> str:
        return self.table.row(list(values))

    def row_lines(self, values: Sequence[Any]) -> List[str]:
        return self.table.row_lines(list(values))

    def row_from(self, data: Any) -> str:
        return self.table.row_from(data)

    def header_row(self) -> str:
        return self.table.header_row()

    def separator_row(self) -> str:
        return self.table.separator_row()

    def top_border(self) -> str:
        return self.table.top_border()

    def bottom_border(self) -> str:
        return self.table.bottom_border()

    def render_all(self, items: Sequence[Any]) -> str:
        """Render every item, either a mapping/object read by column keys or a list of cells."""

        rows = [
            list(item) if isinstance(item, (list, tuple)) else extract_row(self.table.spec, item)
            for item in items
        ]
        return self.table.render(rows)


def _build_spec(columns: Any, separator: str) -> TabularSpec:
    if not isinstance(columns, (list, tuple)):
        raise LayoutError("columns must be a list of widths or column mappings")
    return TabularSpec.build([coerce_column(column) for column in columns], separator=separator or "")


def tabular_function(columns: Any, separator: str = "", width: int = 80) -> TabularObject:
    return TabularObject(TabularFormatter(_build_spec(columns, separator), int(width)))


def table_function(
    columns: Any,
    separator: str = "",
    border: Optional[str] = None,
    header: Optional[Sequence[Any]] = None,
    header_style: Optional[str] = None,
    row_separator: bool = False,
    width: int = 80,
) -> TableObject:
    spec = _build_spec(columns, separator)
    headers: Optional[List[str]] = None
    if header is not None:
        if isinstance(header, (str, bytes)) or not isinstance(header, (list, tuple)):
            raise LayoutError("header must be an array of strings")
        headers = [_text(title) for title in header]
    table = Table(
        spec,
        int(width),
        border=BorderStyle.parse(border),
        headers=headers,
        header_style=header_style,
        row_separator=bool(row_separator),
    )
    return TableObject(table)


FILTERS: Mapping[str, Callable[..., Any]] = {
    "style": style_filter,
    "style_as": style_filter,
    "col": col_filter,
    "pad_left": lambda value, width: pad_left(_text(value), int(width)),
    "pad_right": lambda value, width: pad_right(_text(value), int(width)),
    "pad_center": lambda value, width: pad_center(_text(value), int(width)),
    "truncate_end": lambda value, width, ellipsis=DEFAULT_ELLIPSIS: truncate_end(_text(value), int(width), ellipsis),
    "truncate_start": lambda value, width, ellipsis=DEFAULT_ELLIPSIS: truncate_start(_text(value), int(width), ellipsis),
    "truncate_middle": lambda value, width, ellipsis=DEFAULT_ELLIPSIS: truncate_middle(
        _text(value), int(width), ellipsis
    ),
    "truncate_at": truncate_at_filter,
    "display_width": lambda value: display_width(_text(value)),
    "nl": lambda value: f"{_text(value)}\n",
}

GLOBALS: Mapping[str, Any] = {
    "tabular": tabular_function,
    "table": table_function,
    "nl": "\n",
}


def install(filters: Dict[str, Any], globals_: Dict[str, Any]) -> None:
    """Add the toolkit's filters and globals to a template environment's tables."""

    filters.update(FILTERS)
    globals_.update(GLOBALS)
