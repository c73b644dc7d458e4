"""Row formatting against resolved column widths."""
from __future__ import annotations

import json
from typing import Any, List, Optional, Sequence

from ..text import (
    pad_center,
    pad_left,
    pad_right,
    truncate_end,
    truncate_middle,
    truncate_start,
    wrap_text,
)
from .resolve import ResolvedWidths, anchor_gap, resolve_widths
from .types import Align, Clip, Column, Expand, TabularSpec, TruncateAt, Wrap

_MISSING = object()


def cell_text(value: Any, null_repr: str) -> str:
    """Render a row value as cell text; ``None`` becomes ``null_repr``."""

    if value is None or value is _MISSING:
        return null_repr
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def lookup_path(data: Any, path: str) -> Any:
    """
    Follow a dotted ``path`` through mappings, sequences and attributes.

    Returns a sentinel when any segment is missing so callers can tell a
    missing key from a stored ``None``.
    """
    current = data
    for part in path.split("."):
        if isinstance(current, dict):
            if part not in current:
                return _MISSING
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return _MISSING
            current = current[index]
        elif hasattr(current, part) and not part.startswith("_"):
            current = getattr(current, part)
        else:
            return _MISSING
    return current


def extract_row(spec: TabularSpec, data: Any) -> List[str]:
    """Pull one cell per column out of ``data`` using each column's ``key`` or ``name``."""

    cells: List[str] = []
    for column in spec.columns:
        path = column.key or column.name
        value = lookup_path(data, path) if path else _MISSING
        cells.append(cell_text(value, column.null_repr))
    return cells


def align_text(text: str, width: int, align: Align) -> str:
    if align is Align.RIGHT:
        return pad_left(text, width)
    if align is Align.CENTER:
        return pad_center(text, width)
    return pad_right(text, width)


def truncate_text(text: str, width: int, at: TruncateAt, marker: str) -> str:
    if at is TruncateAt.START:
        return truncate_start(text, width, marker)
    if at is TruncateAt.MIDDLE:
        return truncate_middle(text, width, marker)
    return truncate_end(text, width, marker)


def _styled(text: str, column: Column, raw: str) -> str:
    style = raw.strip() if column.style_from_value else column.style
    if not style:
        return text
    return f"[{style}]{text}[/{style}]"


def format_cell(value: str, width: int, column: Column) -> str:
    """Fit ``value`` into ``width`` cells according to the column's overflow and alignment."""

    overflow = column.overflow
    if isinstance(overflow, Expand):
        fitted = value
    elif isinstance(overflow, Clip):
        fitted = truncate_end(value, width, "")
    elif isinstance(overflow, Wrap):
        fitted = wrap_text(value, width, overflow.indent)[0] if width > 0 else ""
    else:
        fitted = truncate_text(value, width, overflow.at, overflow.marker)
    return _styled(align_text(fitted, width, column.align), column, value)


def format_cell_lines(value: str, width: int, column: Column) -> List[str]:
    """Like :func:`format_cell` but wrap columns may return several lines."""

    if isinstance(column.overflow, Wrap) and width > 0:
        return [
            _styled(align_text(line, width, column.align), column, value)
            for line in wrap_text(value, width, column.overflow.indent)
        ]
    return [format_cell(value, width, column)]


class TabularFormatter:
    """
    Formats rows of a :class:`TabularSpec` at a fixed total width.

    Widths are resolved once at construction. Pass ``data`` (rows of cell
    strings) to size bounded columns from their content.
    """

    def __init__(
        self,
        spec: TabularSpec,
        total_width: int,
        *,
        data: Optional[Sequence[Sequence[str]]] = None,
        widths: Optional[Sequence[int]] = None,
    ) -> None:
        self.spec = spec
        self.total_width = total_width
        if widths is not None:
            self._widths = ResolvedWidths(tuple(widths))
        else:
            self._widths = resolve_widths(spec, total_width, data)
        self._gap, self._gap_index = anchor_gap(spec, self._widths, total_width)

    @property
    def widths(self) -> List[int]:
        return self._widths.as_list()

    @property
    def separator(self) -> str:
        return self.spec.decorations.column_sep

    @property
    def num_columns(self) -> int:
        return len(self.spec.columns)

    def column_width(self, index: int) -> Optional[int]:
        if 0 <= index < len(self._widths):
            return self._widths[index]
        return None

    def _cell_value(self, values: Sequence[Any], index: int) -> str:
        column = self.spec.columns[index]
        if index < len(values):
            return cell_text(values[index], column.null_repr)
        return column.null_repr

    def _join(self, cells: Sequence[str]) -> str:
        decorations = self.spec.decorations
        parts: List[str] = []
        for index, cell in enumerate(cells):
            if index > 0:
                parts.append(decorations.column_sep)
            if index == self._gap_index:
                parts.append(" " * self._gap)
            parts.append(cell)
        return decorations.row_prefix + "".join(parts) + decorations.row_suffix

    def format_row(self, values: Sequence[Any]) -> str:
        """Format one row; missing trailing values use each column's ``null_repr``."""

        cells = [
            format_cell(self._cell_value(values, index), width, column)
            for index, (column, width) in enumerate(zip(self.spec.columns, self._widths))
        ]
        return self._join(cells)

    def format_rows(self, rows: Sequence[Sequence[Any]]) -> List[str]:
        return [self.format_row(row) for row in rows]

    def format_row_lines(self, values: Sequence[Any]) -> List[str]:
        """Format one row, wrapping ``Wrap`` columns onto continuation lines."""

        columns_lines = [
            format_cell_lines(self._cell_value(values, index), width, column)
            for index, (column, width) in enumerate(zip(self.spec.columns, self._widths))
        ]
        height = max((len(lines) for lines in columns_lines), default=1)
        output: List[str] = []
        for line_index in range(height):
            cells = []
            for column, width, lines in zip(self.spec.columns, self._widths, columns_lines):
                if line_index < len(lines):
                    cells.append(lines[line_index])
                else:
                    cells.append(" " * width)
            output.append(self._join(cells))
        return output

    def row_from(self, data: Any) -> str:
        """Format a row pulled out of a mapping or object by column keys."""

        return self.format_row(extract_row(self.spec, data))

    def row_lines_from(self, data: Any) -> List[str]:
        return self.format_row_lines(extract_row(self.spec, data))

    def header_row(self) -> str:
        return self.format_row(self.spec.headers())

    def content_width(self) -> int:
        """Return the width of a formatted row, decorations included."""

        gap = self._gap if self._gap_index >= 0 else 0
        return self._widths.total() + self.spec.overhead() + gap
