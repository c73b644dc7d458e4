"""Bordered tables built on :class:`TabularFormatter`."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, List, Optional, Sequence

from .formatter import TabularFormatter, extract_row
from .types import Decorations, TabularSpec


@dataclass(frozen=True)
class BorderChars:
    horizontal: str
    vertical: str
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str
    left_t: str
    cross: str
    right_t: str
    top_t: str
    bottom_t: str


class BorderStyle(str, Enum):
    """Box-drawing character sets for table borders."""

    NONE = "none"
    ASCII = "ascii"
    LIGHT = "light"
    HEAVY = "heavy"
    DOUBLE = "double"
    ROUNDED = "rounded"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "BorderStyle":
        """Parse a border name; unknown or empty names mean no border."""

        if not raw:
            return cls.NONE
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.NONE

    @property
    def chars(self) -> Optional[BorderChars]:
        return _BORDER_CHARS.get(self)


_BORDER_CHARS = {
    BorderStyle.ASCII: BorderChars("-", "|", "+", "+", "+", "+", "+", "+", "+", "+", "+"),
    BorderStyle.LIGHT: BorderChars("─", "│", "┌", "┐", "└", "┘", "├", "┼", "┤", "┬", "┴"),
    BorderStyle.HEAVY: BorderChars("━", "┃", "┏", "┓", "┗", "┛", "┣", "╋", "┫", "┳", "┻"),
    BorderStyle.DOUBLE: BorderChars("═", "║", "╔", "╗", "╚", "╝", "╠", "╬", "╣", "╦", "╩"),
    BorderStyle.ROUNDED: BorderChars("─", "│", "╭", "╮", "╰", "╯", "├", "┼", "┤", "┬", "┴"),
}


class Table:
    """
    A table with optional borders, header row and row separators.

    With a border, two cells are reserved for the outer verticals and the
    column separator defaults to the border's vertical bar padded with spaces.
    """

    def __init__(
        self,
        spec: TabularSpec,
        total_width: int,
        *,
        border: BorderStyle = BorderStyle.NONE,
        headers: Optional[Sequence[str]] = None,
        header_style: Optional[str] = None,
        row_separator: bool = False,
        data: Optional[Sequence[Sequence[str]]] = None,
    ) -> None:
        self.border = border
        self.header_style = header_style
        self.row_separator = row_separator
        self.headers: Optional[List[str]] = list(headers) if headers is not None else None
        chars = border.chars
        if chars is not None and not spec.decorations.column_sep:
            spec = replace(spec, decorations=replace(spec.decorations, column_sep=f" {chars.vertical} "))
        self.spec = spec
        inner_width = total_width - 2 if chars is not None else total_width
        self.formatter = TabularFormatter(spec, max(inner_width, 0), data=data)

    @classmethod
    def from_spec(
        cls,
        spec: TabularSpec,
        total_width: int,
        *,
        border: BorderStyle = BorderStyle.NONE,
        use_headers: bool = True,
        **options: Any,
    ) -> "Table":
        headers = spec.headers() if use_headers and spec.has_headers() else None
        return cls(spec, total_width, border=border, headers=headers, **options)

    @property
    def widths(self) -> List[int]:
        return self.formatter.widths

    @property
    def num_columns(self) -> int:
        return self.formatter.num_columns

    def header_from_columns(self) -> "Table":
        self.headers = self.spec.headers()
        return self

    def _wrap(self, content: str) -> str:
        chars = self.border.chars
        if chars is None:
            return content
        return f"{chars.vertical}{content}{chars.vertical}"

    def row(self, values: Sequence[Any]) -> str:
        return self._wrap(self.formatter.format_row(values))

    def row_lines(self, values: Sequence[Any]) -> List[str]:
        return [self._wrap(line) for line in self.formatter.format_row_lines(values)]

    def row_from(self, data: Any) -> str:
        return self.row(extract_row(self.spec, data))

    def header_row(self) -> str:
        """Return the formatted header, styled after padding; ``""`` without headers."""

        if self.headers is None:
            return ""
        content = self.formatter.format_row(self.headers)
        if self.header_style:
            content = f"[{self.header_style}]{content}[/{self.header_style}]"
        return self._wrap(content)

    def _line(self, left: str, joint: str, right: str) -> str:
        chars = self.border.chars
        if chars is None:
            return ""
        decorations: Decorations = self.spec.decorations
        pieces: List[str] = []
        separator_width = len(decorations.column_sep)
        for index, width in enumerate(self.formatter.widths):
            if index > 0:
                if separator_width:
                    middle = separator_width // 2
                    pieces.append(
                        chars.horizontal * middle + joint + chars.horizontal * (separator_width - middle - 1)
                    )
            pieces.append(chars.horizontal * width)
        body = "".join(pieces)
        inner = self.formatter.content_width()
        if len(body) < inner:
            body += chars.horizontal * (inner - len(body))
        return f"{left}{body}{right}"

    def top_border(self) -> str:
        chars = self.border.chars
        return self._line(chars.top_left, chars.top_t, chars.top_right) if chars else ""

    def separator_row(self) -> str:
        chars = self.border.chars
        return self._line(chars.left_t, chars.cross, chars.right_t) if chars else ""

    def bottom_border(self) -> str:
        chars = self.border.chars
        return self._line(chars.bottom_left, chars.bottom_t, chars.bottom_right) if chars else ""

    def render(self, rows: Sequence[Sequence[Any]]) -> str:
        """Render borders, header, header separator and every row, joined by newlines."""

        output: List[str] = []
        top = self.top_border()
        if top:
            output.append(top)
        header = self.header_row()
        if header:
            output.append(header)
            separator = self.separator_row()
            if separator:
                output.append(separator)
        between = self.separator_row() if self.row_separator else ""
        for index, row in enumerate(rows):
            if index > 0 and between:
                output.append(between)
            output.append(self.row(row))
        bottom = self.bottom_border()
        if bottom:
            output.append(bottom)
        return "\n".join(output)

    def render_from(self, items: Sequence[Any]) -> str:
        return self.render([extract_row(self.spec, item) for item in items])
