"""Column width resolution."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from ..text import display_width
from .types import Anchor, Bounded, Fill, Fixed, Fraction, TabularSpec


@dataclass(frozen=True)
class ResolvedWidths:
    """Widths parallel to a spec's columns."""

    widths: Tuple[int, ...]

    def __iter__(self):
        return iter(self.widths)

    def __len__(self) -> int:
        return len(self.widths)

    def __getitem__(self, index: int) -> int:
        return self.widths[index]

    def total(self) -> int:
        return sum(self.widths)

    def as_list(self) -> List[int]:
        return list(self.widths)


def max_cell_widths(num_columns: int, rows: Iterable[Sequence[str]]) -> List[int]:
    """Return the widest ANSI-stripped cell of each column."""

    widths = [0] * num_columns
    for row in rows:
        for index, cell in enumerate(row[:num_columns]):
            widths[index] = max(widths[index], display_width(str(cell)))
    return widths


def resolve_widths(
    spec: TabularSpec,
    total_width: int,
    data: Optional[Iterable[Sequence[str]]] = None,
) -> ResolvedWidths:
    """
    Assign a width to every column of ``spec`` for a row ``total_width`` cells wide.

    Fixed columns take their width. Bounded columns take the widest cell in
    ``data`` clamped to their bounds, or their minimum without data. The space
    left is split between ``Fill``/``Fraction`` columns by weight, with the
    rightmost flexible column absorbing the rounding remainder so the row is
    exactly ``total_width`` wide.

    Without flexible columns the leftover goes to the rightmost bounded column,
    even past its ``max``; with neither, it stays unused.

    A spec without columns resolves to no widths. When decorations alone use
    the whole row, every width is zero.
    """
    columns = spec.columns
    if not columns:
        return ResolvedWidths(())

    available = total_width - spec.overhead()
    if available <= 0:
        return ResolvedWidths((0,) * len(columns))

    data_widths = max_cell_widths(len(columns), data) if data is not None else None
    widths: List[int] = []
    flex: List[Tuple[int, int]] = []
    used = 0
    for index, column in enumerate(columns):
        width = column.width
        if isinstance(width, Fixed):
            widths.append(width.width)
            used += width.width
        elif isinstance(width, Bounded):
            minimum = width.min or 0
            if data_widths is None:
                value = minimum
            else:
                value = max(data_widths[index], minimum)
            if width.max is not None:
                value = min(value, width.max)
            widths.append(value)
            used += value
        elif isinstance(width, (Fill, Fraction)):
            widths.append(0)
            flex.append((index, width.weight))

    remaining = max(available - used, 0)
    if flex:
        total_weight = sum(weight for _, weight in flex)
        if total_weight > 0:
            left = remaining
            for position, (index, weight) in enumerate(flex):
                if position == len(flex) - 1:
                    widths[index] = left
                else:
                    share = remaining * weight // total_weight
                    widths[index] = share
                    left -= share
    elif remaining > 0:
        for index in range(len(columns) - 1, -1, -1):
            if isinstance(columns[index].width, Bounded):
                widths[index] += remaining
                break

    return ResolvedWidths(tuple(widths))


def anchor_gap(spec: TabularSpec, widths: ResolvedWidths, total_width: int) -> Tuple[int, int]:
    """
    Return ``(gap, index)`` for right-anchored columns.

    ``gap`` cells go before column ``index``, the first right-anchored column,
    so that it and every column after it end at the right edge. ``(0, -1)``
    means no gap is needed.
    """
    first_right = next(
        (index for index, column in enumerate(spec.columns) if column.anchor is Anchor.RIGHT),
        None,
    )
    if first_right is None or first_right == 0:
        return 0, -1
    gap = total_width - (widths.total() + spec.overhead())
    if gap <= 0:
        return 0, -1
    return gap, first_right
