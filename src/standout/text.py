"""ANSI-aware measuring, truncation and padding of terminal strings.

Escape sequences are zero-width and are carried along with the characters
that follow them. Width is measured in terminal cells, so East Asian wide
characters and most emoji count as two and combining marks as zero.
"""
from __future__ import annotations

from typing import Iterator, List, Tuple

from rich.cells import cell_len

from .terminal import ANSI_ESCAPE_RE, ANSI_RESET, SGR_RE

__all__ = [
    "display_width",
    "strip_ansi",
    "truncate_end",
    "truncate_start",
    "truncate_middle",
    "pad_left",
    "pad_right",
    "pad_center",
    "wrap_text",
]

DEFAULT_ELLIPSIS = "…"

# (text, cell width, is escape sequence)
_Segment = Tuple[str, int, bool]


def strip_ansi(text: str) -> str:
    """Return ``text`` with every escape sequence removed."""

    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    """Return the number of terminal cells ``text`` occupies."""

    if not text:
        return 0
    return cell_len(strip_ansi(text))


def _segments(text: str) -> Iterator[_Segment]:
    position = 0
    for match in ANSI_ESCAPE_RE.finditer(text):
        for char in text[position:match.start()]:
            yield char, cell_len(char), False
        yield match.group(0), 0, True
        position = match.end()
    for char in text[position:]:
        yield char, cell_len(char), False


def _take_prefix(segments: List[_Segment], budget: int) -> Tuple[str, bool]:
    """Return the longest prefix fitting ``budget`` cells and whether it holds SGR codes."""

    parts: List[str] = []
    used = 0
    styled = False
    for chunk, width, is_escape in segments:
        if is_escape:
            parts.append(chunk)
            styled = styled or bool(SGR_RE.fullmatch(chunk))
            continue
        if used + width > budget:
            break
        parts.append(chunk)
        used += width
    return "".join(parts), styled


def _take_suffix(segments: List[_Segment], budget: int) -> str:
    """Return the longest suffix fitting ``budget`` cells.

    Escapes from the discarded head are kept in front of the suffix so that a
    colour opened before the cut still applies to the retained text.
    """
    kept: List[str] = []
    used = 0
    cut = len(segments)
    for index in range(len(segments) - 1, -1, -1):
        chunk, width, is_escape = segments[index]
        if not is_escape and used + width > budget:
            break
        kept.append(chunk)
        used += width
        cut = index
    leading = [chunk for chunk, _, is_escape in segments[:cut] if is_escape]
    return "".join(leading) + "".join(reversed(kept))


def _fit_ellipsis(width: int, ellipsis: str) -> str:
    prefix, _ = _take_prefix(list(_segments(ellipsis)), width)
    return prefix


def truncate_end(text: str, width: int, ellipsis: str = DEFAULT_ELLIPSIS) -> str:
    """
    Keep the start of ``text`` and mark the cut with ``ellipsis``.

    Returns ``text`` unchanged when it already fits. When ``width`` is narrower
    than the ellipsis, a prefix of the ellipsis itself is returned.
    """
    width = max(width, 0)
    if display_width(text) <= width:
        return text
    ellipsis_width = display_width(ellipsis)
    if width < ellipsis_width:
        return _fit_ellipsis(width, ellipsis)
    if width == ellipsis_width:
        return ellipsis
    prefix, styled = _take_prefix(list(_segments(text)), width - ellipsis_width)
    if styled:
        prefix += ANSI_RESET
    return prefix + ellipsis


def truncate_start(text: str, width: int, ellipsis: str = DEFAULT_ELLIPSIS) -> str:
    """Keep the end of ``text`` and mark the cut with a leading ``ellipsis``."""

    width = max(width, 0)
    if display_width(text) <= width:
        return text
    ellipsis_width = display_width(ellipsis)
    if width < ellipsis_width:
        return _fit_ellipsis(width, ellipsis)
    if width == ellipsis_width:
        return ellipsis
    return ellipsis + _take_suffix(list(_segments(text)), width - ellipsis_width)


def truncate_middle(text: str, width: int, ellipsis: str = DEFAULT_ELLIPSIS) -> str:
    """Keep both ends of ``text``; the right side gets the odd cell."""

    width = max(width, 0)
    if display_width(text) <= width:
        return text
    ellipsis_width = display_width(ellipsis)
    if width < ellipsis_width:
        return _fit_ellipsis(width, ellipsis)
    if width == ellipsis_width:
        return ellipsis
    budget = width - ellipsis_width
    left_budget = budget // 2
    right_budget = budget - left_budget
    segments = list(_segments(text))
    prefix, styled = _take_prefix(segments, left_budget)
    if styled:
        prefix += ANSI_RESET
    suffix = _take_suffix(segments, right_budget)
    return prefix + ellipsis + suffix


def pad_left(text: str, width: int) -> str:
    """Right-align ``text`` in ``width`` cells."""

    missing = width - display_width(text)
    if missing <= 0:
        return text
    return " " * missing + text


def pad_right(text: str, width: int) -> str:
    """Left-align ``text`` in ``width`` cells."""

    missing = width - display_width(text)
    if missing <= 0:
        return text
    return text + " " * missing


def pad_center(text: str, width: int) -> str:
    """Center ``text``; an odd leftover cell goes to the right."""

    missing = width - display_width(text)
    if missing <= 0:
        return text
    left = missing // 2
    return " " * left + text + " " * (missing - left)


def _hard_break(word: str, width: int) -> List[str]:
    pieces: List[str] = []
    current: List[str] = []
    used = 0
    for chunk, cells, is_escape in _segments(word):
        if not is_escape and used + cells > width and used > 0:
            pieces.append("".join(current))
            current, used = [], 0
        current.append(chunk)
        used += cells
    if current:
        pieces.append("".join(current))
    return pieces


def wrap_text(text: str, width: int, indent: int = 0) -> List[str]:
    """
    Word-wrap ``text`` into lines no wider than ``width`` cells.

    Continuation lines are prefixed with ``indent`` spaces, which count toward
    the width. Words longer than a line are split at character boundaries.
    """
    if width <= 0:
        return [""]
    indent = min(max(indent, 0), width - 1)
    words = text.split()
    if not words:
        return [""]
    lines: List[str] = []
    current = ""
    current_width = 0
    for word in words:
        limit = width if not lines else width - indent
        word_width = display_width(word)
        if current and current_width + 1 + word_width <= limit:
            current += " " + word
            current_width += 1 + word_width
            continue
        if current:
            lines.append(current)
            current, current_width = "", 0
            limit = width - indent
        if word_width <= limit:
            current, current_width = word, word_width
            continue
        remainder = word
        while display_width(remainder) > limit:
            head, *rest = _hard_break(remainder, limit)
            if not rest:
                break
            lines.append(head)
            remainder = "".join(rest)
            limit = width - indent
        current = remainder
        current_width = display_width(current)
    if current or not lines:
        lines.append(current)
    prefix = " " * indent
    return [lines[0]] + [prefix + line for line in lines[1:]]
