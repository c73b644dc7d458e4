"""Second-pass rewriting of ``[name]...[/name]`` style tags.

Templates mark styled spans with bracket tags. After expansion the text goes
through :class:`StyleTagParser`, which either applies the styles as SGR
escapes, strips the tags, or keeps them verbatim for inspection.

Only well-formed, balanced tags are touched. An opening tag without a
matching close, a stray closing tag, and bracketed text that is not a valid
tag name (``[1]``, ``[a b]``) are all literal text. Escape sequences already
present in the input are copied through unchanged.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional

from .errors import TagError
from .style.registry import Styles
from .terminal import ANSI_RESET

_TAG_RE = re.compile(r"\[(/?)([A-Za-z_][A-Za-z0-9_.-]*)\]")


class TagTransform(str, Enum):
    """What to do with recognized tags."""

    APPLY = "apply"
    REMOVE = "remove"
    KEEP = "keep"


class _Token(NamedTuple):
    kind: str  # "text", "open" or "close"
    value: str
    raw: str


def _tokenize(text: str) -> Iterator[_Token]:
    position = 0
    for match in _TAG_RE.finditer(text):
        if match.start() > position:
            chunk = text[position:match.start()]
            yield _Token("text", chunk, chunk)
        kind = "close" if match.group(1) else "open"
        yield _Token(kind, match.group(2), match.group(0))
        position = match.end()
    if position < len(text):
        chunk = text[position:]
        yield _Token("text", chunk, chunk)


def _has_matching_close(tokens: List[_Token], start: int, name: str) -> bool:
    depth = 1
    for token in tokens[start:]:
        if token.value != name:
            continue
        if token.kind == "open":
            depth += 1
        elif token.kind == "close":
            depth -= 1
            if depth == 0:
                return True
    return False


class StyleTagParser:
    """
    Rewrites style tags according to a :class:`TagTransform`.

    Parameters:
        styles (Styles | None): Resolved styles; a tag is known when its name is
            in this table. Without a table every well-formed tag counts as known.
        transform (TagTransform): Apply escapes, remove tags, or keep them.
        strict (bool): Raise :class:`TagError` for balanced tags whose name is
            unknown instead of passing them through.
    """

    def __init__(
        self,
        styles: Optional[Styles],
        transform: TagTransform = TagTransform.APPLY,
        *,
        strict: bool = False,
    ) -> None:
        self.styles = styles
        self.transform = transform
        self.strict = strict

    def is_known(self, name: str) -> bool:
        return self.styles is None or name in self.styles

    def _sgr(self, name: str) -> str:
        if self.styles is None:
            return ""
        return self.styles.sgr(name)

    def process(self, text: str) -> str:
        """Return ``text`` with every balanced tag transformed."""

        if "[" not in text:
            return text
        tokens = list(_tokenize(text))
        output: List[str] = []
        # (name, escape emitted for it, whether the tag markers are kept)
        stack: List[tuple[str, str, bool]] = []

        def _close(name: str, escape: str, literal: bool) -> None:
            if literal:
                output.append(f"[/{name}]")
                return
            if escape:
                output.append(ANSI_RESET)
                output.extend(entry[1] for entry in stack if entry[1])

        for index, token in enumerate(tokens):
            if token.kind == "text":
                output.append(token.raw)
                continue
            if token.kind == "open":
                if not _has_matching_close(tokens, index + 1, token.value):
                    output.append(token.raw)
                    continue
                known = self.is_known(token.value)
                if not known and self.strict and self.transform is not TagTransform.KEEP:
                    raise TagError(token.value)
                literal = self.transform is TagTransform.KEEP or not known
                escape = ""
                if literal:
                    output.append(token.raw)
                elif self.transform is TagTransform.APPLY:
                    escape = self._sgr(token.value)
                    output.append(escape)
                stack.append((token.value, escape, literal))
                continue
            if not any(entry[0] == token.value for entry in stack):
                output.append(token.raw)
                continue
            # Close everything opened after the matching tag, then the tag itself.
            while stack:
                name, escape, literal = stack.pop()
                _close(name, escape, literal)
                if name == token.value:
                    break
        while stack:
            name, escape, literal = stack.pop()
            _close(name, escape, literal)
        return "".join(output)


def apply_tags(text: str, styles: Styles, *, strict: bool = False) -> str:
    return StyleTagParser(styles, TagTransform.APPLY, strict=strict).process(text)


def strip_tags(text: str, styles: Optional[Styles] = None) -> str:
    """Remove known tags, keeping their content."""

    return StyleTagParser(styles, TagTransform.REMOVE).process(text)
