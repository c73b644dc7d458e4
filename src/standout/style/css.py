"""A CSS subset for stylesheets.

Class selectors name styles, several selectors may share one block, and
``@media (prefers-color-scheme: light|dark)`` blocks supply mode variants::

    .title, .heading { color: cyan; font-weight: bold; }
    .muted { dim: true; }
    @media (prefers-color-scheme: light) {
        .title { color: blue; }
    }

Declarations that cannot be understood are dropped. Only a broken rule
structure (missing braces, a rule without class selectors) is an error.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from ..errors import InvalidColor, StylesheetParseError
from .attributes import StyleAttributes
from .color import ColorDef, parse_color
from .definition import AttributesDefinition, StyleDefinition, ThemeVariants, build_variants

logger = logging.getLogger(__name__)

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_CLASS_RE = re.compile(r"\.([A-Za-z_][A-Za-z0-9_-]*)")
_SCHEME_RE = re.compile(r"\(\s*prefers-color-scheme\s*:\s*(light|dark)\s*\)", re.IGNORECASE)

_TRUE_WORDS = {"", "true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0", "none"}
_FLAG_PROPERTIES = ("bold", "dim", "italic", "underline", "blink", "reverse", "hidden", "strikethrough")


def _parse_flag(raw: str) -> Optional[bool]:
    word = raw.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return None


def _parse_css_color(raw: str) -> ColorDef:
    text = raw.strip()
    if text.isdigit():
        return parse_color(int(text))
    return parse_color(text)


def _parse_declaration(prop: str, raw: str) -> Dict[str, object]:
    """Return the attribute values one declaration sets; empty when it is ignored."""

    prop = prop.strip().lower()
    value = raw.strip()
    lowered = value.lower()
    try:
        if prop in ("fg", "color"):
            return {"fg": _parse_css_color(value)}
        if prop in ("bg", "background", "background-color"):
            return {"bg": _parse_css_color(value)}
    except InvalidColor as exc:
        logger.debug("Ignoring CSS declaration %s: %s", prop, exc)
        return {}
    if prop in _FLAG_PROPERTIES:
        flag = _parse_flag(value)
        return {} if flag is None else {prop: flag}
    if prop == "font-weight":
        if lowered in ("bold", "bolder") or (lowered.isdigit() and int(lowered) >= 600):
            return {"bold": True}
        if lowered in ("normal", "lighter") or lowered.isdigit():
            return {"bold": False}
        return {}
    if prop == "font-style":
        if lowered in ("italic", "oblique"):
            return {"italic": True}
        return {"italic": False} if lowered == "normal" else {}
    if prop == "text-decoration":
        decorations = set(lowered.split())
        if "none" in decorations:
            return {"underline": False, "strikethrough": False}
        values: Dict[str, object] = {}
        if "underline" in decorations:
            values["underline"] = True
        if "line-through" in decorations:
            values["strikethrough"] = True
        return values
    if prop == "visibility":
        if lowered == "hidden":
            return {"hidden": True}
        return {"hidden": False} if lowered == "visible" else {}
    logger.debug("Ignoring unsupported CSS property %r", prop)
    return {}


def _parse_block_attributes(body: str) -> StyleAttributes:
    values: Dict[str, object] = {}
    for declaration in body.split(";"):
        if not declaration.strip():
            continue
        if ":" in declaration:
            prop, raw = declaration.split(":", 1)
        else:
            prop, raw = declaration, ""
        values.update(_parse_declaration(prop, raw))
    return StyleAttributes(**values)  # type: ignore[arg-type]


class _CssScanner:
    """Splits a stylesheet into ``(prelude, body)`` pairs while tracking braces."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def rules(self) -> List[Tuple[str, str]]:
        rules: List[Tuple[str, str]] = []
        length = len(self.text)
        while True:
            while self.pos < length and self.text[self.pos].isspace():
                self.pos += 1
            if self.pos >= length:
                return rules
            open_index = self.text.find("{", self.pos)
            stray_close = self.text.find("}", self.pos)
            if open_index == -1 or (stray_close != -1 and stray_close < open_index):
                raise StylesheetParseError(
                    f"expected '{{' after {self.text[self.pos:self.pos + 40].strip()!r}"
                )
            prelude = self.text[self.pos:open_index].strip()
            body_start = open_index + 1
            depth = 1
            index = body_start
            while index < length and depth:
                char = self.text[index]
                if char == "{":
                    depth += 1
                elif char == "}":
                    depth -= 1
                index += 1
            if depth:
                raise StylesheetParseError(f"unterminated block for {prelude!r}")
            rules.append((prelude, self.text[body_start:index - 1]))
            self.pos = index


def _collect(
    text: str,
    mode: Optional[str],
    definitions: Dict[str, AttributesDefinition],
) -> None:
    for prelude, body in _CssScanner(text).rules():
        if prelude.startswith("@"):
            scheme = _SCHEME_RE.search(prelude)
            if not prelude.lower().startswith("@media") or scheme is None:
                logger.debug("Skipping unsupported at-rule %r", prelude)
                continue
            _collect(body, scheme.group(1).lower(), definitions)
            continue
        names = _CLASS_RE.findall(prelude)
        if not names:
            raise StylesheetParseError(f"rule {prelude!r} has no class selector")
        attributes = _parse_block_attributes(body)
        for name in names:
            current = definitions.get(name, AttributesDefinition(StyleAttributes()))
            if mode is None:
                update = AttributesDefinition(attributes)
            elif mode == "light":
                update = AttributesDefinition(StyleAttributes(), light=attributes)
            else:
                update = AttributesDefinition(StyleAttributes(), dark=attributes)
            definitions[name] = current.merge(update)


def parse_css(text: str) -> ThemeVariants:
    """
    Parse a CSS-subset stylesheet into per-mode style tables.

    Raises:
        StylesheetParseError: When braces do not balance or a rule lacks class selectors.
    """
    definitions: Dict[str, AttributesDefinition] = {}
    _collect(_COMMENT_RE.sub("", text), None, definitions)
    typed: Dict[str, StyleDefinition] = dict(definitions)
    return build_variants(typed)
