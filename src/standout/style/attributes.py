"""Style attributes with right-wins merge semantics."""
from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from typing import Any, List, Mapping, Optional

from ..errors import InvalidColor, InvalidDefinition, InvalidShorthand, UnknownAttribute
from ..terminal import ColorCapability
from .color import ColorDef, parse_color, parse_color_string
from .colorspace import ThemePalette

FLAG_CODES = {
    "bold": 1,
    "dim": 2,
    "italic": 3,
    "underline": 4,
    "blink": 5,
    "reverse": 7,
    "hidden": 8,
    "strikethrough": 9,
}
COLOR_KEYS = ("fg", "bg")
VARIANT_KEYS = ("light", "dark")
ATTRIBUTE_NAMES = frozenset(COLOR_KEYS) | frozenset(FLAG_CODES)

_SHORTHAND_TOKEN_RE = re.compile(r"cube\([^)]*\)|\S+")


@dataclass(frozen=True)
class StyleAttributes:
    """
    Appearance properties of a style.

    ``None`` means "inherit"; any other value overrides. Merging is therefore
    associative and the empty instance is its identity.
    """

    fg: Optional[ColorDef] = None
    bg: Optional[ColorDef] = None
    bold: Optional[bool] = None
    dim: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    blink: Optional[bool] = None
    reverse: Optional[bool] = None
    hidden: Optional[bool] = None
    strikethrough: Optional[bool] = None

    def merge(self, other: Optional["StyleAttributes"]) -> "StyleAttributes":
        """Return a copy where every attribute set on ``other`` wins."""

        if other is None:
            return self
        overrides = {
            field.name: getattr(other, field.name)
            for field in fields(other)
            if getattr(other, field.name) is not None
        }
        if not overrides:
            return self
        return replace(self, **overrides)

    def is_empty(self) -> bool:
        return all(getattr(self, field.name) is None for field in fields(self))

    def sgr_codes(
        self,
        palette: Optional[ThemePalette] = None,
        capability: ColorCapability = ColorCapability.ANSI256,
    ) -> List[str]:
        codes = [str(code) for name, code in FLAG_CODES.items() if getattr(self, name)]
        if self.fg is not None:
            codes.append(self.fg.sgr(False, palette, capability))
        if self.bg is not None:
            codes.append(self.bg.sgr(True, palette, capability))
        return codes

    def sgr(
        self,
        palette: Optional[ThemePalette] = None,
        capability: ColorCapability = ColorCapability.ANSI256,
    ) -> str:
        """Return the SGR escape that switches these attributes on, or ``""``."""

        if capability is ColorCapability.NONE:
            return ""
        codes = self.sgr_codes(palette, capability)
        if not codes:
            return ""
        return f"\x1b[{';'.join(codes)}m"

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], *, style: Optional[str] = None) -> "StyleAttributes":
        """
        Parse a YAML attribute mapping such as ``{fg: cyan, bold: true}``.

        The ``light`` and ``dark`` keys are skipped; they hold mode variants and
        are parsed separately by the definition layer.

        Raises:
            UnknownAttribute: For keys that are not style attributes.
            InvalidColor: For malformed ``fg``/``bg`` values.
            InvalidDefinition: For non-boolean flag values.
        """
        values: dict[str, Any] = {}
        for key, raw in mapping.items():
            key = str(key)
            if key in VARIANT_KEYS:
                continue
            if key in COLOR_KEYS:
                values[key] = parse_color(raw)
            elif key in FLAG_CODES:
                if not isinstance(raw, bool):
                    where = f" in style '{style}'" if style else ""
                    raise InvalidDefinition(f"attribute '{key}'{where} must be true or false, got {raw!r}")
                values[key] = raw
            else:
                raise UnknownAttribute(key, style=style)
        return cls(**values)

    @classmethod
    def from_shorthand(cls, text: str) -> "StyleAttributes":
        """
        Parse a shorthand such as ``"yellow italic"``.

        At most one colour token is allowed; it sets the foreground. Every other
        token must be a flag name.

        Raises:
            InvalidShorthand: For empty input, two colours, or unknown tokens.
        """
        tokens = _SHORTHAND_TOKEN_RE.findall(text)
        if not tokens:
            raise InvalidShorthand("empty shorthand")
        values: dict[str, Any] = {}
        for token in tokens:
            lowered = token.lower()
            if lowered in FLAG_CODES:
                values[lowered] = True
                continue
            try:
                color = parse_color_string(token)
            except InvalidColor:
                raise InvalidShorthand(f"unknown token '{token}' in shorthand '{text}'") from None
            if "fg" in values:
                raise InvalidShorthand(f"shorthand '{text}' names more than one color")
            values["fg"] = color
        return cls(**values)
