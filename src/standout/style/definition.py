"""Style definitions and the YAML stylesheet format.

A stylesheet maps style names to one of three shapes::

    title: "cyan bold"          # shorthand
    heading: title              # alias of another style
    panel:                      # attribute mapping with mode variants
      fg: white
      bg: 236
      light: {fg: black, bg: 254}

A bare token is treated as shorthand when it is a flag or colour name, and as
an alias otherwise.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from ..errors import InvalidDefinition, InvalidShorthand, StylesheetParseError
from .attributes import FLAG_CODES, VARIANT_KEYS, StyleAttributes
from .color import is_color_token

RESERVED_KEYS = frozenset({"icons"})

_ALIAS_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")


@dataclass(frozen=True)
class AliasDefinition:
    """A style that borrows another style's attributes by name."""

    target: str


@dataclass(frozen=True)
class AttributesDefinition:
    """Concrete attributes with optional light and dark overrides."""

    base: StyleAttributes
    light: Optional[StyleAttributes] = None
    dark: Optional[StyleAttributes] = None

    def merge(self, other: "AttributesDefinition") -> "AttributesDefinition":
        def _combine(left: Optional[StyleAttributes], right: Optional[StyleAttributes]) -> Optional[StyleAttributes]:
            if left is None:
                return right
            return left.merge(right)

        return AttributesDefinition(
            base=self.base.merge(other.base),
            light=_combine(self.light, other.light),
            dark=_combine(self.dark, other.dark),
        )


StyleDefinition = Union[AliasDefinition, AttributesDefinition]


@dataclass
class ThemeVariants:
    """
    Styles already merged for each colour mode.

    ``light[name]`` and ``dark[name]`` only exist for adaptive styles and hold
    ``base.merge(variant)``; every other style resolves to ``base[name]``.
    """

    base: Dict[str, StyleAttributes] = field(default_factory=dict)
    light: Dict[str, StyleAttributes] = field(default_factory=dict)
    dark: Dict[str, StyleAttributes] = field(default_factory=dict)
    aliases: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.base) + len(self.aliases)


def _is_attribute_token(token: str) -> bool:
    lowered = token.lower()
    return lowered in FLAG_CODES or is_color_token(token)


def parse_definition(name: str, value: Any) -> StyleDefinition:
    """
    Parse the right-hand side of one stylesheet entry.

    Raises:
        InvalidShorthand: For a shorthand string with bad tokens.
        InvalidDefinition: For values of the wrong type or malformed variants.
        UnknownAttribute: For unknown keys in an attribute mapping.
        InvalidColor: For malformed colour literals.
    """
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidShorthand(f"style '{name}' has an empty definition")
        if " " in text or "\t" in text or _is_attribute_token(text):
            return AttributesDefinition(StyleAttributes.from_shorthand(text))
        if not _ALIAS_NAME_RE.match(text):
            raise InvalidDefinition(f"style '{name}' has an invalid definition {text!r}")
        return AliasDefinition(text)
    if isinstance(value, Mapping):
        base = StyleAttributes.from_mapping(value, style=name)
        variants: Dict[str, Optional[StyleAttributes]] = {"light": None, "dark": None}
        for mode in VARIANT_KEYS:
            if mode not in value:
                continue
            raw = value[mode]
            if not isinstance(raw, Mapping):
                raise InvalidDefinition(f"'{mode}' of style '{name}' must be a mapping")
            variants[mode] = StyleAttributes.from_mapping(raw, style=f"{name}.{mode}")
        return AttributesDefinition(base, light=variants["light"], dark=variants["dark"])
    raise InvalidDefinition(
        f"style '{name}' must be a string or a mapping, got {type(value).__name__}"
    )


def build_variants(definitions: Mapping[str, StyleDefinition]) -> ThemeVariants:
    """Expand definitions into per-mode style tables."""

    variants = ThemeVariants()
    for name, definition in definitions.items():
        if isinstance(definition, AliasDefinition):
            variants.aliases[name] = definition.target
            continue
        variants.base[name] = definition.base
        if definition.light is not None:
            variants.light[name] = definition.base.merge(definition.light)
        if definition.dark is not None:
            variants.dark[name] = definition.base.merge(definition.dark)
    return variants


def load_yaml_document(text: str) -> Dict[str, Any]:
    """Parse ``text`` as a YAML mapping; an empty document is an empty mapping."""

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise StylesheetParseError(f"invalid YAML: {exc}") from exc
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise StylesheetParseError("stylesheet root must be a mapping of style names")
    return document


def parse_stylesheet(text: str) -> ThemeVariants:
    """Parse a YAML stylesheet, skipping reserved sections such as ``icons``."""

    document = load_yaml_document(text)
    definitions: Dict[str, StyleDefinition] = {}
    for name, value in document.items():
        name = str(name)
        if name in RESERVED_KEYS:
            continue
        definitions[name] = parse_definition(name, value)
    return build_variants(definitions)
