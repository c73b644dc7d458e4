"""Colours, style attributes and stylesheet parsing."""

from .attributes import StyleAttributes
from .color import ColorDef, CubeColor, NamedColor, PaletteColor, RgbColor, parse_color
from .colorspace import CubeCoord, Rgb, ThemePalette, rgb_to_ansi256
from .css import parse_css
from .definition import (
    AliasDefinition,
    AttributesDefinition,
    StyleDefinition,
    ThemeVariants,
    parse_definition,
    parse_stylesheet,
)
from .registry import Styles

__all__ = [
    "AliasDefinition",
    "AttributesDefinition",
    "ColorDef",
    "CubeColor",
    "CubeCoord",
    "NamedColor",
    "PaletteColor",
    "Rgb",
    "RgbColor",
    "StyleAttributes",
    "StyleDefinition",
    "Styles",
    "ThemePalette",
    "ThemeVariants",
    "parse_color",
    "parse_css",
    "parse_definition",
    "parse_stylesheet",
    "rgb_to_ansi256",
]
