"""Colour literals accepted by stylesheets and their SGR encodings.

Accepted forms:

* named colours (``red``, ``cyan``; ``gray``/``grey`` alias ``white``)
* bright variants (``bright_red``), palette indices 8 to 15
* palette indices ``0`` to ``255``
* hex strings ``#rgb`` and ``#rrggbb``
* ``[r, g, b]`` lists
* theme-relative ``cube(r%, g%, b%)`` coordinates
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from ..errors import InvalidColor
from ..terminal import ColorCapability
from .colorspace import CubeCoord, Rgb, ThemePalette, rgb_to_ansi256

NAMED_COLORS = {
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "cyan": 6,
    "white": 7,
    "gray": 7,
    "grey": 7,
}

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")
_CUBE_RE = re.compile(r"^cube\((?P<body>[^)]*)\)$")


@dataclass(frozen=True)
class NamedColor:
    """One of the eight basic ANSI colours."""

    name: str

    def sgr(self, background: bool, palette: Optional[ThemePalette], capability: ColorCapability) -> str:
        return str((40 if background else 30) + NAMED_COLORS[self.name])


@dataclass(frozen=True)
class PaletteColor:
    """An index into the terminal's 256-colour palette."""

    index: int

    def sgr(self, background: bool, palette: Optional[ThemePalette], capability: ColorCapability) -> str:
        if self.index < 8:
            return str((40 if background else 30) + self.index)
        if self.index < 16:
            return str((100 if background else 90) + self.index - 8)
        return f"{48 if background else 38};5;{self.index}"


@dataclass(frozen=True)
class RgbColor:
    """An absolute sRGB colour."""

    rgb: Rgb

    def sgr(self, background: bool, palette: Optional[ThemePalette], capability: ColorCapability) -> str:
        return _rgb_sgr(self.rgb, background, capability)


@dataclass(frozen=True)
class CubeColor:
    """A theme-relative colour resolved against the active palette."""

    coord: CubeCoord

    def resolve(self, palette: Optional[ThemePalette]) -> Rgb:
        return (palette or ThemePalette.default_xterm()).resolve(self.coord)

    def sgr(self, background: bool, palette: Optional[ThemePalette], capability: ColorCapability) -> str:
        return _rgb_sgr(self.resolve(palette), background, capability)


ColorDef = Union[NamedColor, PaletteColor, RgbColor, CubeColor]


def _rgb_sgr(rgb: Rgb, background: bool, capability: ColorCapability) -> str:
    layer = 48 if background else 38
    if capability is ColorCapability.TRUECOLOR:
        return f"{layer};2;{rgb.r};{rgb.g};{rgb.b}"
    return f"{layer};5;{rgb_to_ansi256(rgb)}"


def _parse_hex(digits: str) -> RgbColor:
    if not _HEX_RE.match(digits) or len(digits) not in (3, 6):
        raise InvalidColor(f"Invalid hex color: #{digits} (must be 3 or 6 digits)")
    if len(digits) == 3:
        return RgbColor(Rgb(*(int(digit, 16) * 17 for digit in digits)))
    return RgbColor(Rgb(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)))


def _parse_cube(body: str) -> CubeColor:
    parts = [part.strip() for part in body.split(",")]
    if len(parts) != 3:
        raise InvalidColor(f"cube() requires exactly 3 components, got {len(parts)}")
    values: List[float] = []
    for part in parts:
        number = part[:-1].strip() if part.endswith("%") else part
        try:
            values.append(float(number))
        except ValueError:
            raise InvalidColor(f"Invalid cube component '{part}': expected a number") from None
    return CubeColor(CubeCoord.from_percentages(*values))


def _parse_named(name: str) -> ColorDef:
    lowered = name.lower()
    if lowered.startswith("bright_"):
        base = lowered[len("bright_"):]
        if base not in NAMED_COLORS or base in ("gray", "grey"):
            raise InvalidColor(f"Unknown bright color: {name}")
        return PaletteColor(8 + NAMED_COLORS[base])
    if lowered in NAMED_COLORS:
        canonical = "white" if lowered in ("gray", "grey") else lowered
        return NamedColor(canonical)
    raise InvalidColor(f"Unknown color name: {name}")


def parse_color_string(text: str) -> ColorDef:
    """Parse a textual colour literal."""

    text = text.strip()
    cube = _CUBE_RE.match(text)
    if cube:
        return _parse_cube(cube.group("body"))
    if text.startswith("#"):
        return _parse_hex(text[1:])
    return _parse_named(text)


def parse_color(value: Any) -> ColorDef:
    """
    Parse a colour from a YAML scalar or sequence.

    Raises:
        InvalidColor: If the value is malformed, unknown, or out of range.
    """
    if isinstance(value, bool):
        raise InvalidColor(f"Invalid color value: {value!r}")
    if isinstance(value, str):
        return parse_color_string(value)
    if isinstance(value, int):
        if not 0 <= value <= 255:
            raise InvalidColor(f"Color palette index {value} out of range (0-255)")
        return PaletteColor(value)
    if isinstance(value, (list, tuple)):
        if len(value) != 3:
            raise InvalidColor(f"RGB tuple must have exactly 3 values, got {len(value)}")
        channels: List[int] = []
        for position, channel in enumerate(value):
            if isinstance(channel, bool) or not isinstance(channel, int):
                raise InvalidColor(f"RGB component {position} is not a number")
            if not 0 <= channel <= 255:
                raise InvalidColor(f"RGB component {position} out of range (0-255): {channel}")
            channels.append(channel)
        return RgbColor(Rgb(*channels))
    raise InvalidColor(f"Invalid color value: {value!r}")


def is_color_token(token: str) -> bool:
    """Return True when ``token`` parses as a colour literal."""

    try:
        parse_color_string(token)
    except InvalidColor:
        return False
    return True
