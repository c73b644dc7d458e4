"""Theme-relative colours interpolated in CIE LAB.

The eight base ANSI colours of a theme sit on the corners of a unit cube:

    (0,0,0) background   (1,0,0) red      (0,1,0) green   (1,1,0) yellow
    (0,0,1) blue         (1,0,1) magenta  (0,1,1) cyan    (1,1,1) foreground

A :class:`CubeCoord` names a point inside that cube. :meth:`ThemePalette.resolve`
turns it into an sRGB colour by trilinear interpolation in LAB, so the same
coordinate keeps its perceived position when the user switches themes.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, NamedTuple, Optional, Sequence, Tuple

from ..errors import InvalidColor

# D65 reference white
XN = 0.95047
YN = 1.00000
ZN = 1.08883


class Rgb(NamedTuple):
    """An sRGB colour with 8-bit channels."""

    r: int
    g: int
    b: int

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


class Lab(NamedTuple):
    l: float  # noqa: E741
    a: float
    b: float


def srgb_to_linear(channel: int) -> float:
    value = channel / 255.0
    if value <= 0.04045:
        return value / 12.92
    return ((value + 0.055) / 1.055) ** 2.4


def linear_to_srgb(value: float) -> int:
    value = min(max(value, 0.0), 1.0)
    if value <= 0.0031308:
        scaled = 12.92 * value
    else:
        scaled = 1.055 * value ** (1.0 / 2.4) - 0.055
    return int(round(scaled * 255.0))


def _lab_f(t: float) -> float:
    if t > 0.008856:
        return t ** (1.0 / 3.0)
    return 7.787 * t + 16.0 / 116.0


def _lab_f_inv(t: float) -> float:
    if t > 0.206896:
        return t * t * t
    return (t - 16.0 / 116.0) / 7.787


def rgb_to_lab(rgb: Rgb) -> Lab:
    """Convert sRGB to CIE LAB through linear RGB and XYZ (D65)."""

    r = srgb_to_linear(rgb.r)
    g = srgb_to_linear(rgb.g)
    b = srgb_to_linear(rgb.b)
    x = 0.4124564 * r + 0.3575761 * g + 0.1804375 * b
    y = 0.2126729 * r + 0.7151522 * g + 0.0721750 * b
    z = 0.0193339 * r + 0.1191920 * g + 0.9503041 * b
    fx = _lab_f(x / XN)
    fy = _lab_f(y / YN)
    fz = _lab_f(z / ZN)
    return Lab(116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz))


def lab_to_rgb(lab: Lab) -> Rgb:
    """Convert CIE LAB back to sRGB, clamping out-of-gamut channels."""

    fy = (lab.l + 16.0) / 116.0
    fx = lab.a / 500.0 + fy
    fz = fy - lab.b / 200.0
    x = XN * _lab_f_inv(fx)
    y = YN * _lab_f_inv(fy)
    z = ZN * _lab_f_inv(fz)
    r = 3.2404542 * x - 1.5371385 * y - 0.4985314 * z
    g = -0.9692660 * x + 1.8760108 * y + 0.0415560 * z
    b = 0.0556434 * x - 0.2040259 * y + 1.0572252 * z
    return Rgb(linear_to_srgb(r), linear_to_srgb(g), linear_to_srgb(b))


def _lerp(t: float, start: Lab, end: Lab) -> Lab:
    return Lab(
        start.l + t * (end.l - start.l),
        start.a + t * (end.a - start.a),
        start.b + t * (end.b - start.b),
    )


def rgb_to_ansi256(rgb: Rgb) -> int:
    """Return the nearest xterm 256-colour index for ``rgb``."""

    r, g, b = rgb
    if r == g == b:
        if r < 8:
            return 16
        if r > 248:
            return 231
        return 232 + (r - 8) * 24 // 247
    return 16 + 36 * (r * 5 // 255) + 6 * (g * 5 // 255) + (b * 5 // 255)


@dataclass(frozen=True)
class CubeCoord:
    """A position in the theme colour cube, each component within ``[0, 1]``."""

    r: float
    g: float
    b: float

    def __post_init__(self) -> None:
        for component in (self.r, self.g, self.b):
            if not 0.0 <= component <= 1.0:
                raise InvalidColor(
                    f"cube coordinates must be within 0.0..=1.0, got ({self.r}, {self.g}, {self.b})"
                )

    @classmethod
    def from_percentages(cls, r: float, g: float, b: float) -> "CubeCoord":
        """Build a coordinate from ``0..100`` percentages."""

        try:
            return cls(r / 100.0, g / 100.0, b / 100.0)
        except InvalidColor:
            raise InvalidColor(
                f"cube percentages must be within 0..=100, got ({r}, {g}, {b})"
            ) from None

    def quantize(self, levels: int = 6) -> Tuple[int, int, int]:
        top = levels - 1
        return (
            min(int(round(self.r * top)), top),
            min(int(round(self.g * top)), top),
            min(int(round(self.b * top)), top),
        )

    def to_palette_index(self, levels: int = 6) -> int:
        """Return the xterm colour-cube index, ``16 + 36r + 6g + b`` for six levels."""

        r, g, b = self.quantize(levels)
        return 16 + levels * levels * r + levels * g + b

    def corner(self) -> Optional[int]:
        """Return the anchor index when the coordinate sits exactly on a corner."""

        if all(component in (0.0, 1.0) for component in (self.r, self.g, self.b)):
            return int(self.r) + 2 * int(self.g) + 4 * int(self.b)
        return None


@dataclass(frozen=True)
class ThemePalette:
    """
    The eight anchor colours used to resolve cube coordinates.

    ``anchors`` are ordered black, red, green, yellow, blue, magenta, cyan,
    white. ``bg`` and ``fg`` replace the black and white corners when set.
    """

    anchors: Tuple[Rgb, ...]
    bg: Optional[Rgb] = None
    fg: Optional[Rgb] = None

    def __post_init__(self) -> None:
        if len(self.anchors) != 8:
            raise InvalidColor(f"a theme palette needs 8 anchor colours, got {len(self.anchors)}")
        normalized = tuple(Rgb(*anchor) for anchor in self.anchors)
        for anchor in normalized:
            if any(not 0 <= channel <= 255 for channel in anchor):
                raise InvalidColor(f"palette anchor {tuple(anchor)} is outside 0..=255")
        object.__setattr__(self, "anchors", normalized)

    @classmethod
    def from_colors(cls, colors: Sequence[Sequence[int]]) -> "ThemePalette":
        return cls(tuple(Rgb(*color) for color in colors))

    @classmethod
    def default_xterm(cls) -> "ThemePalette":
        return cls(
            (
                Rgb(0, 0, 0),
                Rgb(205, 0, 0),
                Rgb(0, 205, 0),
                Rgb(205, 205, 0),
                Rgb(0, 0, 238),
                Rgb(205, 0, 205),
                Rgb(0, 205, 205),
                Rgb(229, 229, 229),
            )
        )

    def with_bg(self, bg: Rgb) -> "ThemePalette":
        return replace(self, bg=Rgb(*bg))

    def with_fg(self, fg: Rgb) -> "ThemePalette":
        return replace(self, fg=Rgb(*fg))

    @property
    def background(self) -> Rgb:
        return self.bg if self.bg is not None else self.anchors[0]

    @property
    def foreground(self) -> Rgb:
        return self.fg if self.fg is not None else self.anchors[7]

    def _corners(self) -> List[Rgb]:
        corners = list(self.anchors)
        corners[0] = self.background
        corners[7] = self.foreground
        return corners

    def _corner_labs(self) -> List[Lab]:
        return [rgb_to_lab(color) for color in self._corners()]

    @staticmethod
    def _interpolate(labs: Sequence[Lab], r: float, g: float, b: float) -> Lab:
        # along r: background->red, green->yellow, blue->magenta, cyan->foreground
        c0 = _lerp(r, labs[0], labs[1])
        c1 = _lerp(r, labs[2], labs[3])
        c2 = _lerp(r, labs[4], labs[5])
        c3 = _lerp(r, labs[6], labs[7])
        # along g, then b
        c4 = _lerp(g, c0, c1)
        c5 = _lerp(g, c2, c3)
        return _lerp(b, c4, c5)

    def resolve(self, coord: CubeCoord) -> Rgb:
        """Return the sRGB colour at ``coord``; corners return their anchors exactly."""

        corner = coord.corner()
        if corner is not None:
            return self._corners()[corner]
        return lab_to_rgb(self._interpolate(self._corner_labs(), coord.r, coord.g, coord.b))

    def generate_palette(self, subdivisions: int = 6) -> List[Rgb]:
        """
        Generate an extended palette from the anchors.

        Returns ``subdivisions ** 3`` cube colours in xterm index order followed
        by a 24-step grey ramp between background and foreground, excluding both
        endpoints. With the default six subdivisions this is 240 colours, the
        replacement for xterm indices 16 to 255.
        """
        if subdivisions < 2:
            raise ValueError("subdivisions must be at least 2")
        labs = self._corner_labs()
        top = float(subdivisions - 1)
        palette: List[Rgb] = []
        for r in range(subdivisions):
            for g in range(subdivisions):
                for b in range(subdivisions):
                    coord = CubeCoord(r / top, g / top, b / top)
                    corner = coord.corner()
                    if corner is not None:
                        palette.append(self._corners()[corner])
                    else:
                        palette.append(lab_to_rgb(self._interpolate(labs, coord.r, coord.g, coord.b)))
        for step in range(24):
            t = (step + 1) / 25.0
            palette.append(lab_to_rgb(_lerp(t, labs[0], labs[7])))
        return palette
