"""Themes and icon sets."""

from .icons import IconDefinition, IconMode, IconSet, detect_icon_mode
from .theme import ColorMode, Theme, detect_color_mode

__all__ = [
    "ColorMode",
    "IconDefinition",
    "IconMode",
    "IconSet",
    "Theme",
    "detect_color_mode",
    "detect_icon_mode",
]
