"""Template, theme and table rendering for structured command-line output."""

from .errors import StandoutError
from .output import OutputDestination, OutputMode, TextMode
from .query import Op, Query
from .resources import StylesheetRegistry, TemplateRegistry
from .style import StyleAttributes, Styles, ThemePalette
from .tabular import Col, Column, Table, TabularFormatter, TabularSpec, resolve_widths
from .tags import StyleTagParser, TagTransform
from .template import ContextRegistry, JinjaEngine, Renderer, SimpleEngine, render, render_auto
from .text import display_width, pad_center, pad_left, pad_right, truncate_end, truncate_middle, truncate_start
from .theme import ColorMode, IconMode, Theme

__version__ = "0.4.0"

__all__ = [
    "Col",
    "ColorMode",
    "Column",
    "ContextRegistry",
    "IconMode",
    "JinjaEngine",
    "Op",
    "OutputDestination",
    "OutputMode",
    "Query",
    "Renderer",
    "SimpleEngine",
    "StandoutError",
    "StyleAttributes",
    "StyleTagParser",
    "Styles",
    "StylesheetRegistry",
    "Table",
    "TabularFormatter",
    "TabularSpec",
    "TagTransform",
    "TemplateRegistry",
    "TextMode",
    "Theme",
    "ThemePalette",
    "display_width",
    "pad_center",
    "pad_left",
    "pad_right",
    "render",
    "render_auto",
    "resolve_widths",
    "truncate_end",
    "truncate_middle",
    "truncate_start",
]
