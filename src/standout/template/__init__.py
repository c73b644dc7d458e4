"""Template expansion, filters, context and the renderer facade."""

from .context import ContextProvider, ContextRegistry, RenderContext, merge_context
from .engine import JinjaEngine, SimpleEngine, TemplateEngine, create_engine
from .filters import FILTERS, GLOBALS, TableObject, TabularObject
from .renderer import OutputMode, Renderer, TextMode, render, render_auto
from .serialize import flatten_for_csv, serialize, to_plain

__all__ = [
    "ContextProvider",
    "ContextRegistry",
    "FILTERS",
    "GLOBALS",
    "JinjaEngine",
    "OutputMode",
    "RenderContext",
    "Renderer",
    "SimpleEngine",
    "TableObject",
    "TabularObject",
    "TemplateEngine",
    "TextMode",
    "create_engine",
    "flatten_for_csv",
    "merge_context",
    "render",
    "render_auto",
    "serialize",
    "to_plain",
]
