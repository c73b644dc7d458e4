"""Template and stylesheet registries."""

from .files import FileRegistry, walk_dir
from .stylesheets import STYLESHEET_EXTENSIONS, StylesheetRegistry
from .templates import TEMPLATE_EXTENSIONS, ResolvedTemplate, TemplateRegistry

__all__ = [
    "FileRegistry",
    "ResolvedTemplate",
    "STYLESHEET_EXTENSIONS",
    "StylesheetRegistry",
    "TEMPLATE_EXTENSIONS",
    "TemplateRegistry",
    "walk_dir",
]
