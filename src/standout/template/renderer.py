"""Renderer facade tying templates, themes and the style-tag pass together."""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..output import OutputMode, TextMode
from ..resources.templates import ResolvedTemplate, TemplateRegistry
from ..style.registry import Styles
from ..tags import StyleTagParser, TagTransform
from ..terminal import ColorCapability, detect_capability
from ..theme.icons import IconMode
from ..theme.theme import ColorMode, Theme, detect_color_mode
from .context import ContextRegistry, RenderContext, merge_context
from .engine import JinjaEngine, TemplateEngine
from .serialize import serialize, to_plain

__all__ = ["OutputMode", "Renderer", "TextMode", "render", "render_auto"]

logger = logging.getLogger(__name__)


def _terminal_capability(environ: Optional[Mapping[str, str]] = None) -> ColorCapability:
    """Capability for explicitly requested terminal output; ``NO_COLOR`` only affects ``auto``."""

    env = dict(os.environ if environ is None else environ)
    env.pop("NO_COLOR", None)
    return detect_capability(environ=env)


class Renderer:
    """
    Render named templates or inline sources for one output mode.

    ``render(name, data)`` resolves the template, expands it with the engine
    against the context entries merged under ``data``, then rewrites style
    tags for the output mode: escapes for ``term``, stripped for ``text``,
    verbatim for ``term-debug``. Structured modes skip all of that and
    serialize ``data`` directly.

    Compiled templates are cached by name and reused while the content is
    unchanged. File-backed templates bypass the cache in debug mode so edits
    show up on the next render.
    """

    def __init__(
        self,
        theme: Optional[Theme] = None,
        *,
        mode: Union[OutputMode, str] = OutputMode.AUTO,
        engine: Optional[TemplateEngine] = None,
        templates: Optional[TemplateRegistry] = None,
        context: Optional[ContextRegistry] = None,
        width: Optional[int] = None,
        strict_tags: bool = False,
        color_mode: Optional[ColorMode] = None,
        icon_mode: IconMode = IconMode.AUTO,
        capability: Optional[ColorCapability] = None,
        is_terminal: Optional[bool] = None,
    ) -> None:
        self.theme = theme
        self.mode = OutputMode.parse(mode)
        self.templates = templates if templates is not None else TemplateRegistry()
        self.engine = engine if engine is not None else JinjaEngine(debug=self.templates.debug)
        self.engine.set_loader(self.templates.get)
        self.context = context if context is not None else ContextRegistry()
        self.width = width
        self.strict_tags = strict_tags
        self.color_mode = color_mode
        self.icon_mode = icon_mode
        self.capability = capability
        self.is_terminal = is_terminal
        self._compiled: Dict[str, Tuple[str, Any]] = {}
        self._styles: Dict[Tuple[Optional[ColorMode], ColorCapability], Styles] = {}

    # --- configuration -------------------------------------------------------

    def add_template(self, name: str, content: str) -> None:
        self.templates.add_inline(name, content)
        self._compiled.pop(name, None)
        self.engine.clear_cache()

    def add_template_dir(self, path: Union[str, Path]) -> None:
        self.templates.add_dir(path)

    def set_theme(self, theme: Optional[Theme]) -> None:
        self.theme = theme
        self._styles.clear()

    def set_output_mode(self, mode: Union[OutputMode, str]) -> None:
        self.mode = OutputMode.parse(mode)

    def clear_cache(self) -> None:
        """Drop compiled templates and resolved style tables."""

        self._compiled.clear()
        self._styles.clear()
        self.engine.clear_cache()

    def refresh(self) -> None:
        """Re-scan template directories and re-read the theme from disk when it has a source."""

        self.templates.refresh()
        if self.theme is not None and self.theme.source_path is not None:
            self.theme.refresh()
        self.clear_cache()

    # --- resolution ----------------------------------------------------------

    def terminal_width(self) -> int:
        if self.width:
            return self.width
        return shutil.get_terminal_size((80, 24)).columns

    def _resolved_mode(self, mode: OutputMode) -> OutputMode:
        return mode.resolve_auto(is_terminal=self.is_terminal)

    def styles(self, capability: Optional[ColorCapability] = None) -> Optional[Styles]:
        """Return the validated style table for the current theme, or ``None`` without one."""

        if self.theme is None:
            return None
        color_mode = self.color_mode or detect_color_mode()
        capability = capability or self.capability or ColorCapability.ANSI256
        key = (color_mode, capability)
        styles = self._styles.get(key)
        if styles is None:
            styles = self.theme.resolve_styles(color_mode, capability=capability)
            styles.validate()
            self._styles[key] = styles
        return styles

    def _compile(self, resolved: ResolvedTemplate) -> Any:
        bypass = resolved.is_file and self.templates.debug
        cached = None if bypass else self._compiled.get(resolved.name)
        if cached is not None and cached[0] == resolved.content:
            logger.debug("Compiled template cache hit for %s", resolved.name)
            return cached[1]
        compiled = self.engine.compile(resolved.content, resolved.name)
        logger.debug("Compiled template %s", resolved.name)
        if not bypass:
            self._compiled[resolved.name] = (resolved.content, compiled)
        return compiled

    def _context_data(self, mode: OutputMode, data: Any) -> Dict[str, Any]:
        plain = to_plain(data)
        context = RenderContext(
            output_mode=mode,
            terminal_width=self.terminal_width(),
            theme=self.theme,
            data=plain if isinstance(plain, Mapping) else {},
        )
        base: Dict[str, Any] = {}
        if self.theme is not None:
            base["icons"] = self.theme.resolve_icons(self.icon_mode)
        base.update(self.context.resolve(context))
        return merge_context(base, plain)

    def apply_tags(self, text: str, mode: Optional[OutputMode] = None) -> str:
        """Run the style-tag pass over already expanded ``text``."""

        resolved = self._resolved_mode(mode or self.mode)
        transform = resolved.tag_transform(is_terminal=self.is_terminal)
        capability = None
        if transform is TagTransform.APPLY:
            capability = self.capability or _terminal_capability()
        parser = StyleTagParser(self.styles(capability), transform, strict=self.strict_tags)
        return parser.process(text)

    def _expand(self, compiled: Any, data: Any, mode: OutputMode, name: Optional[str]) -> str:
        resolved = self._resolved_mode(mode)
        expanded = self.engine.render_compiled(compiled, self._context_data(resolved, data), name)
        return self.apply_tags(expanded, resolved)

    # --- rendering -----------------------------------------------------------

    def render(self, name: str, data: Any = None) -> str:
        return self.render_with_mode(name, data, self.mode)

    def render_with_mode(self, name: str, data: Any, mode: Union[OutputMode, str]) -> str:
        """
        Render template ``name`` for ``mode``.

        Raises:
            TemplateNotFound: If no registered source provides ``name``.
            TemplateParseError: If the template does not compile.
            RenderError: If expansion or structured serialization fails.
            TagError: In strict mode, for tags naming unknown styles.
        """
        mode = OutputMode.parse(mode)
        if mode.is_structured:
            return serialize(data, mode)
        resolved = self.templates.resolve(name)
        return self._expand(self._compile(resolved), data, mode, name)

    def render_string(
        self,
        source: str,
        data: Any = None,
        mode: Union[OutputMode, str, None] = None,
    ) -> str:
        """Render an inline ``source`` without registering it."""

        mode = self.mode if mode is None else OutputMode.parse(mode)
        if mode.is_structured:
            return serialize(data, mode)
        compiled = self.engine.compile(source, None)
        return self._expand(compiled, data, mode, None)

    def has_template(self, name: str) -> bool:
        return name in self.templates


def render(
    source: str,
    data: Any = None,
    theme: Optional[Theme] = None,
    *,
    mode: Union[OutputMode, str] = OutputMode.AUTO,
) -> str:
    """One-shot render of an inline template ``source``."""

    return Renderer(theme, mode=mode).render_string(source, data)


def render_auto(
    template: str,
    data: Any = None,
    theme: Optional[Theme] = None,
    mode: Union[OutputMode, str] = OutputMode.AUTO,
    *,
    templates: Optional[TemplateRegistry] = None,
) -> str:
    """
    Serialize ``data`` for structured modes, otherwise render ``template``.

    ``template`` is a registered template name when ``templates`` provides
    it, and an inline source otherwise.
    """
    mode = OutputMode.parse(mode)
    if mode.is_structured:
        return serialize(data, mode)
    renderer = Renderer(theme, mode=mode, templates=templates)
    if templates is not None and template in templates:
        return renderer.render(template, data)
    return renderer.render_string(template, data)
