"""Pluggable template engines.

The renderer only needs three operations from an engine: compile a source,
render a compiled template against a mapping, and resolve includes through a
loader it supplies. :class:`JinjaEngine` is the default; :class:`SimpleEngine`
does ``{name}`` substitution only and has no control flow, filters or
includes.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional

import jinja2
import jinja2.meta

from ..errors import (
    IncludeRecursionError,
    RenderError,
    StandoutError,
    TemplateNotFound,
    TemplateParseError,
)
from ..resources.files import strip_extension
from ..resources.templates import TEMPLATE_EXTENSIONS
from . import filters as template_filters

logger = logging.getLogger(__name__)

IncludeLoader = Callable[[str], Optional[str]]


class TemplateEngine(ABC):
    """Compile-and-render contract shared by every engine."""

    supports_includes = False
    supports_filters = False
    supports_control_flow = False

    def __init__(self) -> None:
        self._loader: Optional[IncludeLoader] = None

    def set_loader(self, loader: Optional[IncludeLoader]) -> None:
        """Install the callable used to resolve ``include`` names to sources."""

        self._loader = loader

    @abstractmethod
    def compile(self, source: str, name: Optional[str] = None) -> Any:
        """Return an engine-specific compiled form of ``source``."""

    @abstractmethod
    def render_compiled(self, compiled: Any, data: Mapping[str, Any], name: Optional[str] = None) -> str:
        """Expand a compiled template against ``data``."""

    def render_template(self, source: str, data: Mapping[str, Any], name: Optional[str] = None) -> str:
        return self.render_compiled(self.compile(source, name), data, name)

    def clear_cache(self) -> None:
        """Forget anything compiled from loader-provided sources."""


class JinjaEngine(TemplateEngine):
    """
    Jinja2-backed engine with the toolkit's filters and globals installed.

    Undefined variables render as empty strings, autoescaping is off and a
    single trailing newline of the source is dropped, matching plain Jinja
    defaults for text output.
    """

    supports_includes = True
    supports_filters = True
    supports_control_flow = True

    def __init__(self, *, debug: bool = False, environment: Optional[jinja2.Environment] = None) -> None:
        super().__init__()
        self.debug = debug
        self.environment = environment or jinja2.Environment(
            loader=jinja2.FunctionLoader(self._load_include),
            autoescape=False,
            undefined=jinja2.Undefined,
            auto_reload=True,
        )
        if self.environment.loader is None:
            self.environment.loader = jinja2.FunctionLoader(self._load_include)
        template_filters.install(self.environment.filters, self.environment.globals)

    def add_filter(self, name: str, function: Callable[..., Any]) -> None:
        self.environment.filters[name] = function

    def add_global(self, name: str, value: Any) -> None:
        self.environment.globals[name] = value

    def _load_include(self, name: str) -> Any:
        if self._loader is None:
            return None
        source = self._loader(name)
        if source is None:
            return None
        debug = self.debug
        return source, None, lambda: not debug

    def _check_includes(self, source: str, name: Optional[str]) -> None:
        """Walk literal ``include`` targets and reject any that lead back to an ancestor."""

        def _key(template_name: str) -> str:
            return strip_extension(template_name, TEMPLATE_EXTENSIONS)

        def _visit(text: str, stack: List[str], label: Optional[str]) -> None:
            try:
                parsed = self.environment.parse(text)
            except jinja2.TemplateSyntaxError as exc:
                raise TemplateParseError(
                    exc.message or str(exc),
                    template_name=label,
                    line_number=exc.lineno,
                    original_error=exc,
                ) from exc
            for target in jinja2.meta.find_referenced_templates(parsed):
                if target is None:
                    continue
                key = _key(target)
                if key in stack:
                    chain = " -> ".join(stack + [key])
                    raise IncludeRecursionError(
                        f"include recursion detected: {chain}", template_name=name
                    )
                included = self._loader(target) if self._loader is not None else None
                if included is None:
                    # reported with its name when the include runs
                    continue
                _visit(included, stack + [key], target)

        _visit(source, [_key(name)] if name else [], name)

    def compile(self, source: str, name: Optional[str] = None) -> jinja2.Template:
        """
        Compile ``source``; ``name`` seeds include-recursion checks and error messages.

        Raises:
            TemplateParseError: On syntax errors in the template or its includes.
            IncludeRecursionError: When an include chain leads back to ``name``.
        """
        self._check_includes(source, name)
        try:
            return self.environment.from_string(source)
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateParseError(
                exc.message or str(exc),
                template_name=name,
                line_number=exc.lineno,
                original_error=exc,
            ) from exc

    def render_compiled(self, compiled: Any, data: Mapping[str, Any], name: Optional[str] = None) -> str:
        """
        Raises:
            TemplateNotFound: When an include names an unknown template.
            RenderError: For any other failure during expansion.
        """
        try:
            return compiled.render(**dict(data))
        except jinja2.TemplateNotFound as exc:
            raise TemplateNotFound(exc.name) from exc
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateParseError(
                exc.message or str(exc),
                template_name=exc.name or name,
                line_number=exc.lineno,
                original_error=exc,
            ) from exc
        except TemplateNotFound:
            raise
        except RecursionError as exc:
            raise RenderError(
                "include recursion exceeded the maximum depth", template_name=name, original_error=exc
            ) from exc
        except (jinja2.TemplateError, StandoutError, TypeError, ValueError, AttributeError) as exc:
            raise RenderError(str(exc), template_name=name, original_error=exc) from exc

    def clear_cache(self) -> None:
        if self.environment.cache is not None:
            self.environment.cache.clear()


class _SimpleTemplate:
    __slots__ = ("source",)

    def __init__(self, source: str) -> None:
        self.source = source


def _resolve_path(data: Any, path: str) -> Any:
    current = data
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                raise KeyError(path)
            current = current[part]
        elif isinstance(current, (list, tuple)):
            if not part.isdigit() or int(part) >= len(current):
                raise KeyError(path)
            current = current[int(part)]
        else:
            raise KeyError(path)
    return current


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=str, separators=(",", ":"))
    return str(value)


class SimpleEngine(TemplateEngine):
    """
    ``{name}`` substitution with dotted paths (``{user.name}``, ``{items.0}``).

    ``{{`` and ``}}`` produce literal braces. Unknown names are left in place
    as ``{name}`` so missing data is visible in the output.
    """

    def __init__(self) -> None:
        super().__init__()
        self._named: Dict[str, str] = {}

    def add_template(self, name: str, source: str) -> None:
        self._named[name] = source

    def compile(self, source: str, name: Optional[str] = None) -> _SimpleTemplate:
        self._scan(source, None, name)
        return _SimpleTemplate(source)

    def render_compiled(self, compiled: Any, data: Mapping[str, Any], name: Optional[str] = None) -> str:
        return self._scan(compiled.source, data, name)

    def render_named(self, name: str, data: Mapping[str, Any]) -> str:
        if name not in self._named:
            raise TemplateNotFound(name)
        return self.render_template(self._named[name], data, name)

    @staticmethod
    def _scan(source: str, data: Optional[Mapping[str, Any]], name: Optional[str]) -> str:
        """Substitute into ``source``; with ``data=None`` only the syntax is checked."""

        output: List[str] = []
        index = 0
        length = len(source)
        line = 1
        while index < length:
            char = source[index]
            if char == "{":
                if index + 1 < length and source[index + 1] == "{":
                    output.append("{")
                    index += 2
                    continue
                close = source.find("}", index + 1)
                if close == -1:
                    raise TemplateParseError(
                        f"Unclosed variable substitution: {source[index:]}",
                        template_name=name,
                        line_number=line,
                    )
                variable = source[index + 1:close].strip()
                if not variable:
                    raise TemplateParseError(
                        "Empty variable name in template", template_name=name, line_number=line
                    )
                if data is not None:
                    try:
                        output.append(_format_value(_resolve_path(data, variable)))
                    except KeyError:
                        output.append("{" + variable + "}")
                index = close + 1
                continue
            if char == "}" and index + 1 < length and source[index + 1] == "}":
                output.append("}")
                index += 2
                continue
            if char == "\n":
                line += 1
            output.append(char)
            index += 1
        return "".join(output)


def create_engine(kind: str = "jinja", *, debug: bool = False) -> TemplateEngine:
    """Return an engine by name: ``"jinja"`` or ``"simple"``."""

    normalized = kind.strip().lower()
    if normalized in ("jinja", "jinja2", "minijinja"):
        return JinjaEngine(debug=debug)
    if normalized == "simple":
        return SimpleEngine()
    raise ValueError(f"unknown template engine '{kind}'")
