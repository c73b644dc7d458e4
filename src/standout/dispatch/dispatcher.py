"""Route command paths to handlers and run their output through the renderer."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..errors import DispatchError, HookError
from ..output import OutputDestination, OutputMode
from ..template.renderer import Renderer
from ..template.serialize import serialize, to_plain
from .handler import (
    Binary,
    BinaryOutput,
    CommandContext,
    Render,
    RenderedOutput,
    RunResult,
    SilentOutput,
    TextOutput,
    as_output,
    handler_callable,
)
from .hooks import Hooks
from .paths import path_to_string, string_to_path, template_name_for

logger = logging.getLogger(__name__)

CommandPath = Union[str, Sequence[str]]


def _normalize_path(path: CommandPath) -> List[str]:
    if isinstance(path, str):
        return string_to_path(path)
    return list(path)


@dataclass
class Recipe:
    """
    A handler bound to a command path with its template and hooks.

    ``template`` names a registered template; it defaults to the command
    path with dots replaced by slashes (``config.get`` -> ``config/get``).
    ``source`` is an inline template used instead of a registered one. When
    neither resolves, the data is rendered as JSON.
    """

    handler: Any
    template: Optional[str] = None
    source: Optional[str] = None
    hooks: Hooks = field(default_factory=Hooks)

    def template_name(self, path: Sequence[str]) -> str:
        return self.template or template_name_for(path)


class Dispatcher:
    """
    Routing table from dotted command paths to :class:`Recipe` objects.

    A dispatch runs pre-dispatch hooks, the handler, post-dispatch hooks on
    the handler's data, the renderer, then post-output hooks. ``Silent``
    results skip rendering and ``Binary`` results pass through unchanged;
    hooks run either way.
    """

    def __init__(
        self,
        renderer: Optional[Renderer] = None,
        *,
        default_command: Optional[str] = None,
        app_state: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.renderer = renderer if renderer is not None else Renderer()
        self.default_command = default_command
        self.app_state: Dict[str, Any] = dict(app_state or {})
        self._recipes: Dict[str, Recipe] = {}

    def add(
        self,
        path: CommandPath,
        handler: Any,
        *,
        template: Optional[str] = None,
        source: Optional[str] = None,
        hooks: Optional[Hooks] = None,
    ) -> Recipe:
        """
        Register ``handler`` under ``path``.

        Raises:
            DispatchError: If ``path`` is already registered.
        """
        key = path_to_string(_normalize_path(path))
        if key in self._recipes:
            raise DispatchError(f"duplicate command path '{key}'")
        handler_callable(handler)
        recipe = Recipe(handler, template=template, source=source, hooks=hooks or Hooks())
        self._recipes[key] = recipe
        logger.debug("Registered command %s", key)
        return recipe

    def command(
        self,
        path: CommandPath,
        *,
        template: Optional[str] = None,
        source: Optional[str] = None,
        hooks: Optional[Hooks] = None,
    ) -> Any:
        """Decorator form of :meth:`add`."""

        def decorator(handler: Any) -> Any:
            self.add(path, handler, template=template, source=source, hooks=hooks)
            return handler

        return decorator

    def recipe(self, path: CommandPath) -> Optional[Recipe]:
        return self._recipes.get(path_to_string(_normalize_path(path)))

    def paths(self) -> List[str]:
        return sorted(self._recipes)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, list, tuple)):
            return False
        return path_to_string(_normalize_path(path)) in self._recipes

    # --- execution -----------------------------------------------------------

    def _render(self, recipe: Recipe, path: Sequence[str], data: Any, mode: OutputMode) -> str:
        if mode.is_structured:
            return serialize(data, mode)
        if recipe.source is not None:
            return self.renderer.render_string(recipe.source, data, mode)
        name = recipe.template_name(path)
        if self.renderer.has_template(name):
            return self.renderer.render_with_mode(name, data, mode)
        logger.debug("No template %s for %s; rendering as JSON", name, path_to_string(path))
        return serialize(data, OutputMode.JSON)

    def _invoke(self, recipe: Recipe, key: str, args: Mapping[str, Any], ctx: CommandContext) -> Any:
        handle = handler_callable(recipe.handler)
        try:
            return handle(args, ctx)
        except (DispatchError, HookError):
            raise
        except Exception as exc:
            raise DispatchError(f"handler for '{key}' failed: {exc}") from exc

    def dispatch(
        self,
        path: CommandPath,
        args: Optional[Mapping[str, Any]] = None,
        *,
        output_mode: Union[OutputMode, str, None] = None,
    ) -> RunResult:
        """
        Run the recipe for ``path`` and return its rendered result.

        An empty path falls back to ``default_command`` when one is set.

        Raises:
            HookError: When a hook aborts the invocation.
            DispatchError: When the handler fails.
            StandoutError: Rendering failures from the renderer.
        """
        segments = _normalize_path(path)
        if not segments and self.default_command:
            segments = string_to_path(self.default_command)
        key = path_to_string(segments)
        arguments: Mapping[str, Any] = dict(args or {})
        recipe = self._recipes.get(key)
        if recipe is None:
            logger.debug("No command registered for '%s'", key)
            return RunResult.no_match(arguments)

        mode = self.renderer.mode if output_mode is None else OutputMode.parse(output_mode)
        ctx = CommandContext(output_mode=mode, command_path=segments, app_state=self.app_state)
        recipe.hooks.run_pre_dispatch(arguments, ctx)

        result = as_output(self._invoke(recipe, key, arguments, ctx))
        rendered: RenderedOutput
        if isinstance(result, Render):
            data = recipe.hooks.run_post_dispatch(arguments, ctx, to_plain(result.data))
            rendered = TextOutput(self._render(recipe, segments, data, mode))
        elif isinstance(result, Binary):
            rendered = BinaryOutput(result.data, result.filename)
        else:
            rendered = SilentOutput()

        rendered = recipe.hooks.run_post_output(arguments, ctx, rendered)
        if isinstance(rendered, TextOutput):
            return RunResult.handled(rendered.text)
        if isinstance(rendered, BinaryOutput):
            return RunResult.binary(rendered.data, rendered.filename)
        return RunResult.silent()

    def run(
        self,
        path: CommandPath,
        args: Optional[Mapping[str, Any]] = None,
        *,
        output_mode: Union[OutputMode, str, None] = None,
        destination: Optional[OutputDestination] = None,
    ) -> RunResult:
        """
        Dispatch and write the result.

        Text goes to ``destination`` (stdout by default). Binary output goes
        to ``destination`` when it is a file, otherwise to the handler's
        filename.
        """
        result = self.dispatch(path, args, output_mode=output_mode)
        target = destination or OutputDestination.stdout()
        if result.is_handled and result.output is not None:
            target.write_text(result.output)
        elif result.is_binary and result.data is not None:
            if target.path is None:
                target = OutputDestination.file(result.filename or "output.bin")
            target.write_binary(result.data)
        return result
