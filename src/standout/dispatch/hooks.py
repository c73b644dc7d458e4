"""Hooks run around a command's handler and renderer."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping

from ..errors import HookError, HookPhase
from .handler import CommandContext, RenderedOutput

logger = logging.getLogger(__name__)

PreDispatchHook = Callable[[Mapping[str, Any], CommandContext], None]
PostDispatchHook = Callable[[Mapping[str, Any], CommandContext, Any], Any]
PostOutputHook = Callable[[Mapping[str, Any], CommandContext, RenderedOutput], RenderedOutput]


def _hook_name(hook: Callable[..., Any]) -> str:
    return getattr(hook, "__qualname__", None) or getattr(hook, "__name__", None) or repr(hook)


class Hooks:
    """
    Ordered hook lists for the three dispatch phases.

    Pre-dispatch hooks validate and raise to abort. Post-dispatch hooks
    receive the handler's data as JSON-shaped values and return the
    (possibly transformed) data for the next hook. Post-output hooks receive
    and return the rendered output. Any exception other than
    :class:`HookError` is wrapped in one for the phase it came from; the
    first failure stops the chain and hooks are never retried.
    """

    def __init__(self) -> None:
        self._pre_dispatch: List[PreDispatchHook] = []
        self._post_dispatch: List[PostDispatchHook] = []
        self._post_output: List[PostOutputHook] = []

    def pre_dispatch(self, hook: PreDispatchHook) -> "Hooks":
        self._pre_dispatch.append(hook)
        return self

    def post_dispatch(self, hook: PostDispatchHook) -> "Hooks":
        self._post_dispatch.append(hook)
        return self

    def post_output(self, hook: PostOutputHook) -> "Hooks":
        self._post_output.append(hook)
        return self

    def is_empty(self) -> bool:
        return not (self._pre_dispatch or self._post_dispatch or self._post_output)

    def __len__(self) -> int:
        return len(self._pre_dispatch) + len(self._post_dispatch) + len(self._post_output)

    def extend(self, other: "Hooks") -> "Hooks":
        """Append ``other``'s hooks after this set's, phase by phase."""

        self._pre_dispatch.extend(other._pre_dispatch)
        self._post_dispatch.extend(other._post_dispatch)
        self._post_output.extend(other._post_output)
        return self

    @staticmethod
    def _call(phase: HookPhase, hook: Callable[..., Any], *args: Any) -> Any:
        logger.debug("Running %s hook %s", phase.value, _hook_name(hook))
        try:
            return hook(*args)
        except HookError as exc:
            logger.warning("%s hook %s failed: %s", phase.value, _hook_name(hook), exc.message)
            raise
        except Exception as exc:
            logger.warning("%s hook %s raised %s", phase.value, _hook_name(hook), exc)
            raise HookError(str(exc), phase, source=exc) from exc

    def run_pre_dispatch(self, args: Mapping[str, Any], ctx: CommandContext) -> None:
        for hook in self._pre_dispatch:
            self._call(HookPhase.PRE_DISPATCH, hook, args, ctx)

    def run_post_dispatch(self, args: Mapping[str, Any], ctx: CommandContext, data: Any) -> Any:
        current = data
        for hook in self._post_dispatch:
            current = self._call(HookPhase.POST_DISPATCH, hook, args, ctx, current)
        return current

    def run_post_output(
        self,
        args: Mapping[str, Any],
        ctx: CommandContext,
        output: RenderedOutput,
    ) -> RenderedOutput:
        current = output
        for hook in self._post_output:
            current = self._call(HookPhase.POST_OUTPUT, hook, args, ctx, current)
        return current

