"""Handler contract: what a command receives and what it may return."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..output import OutputMode


@dataclass(frozen=True)
class CommandContext:
    """Per-invocation facts passed to handlers and hooks."""

    output_mode: OutputMode = OutputMode.AUTO
    command_path: List[str] = field(default_factory=list)
    app_state: Dict[str, Any] = field(default_factory=dict)

    def state(self, key: str, default: Any = None) -> Any:
        return self.app_state.get(key, default)


# --- handler results ---------------------------------------------------------


@dataclass(frozen=True)
class Render:
    """Data to be rendered through the command's template."""

    data: Any


@dataclass(frozen=True)
class Binary:
    """Raw bytes written as is; rendering is skipped."""

    data: bytes
    filename: str


@dataclass(frozen=True)
class Silent:
    """Nothing is rendered or written."""


Output = Union[Render, Binary, Silent]


def as_output(value: Any) -> Output:
    """Wrap a bare handler return value in :class:`Render`; ``None`` becomes :class:`Silent`."""

    if isinstance(value, (Render, Binary, Silent)):
        return value
    if value is None:
        return Silent()
    return Render(value)


# --- rendered results --------------------------------------------------------


@dataclass(frozen=True)
class TextOutput:
    text: str


@dataclass(frozen=True)
class BinaryOutput:
    data: bytes
    filename: str


@dataclass(frozen=True)
class SilentOutput:
    pass


RenderedOutput = Union[TextOutput, BinaryOutput, SilentOutput]


class RunStatus(str, Enum):
    HANDLED = "handled"
    BINARY = "binary"
    SILENT = "silent"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class RunResult:
    """Outcome of one dispatch; ``args`` is kept for ``NO_MATCH`` so callers can fall back."""

    status: RunStatus
    output: Optional[str] = None
    data: Optional[bytes] = None
    filename: Optional[str] = None
    args: Optional[Mapping[str, Any]] = None

    @classmethod
    def handled(cls, output: str) -> "RunResult":
        return cls(RunStatus.HANDLED, output=output)

    @classmethod
    def binary(cls, data: bytes, filename: str) -> "RunResult":
        return cls(RunStatus.BINARY, data=data, filename=filename)

    @classmethod
    def silent(cls) -> "RunResult":
        return cls(RunStatus.SILENT)

    @classmethod
    def no_match(cls, args: Optional[Mapping[str, Any]] = None) -> "RunResult":
        return cls(RunStatus.NO_MATCH, args=args)

    @property
    def is_handled(self) -> bool:
        return self.status is RunStatus.HANDLED

    @property
    def is_binary(self) -> bool:
        return self.status is RunStatus.BINARY

    @property
    def is_silent(self) -> bool:
        return self.status is RunStatus.SILENT

    @property
    def is_no_match(self) -> bool:
        return self.status is RunStatus.NO_MATCH


HandlerFn = Callable[[Mapping[str, Any], CommandContext], Any]


def handler_callable(handler: Any) -> HandlerFn:
    """
    Return the callable behind ``handler``.

    Handlers are plain callables ``(args, ctx)`` or objects with a
    ``handle(args, ctx)`` method. Objects may keep mutable state between
    calls; plain callables shared across threads must not.
    """
    handle = getattr(handler, "handle", None)
    if callable(handle):
        return handle
    if callable(handler):
        return handler
    raise TypeError(f"{type(handler).__name__} is neither callable nor has a handle() method")
