"""Glue between parsed command arguments, handlers and the renderer."""

from .dispatcher import Dispatcher, Recipe
from .handler import (
    Binary,
    BinaryOutput,
    CommandContext,
    Output,
    Render,
    RenderedOutput,
    RunResult,
    RunStatus,
    Silent,
    SilentOutput,
    TextOutput,
    as_output,
    handler_callable,
)
from .hooks import Hooks
from .paths import (
    command_path_from_click,
    insert_default_command,
    path_to_string,
    string_to_path,
    template_name_for,
)

__all__ = [
    "Binary",
    "BinaryOutput",
    "CommandContext",
    "Dispatcher",
    "Hooks",
    "Output",
    "Recipe",
    "Render",
    "RenderedOutput",
    "RunResult",
    "RunStatus",
    "Silent",
    "SilentOutput",
    "TextOutput",
    "as_output",
    "command_path_from_click",
    "handler_callable",
    "insert_default_command",
    "path_to_string",
    "string_to_path",
    "template_name_for",
]
