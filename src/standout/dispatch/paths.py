"""Dotted command paths (``config.get``) and argument-list helpers."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import click


def path_to_string(path: Sequence[str]) -> str:
    return ".".join(path)


def string_to_path(text: str) -> List[str]:
    if not text:
        return []
    return text.split(".")


def template_name_for(path: Sequence[str]) -> str:
    """Conventional template name for a command path: ``config.get`` -> ``config/get``."""

    return "/".join(path)


def insert_default_command(args: Iterable[str], command: str) -> List[str]:
    """Insert ``command`` after the program name so a bare invocation runs it."""

    result = list(args)
    if result:
        result.insert(1, command)
    else:
        result.append(command)
    return result


def command_path_from_click(ctx: Optional[click.Context]) -> List[str]:
    """Subcommand names from the root group down to ``ctx``, excluding the program itself."""

    names: List[str] = []
    current = ctx
    while current is not None and current.parent is not None:
        if current.info_name:
            names.append(current.info_name)
        current = current.parent
    names.reverse()
    return names
