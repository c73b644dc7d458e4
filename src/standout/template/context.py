"""Extra template context computed at render time."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..output import OutputMode
from ..theme.theme import Theme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderContext:
    """What context providers may look at; rebuilt for every render."""

    output_mode: OutputMode = OutputMode.AUTO
    terminal_width: Optional[int] = None
    theme: Optional[Theme] = None
    data: Mapping[str, Any] = field(default_factory=dict)
    extras: Mapping[str, Any] = field(default_factory=dict)

    def get_extra(self, key: str, default: Any = None) -> Any:
        return self.extras.get(key, default)


ContextProvider = Callable[[RenderContext], Any]


@dataclass(frozen=True)
class _Static:
    value: Any


@dataclass(frozen=True)
class _Dynamic:
    provider: ContextProvider


class ContextRegistry:
    """
    Named context entries merged under handler data.

    An entry is a fixed value or a provider called once per render with the
    :class:`RenderContext`. Handler data wins when a key appears in both.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Union[_Static, _Dynamic]] = {}

    def add_static(self, name: str, value: Any) -> "ContextRegistry":
        self._entries[name] = _Static(value)
        return self

    def add_provider(self, name: str, provider: ContextProvider) -> "ContextRegistry":
        self._entries[name] = _Dynamic(provider)
        return self

    def add(self, name: str, value: Any) -> "ContextRegistry":
        """Register ``value``; callables are treated as providers."""

        if callable(value):
            return self.add_provider(name, value)
        return self.add_static(name, value)

    def remove(self, name: str) -> None:
        self._entries.pop(name, None)

    def names(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def resolve(self, context: RenderContext) -> Dict[str, Any]:
        """Evaluate every entry once and return the flat context mapping."""

        resolved: Dict[str, Any] = {}
        for name, entry in self._entries.items():
            if isinstance(entry, _Static):
                resolved[name] = entry.value
            else:
                resolved[name] = entry.provider(context)
        if resolved:
            logger.debug("Resolved %d context entries", len(resolved))
        return resolved

    def merged_with(self, other: "ContextRegistry") -> "ContextRegistry":
        merged = ContextRegistry()
        merged._entries = {**self._entries, **other._entries}
        return merged


def merge_context(context: Mapping[str, Any], data: Any) -> Dict[str, Any]:
    """
    Combine resolved context with handler data; data keys win.

    Non-mapping data is exposed as ``data`` so templates can still reach it.
    """
    combined = dict(context)
    if isinstance(data, Mapping):
        combined.update(data)
    elif data is not None:
        combined["data"] = data
    return combined
