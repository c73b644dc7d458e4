"""Template lookup across inline, directory, embedded and framework sources."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..errors import TemplateNotFound
from .files import EmbeddedEntry, FileEntry, FileRegistry, strip_extension

logger = logging.getLogger(__name__)

TEMPLATE_EXTENSIONS = (".jinja", ".jinja2", ".j2", ".txt")


@dataclass(frozen=True)
class ResolvedTemplate:
    """Template content plus where it came from.

    ``path`` is set for file-backed templates only; the renderer uses it to
    decide whether a compiled template may be reused.
    """

    name: str
    content: str
    path: Optional[Path] = None

    @property
    def is_file(self) -> bool:
        return self.path is not None


def _identity(text: str) -> str:
    return text


class TemplateRegistry:
    """
    Resolves template names in priority order.

    1. Inline templates added with :meth:`add_inline`.
    2. Files under directories added with :meth:`add_dir`, and embedded
       ``(path, content)`` entries added with :meth:`add_embedded_entries`.
    3. Framework templates added with :meth:`add_framework`, which
       applications can override by registering the same name.

    Names resolve with or without a recognized extension.
    """

    def __init__(self, *, debug: Optional[bool] = None) -> None:
        self._inline: Dict[str, str] = {}
        self._framework: Dict[str, str] = {}
        self._files: FileRegistry[str] = FileRegistry(TEMPLATE_EXTENSIONS, _identity, debug=debug)

    @property
    def debug(self) -> bool:
        return self._files.debug

    @classmethod
    def from_embedded_entries(cls, entries: Iterable[Tuple[str, str]]) -> "TemplateRegistry":
        registry = cls()
        registry.add_embedded_entries(entries)
        return registry

    def add_inline(self, name: str, content: str) -> None:
        self._inline[name] = content

    def add_dir(self, path: Union[str, Path]) -> None:
        self._files.add_dir(path)

    def add_embedded(self, templates: Mapping[str, str]) -> None:
        """Register already-named templates, e.g. loaded by an application at startup."""

        for name, content in templates.items():
            self._files.add_embedded(name, content, name)

    def add_embedded_entries(self, entries: Iterable[Tuple[str, str]]) -> None:
        """Register ``(relative path with extension, content)`` pairs under both names."""

        self._files.add_embedded_entries(entries)

    def add_framework(self, name: str, content: str) -> None:
        base = strip_extension(name, TEMPLATE_EXTENSIONS)
        self._framework[name] = content
        self._framework.setdefault(base, content)

    def add_framework_entries(self, entries: Iterable[Tuple[str, str]]) -> None:
        for name, content in entries:
            self.add_framework(name, content)

    def clear_framework(self) -> None:
        self._framework.clear()

    def resolve(self, name: str) -> ResolvedTemplate:
        """
        Return the template registered under ``name``.

        Raises:
            TemplateNotFound: If no source provides ``name``.
            ResourceLoadError: If a file-backed template cannot be read.
        """
        if name in self._inline:
            return ResolvedTemplate(name, self._inline[name])
        entry = self._files.get_entry(name)
        if isinstance(entry, EmbeddedEntry):
            return ResolvedTemplate(name, entry.content)
        if isinstance(entry, FileEntry):
            return ResolvedTemplate(name, self._files.read(entry), entry.path)
        if name in self._framework:
            return ResolvedTemplate(name, self._framework[name])
        raise TemplateNotFound(name)

    def get_content(self, name: str) -> str:
        return self.resolve(name).content

    def get(self, name: str) -> Optional[str]:
        try:
            return self.resolve(name).content
        except TemplateNotFound:
            return None

    def __contains__(self, name: object) -> bool:
        return name in self._inline or name in self._files or name in self._framework

    def refresh(self) -> None:
        self._files.refresh()

    def names(self) -> List[str]:
        return sorted(set(self._inline) | set(self._files.names()) | set(self._framework))

    def __len__(self) -> int:
        return len(self.names())

    def clear(self) -> None:
        self._inline.clear()
        self._framework.clear()
        self._files.clear()
