"""Theme lookup across inline, directory and embedded stylesheets."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..errors import StylesheetError, ThemeNotFound
from ..theme.theme import Theme
from .files import EmbeddedEntry, FileEntry, FileRegistry, strip_extension

logger = logging.getLogger(__name__)

STYLESHEET_EXTENSIONS = (".yaml", ".yml")


def _identity(text: str) -> str:
    return text


class StylesheetRegistry:
    """
    Resolves theme names to parsed :class:`Theme` objects.

    Inline themes win over files; files and embedded stylesheets follow the
    same naming rules as templates. Parsed themes are cached per file unless
    the registry is in debug mode.
    """

    def __init__(self, *, debug: Optional[bool] = None) -> None:
        self._inline: Dict[str, Theme] = {}
        self._files: FileRegistry[str] = FileRegistry(STYLESHEET_EXTENSIONS, _identity, debug=debug)
        self._parsed: Dict[str, Theme] = {}

    @property
    def debug(self) -> bool:
        return self._files.debug

    @classmethod
    def from_embedded_entries(cls, entries: Iterable[Tuple[str, str]]) -> "StylesheetRegistry":
        """
        Build a registry from ``(relative path with extension, YAML)`` pairs.

        Raises:
            StylesheetError: If any entry fails to parse.
        """
        registry = cls()
        registry.add_embedded_entries(entries)
        return registry

    def add_inline(self, name: str, yaml_text: str) -> None:
        """
        Parse and register a YAML stylesheet under ``name``.

        Raises:
            StylesheetError: If the stylesheet is invalid.
        """
        self._inline[name] = Theme.from_yaml(yaml_text, name=name)

    def add_theme(self, name: str, theme: Theme) -> None:
        self._inline[name] = theme

    def add_dir(self, path: Union[str, Path]) -> None:
        self._files.add_dir(path)
        self._parsed.clear()

    def add_embedded_entries(self, entries: Iterable[Tuple[str, str]]) -> None:
        materialized = list(entries)
        for name, text in materialized:
            # parse eagerly so broken embedded stylesheets fail at registration
            Theme.from_yaml(text, name=strip_extension(name, STYLESHEET_EXTENSIONS))
        self._files.add_embedded_entries(materialized)

    def _load(self, name: str, entry: Union[FileEntry, EmbeddedEntry]) -> Theme:
        stem = strip_extension(name, STYLESHEET_EXTENSIONS)
        if isinstance(entry, EmbeddedEntry):
            key = f"embedded:{entry.nominal_path or name}"
            if key not in self._parsed:
                self._parsed[key] = Theme.from_yaml(entry.content, name=stem)
            return self._parsed[key]
        key = str(entry.path)
        if not self.debug and key in self._parsed:
            return self._parsed[key]
        text = self._files.read(entry)
        try:
            theme = Theme.from_yaml(text, name=stem)
        except StylesheetError as exc:
            raise exc.with_path(entry.path)
        theme.source_path = entry.path
        if not self.debug:
            self._parsed[key] = theme
        return theme

    def get(self, name: str) -> Theme:
        """
        Return the theme registered under ``name``.

        Raises:
            ThemeNotFound: If no source provides ``name``.
            StylesheetError: If the stylesheet does not parse.
            ResourceLoadError: If the file cannot be read.
        """
        if name in self._inline:
            return self._inline[name]
        entry = self._files.get_entry(name)
        if entry is None:
            raise ThemeNotFound(name)
        return self._load(name, entry)

    def __contains__(self, name: object) -> bool:
        return name in self._inline or name in self._files

    def names(self) -> List[str]:
        return sorted(set(self._inline) | set(self._files.names()))

    def __len__(self) -> int:
        return len(self.names())

    def refresh(self) -> None:
        self._parsed.clear()
        self._files.refresh()

    def clear(self) -> None:
        self._inline.clear()
        self._parsed.clear()
        self._files.clear()
