"""Lazy, multi-directory file registries keyed by relative name.

Every file is registered twice: under its relative path without extension
(``todos/list``) and with it (``todos/list.jinja``). When one directory holds
several files with the same stem, the extension listed first wins the bare
name while every full name stays reachable. A bare name found in two different
directories is reported as a collision.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

from ..errors import RegistryCollision, ResourceLoadError
from ..terminal import is_truthy_flag

logger = logging.getLogger(__name__)

T = TypeVar("T")


def debug_mode_enabled() -> bool:
    """Return True when ``STANDOUT_DEBUG`` requests re-reading files on every access."""

    return is_truthy_flag(os.environ.get("STANDOUT_DEBUG"))


def extension_priority(name: str, extensions: Sequence[str]) -> int:
    """Return the index of the first extension ``name`` ends with, or ``len(extensions)``."""

    for index, extension in enumerate(extensions):
        if name.endswith(extension):
            return index
    return len(extensions)


def strip_extension(name: str, extensions: Sequence[str]) -> str:
    for extension in extensions:
        if name.endswith(extension):
            return name[: -len(extension)]
    return name


@dataclass(frozen=True)
class LoadedFile:
    """A file discovered under a registered directory."""

    name: str
    name_with_ext: str
    path: Path
    source_dir: Path


@dataclass(frozen=True)
class FileEntry:
    """A registry entry backed by a file on disk."""

    path: Path
    source_dir: Path


@dataclass(frozen=True)
class EmbeddedEntry(Generic[T]):
    """A registry entry whose content was supplied in memory."""

    content: T
    nominal_path: Optional[str] = None


Entry = Union[FileEntry, EmbeddedEntry]


def walk_dir(root: Path, extensions: Sequence[str]) -> List[LoadedFile]:
    """
    Recursively list files under ``root`` whose names end with one of ``extensions``.

    Names use forward slashes regardless of platform.

    Raises:
        ResourceLoadError: If ``root`` cannot be listed.
    """
    try:
        resolved_root = root.resolve(strict=True)
    except OSError as exc:
        raise ResourceLoadError(root, str(exc)) from exc
    found: List[LoadedFile] = []

    def _on_error(exc: OSError) -> None:
        raise ResourceLoadError(Path(exc.filename or resolved_root), str(exc)) from exc

    for current, dirnames, filenames in os.walk(resolved_root, onerror=_on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            extension = next((ext for ext in extensions if filename.endswith(ext)), None)
            if extension is None:
                continue
            path = Path(current) / filename
            relative = path.relative_to(resolved_root).as_posix()
            found.append(
                LoadedFile(
                    name=relative[: -len(extension)],
                    name_with_ext=relative,
                    path=path,
                    source_dir=resolved_root,
                )
            )
    return found


def build_embedded_entries(
    entries: Iterable[Tuple[str, str]],
    extensions: Sequence[str],
    transform: Callable[[str], T],
) -> Dict[str, T]:
    """
    Register ``(relative path with extension, content)`` pairs under both names.

    The highest-priority extension claims the bare name when stems collide.
    """
    ordered = sorted(entries, key=lambda item: extension_priority(item[0], extensions))
    registry: Dict[str, T] = {}
    claimed: set[str] = set()
    for name_with_ext, content in ordered:
        value = transform(content)
        registry[name_with_ext] = value
        base = strip_extension(name_with_ext, extensions)
        if base not in claimed:
            claimed.add(base)
            registry[base] = value
    return registry


class FileRegistry(Generic[T]):
    """
    Name lookup over registered directories and embedded content.

    Directory registration only records the path; files are enumerated on the
    first lookup or an explicit :meth:`refresh`. File content is re-read on
    every :meth:`get` in debug mode and cached after the first read otherwise.

    Parameters:
        extensions (Sequence[str]): Recognized extensions, highest priority first.
        transform (Callable[[str], T]): Converts file text into the stored value.
        debug (bool | None): Re-read files on every access; defaults to ``STANDOUT_DEBUG``.
    """

    def __init__(
        self,
        extensions: Sequence[str],
        transform: Callable[[str], T],
        *,
        debug: Optional[bool] = None,
    ) -> None:
        self.extensions = tuple(extensions)
        self.transform = transform
        self.debug = debug_mode_enabled() if debug is None else debug
        self._dirs: List[Path] = []
        self._entries: Dict[str, Entry] = {}
        self._sources: Dict[str, Tuple[Path, Path]] = {}
        self._cache: Dict[Path, T] = {}
        self._initialized = False

    @property
    def dirs(self) -> List[Path]:
        return list(self._dirs)

    def add_dir(self, path: Union[str, Path]) -> None:
        """
        Register a directory; its files are discovered lazily.

        Raises:
            ResourceLoadError: If ``path`` is not an existing directory.
        """
        path = Path(path)
        if not path.is_dir():
            raise ResourceLoadError(path, "Directory not found")
        self._dirs.append(path)
        self._initialized = False
        logger.debug("Registered directory %s", path)

    def add_embedded(self, name: str, content: T, nominal_path: Optional[str] = None) -> None:
        self._entries[name] = EmbeddedEntry(content, nominal_path)

    def add_embedded_entries(self, entries: Iterable[Tuple[str, str]]) -> None:
        for name, value in build_embedded_entries(entries, self.extensions, self.transform).items():
            self._entries[name] = EmbeddedEntry(value, name)

    def refresh(self) -> None:
        """
        Re-enumerate every registered directory, keeping embedded entries.

        Raises:
            RegistryCollision: If a bare name exists in two directories.
            ResourceLoadError: If a directory cannot be walked.
        """
        discovered: List[LoadedFile] = []
        for directory in self._dirs:
            discovered.extend(walk_dir(directory, self.extensions))
        discovered.sort(key=lambda item: extension_priority(item.name_with_ext, self.extensions))

        self._entries = {
            name: entry for name, entry in self._entries.items() if isinstance(entry, EmbeddedEntry)
        }
        self._sources = {}
        self._cache = {}
        for loaded in discovered:
            entry = FileEntry(loaded.path, loaded.source_dir)
            existing = self._sources.get(loaded.name)
            if existing is not None:
                existing_path, existing_dir = existing
                if existing_dir != loaded.source_dir:
                    raise RegistryCollision(
                        loaded.name, existing_path, existing_dir, loaded.path, loaded.source_dir
                    )
                self._entries.setdefault(loaded.name_with_ext, entry)
                continue
            self._sources[loaded.name] = (loaded.path, loaded.source_dir)
            self._entries.setdefault(loaded.name, entry)
            self._entries.setdefault(loaded.name_with_ext, entry)
        self._initialized = True
        logger.debug("Indexed %d files from %d directories", len(discovered), len(self._dirs))

    def _ensure_initialized(self) -> None:
        if not self._initialized and self._dirs:
            self.refresh()

    def get_entry(self, name: str) -> Optional[Entry]:
        self._ensure_initialized()
        return self._entries.get(name)

    def read(self, entry: FileEntry) -> T:
        """Return the transformed content of a file entry, honouring the debug policy."""

        if not self.debug and entry.path in self._cache:
            return self._cache[entry.path]
        try:
            text = entry.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ResourceLoadError(entry.path, str(exc)) from exc
        value = self.transform(text)
        if not self.debug:
            self._cache[entry.path] = value
        return value

    def get(self, name: str) -> Optional[T]:
        entry = self.get_entry(name)
        if entry is None:
            return None
        if isinstance(entry, EmbeddedEntry):
            return entry.content
        return self.read(entry)

    def names(self) -> List[str]:
        self._ensure_initialized()
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        self._ensure_initialized()
        return name in self._entries

    def __len__(self) -> int:
        self._ensure_initialized()
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._sources.clear()
        self._cache.clear()
        self._initialized = False
