"""Output modes and where rendered output is written."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Union

from .errors import DispatchError
from .tags import TagTransform
from .terminal import color_disabled, stdout_is_terminal

logger = logging.getLogger(__name__)


class TextMode(str, Enum):
    """How text output treats style tags."""

    STYLED = "styled"
    PLAIN = "plain"
    DEBUG = "debug"

    @property
    def tag_transform(self) -> TagTransform:
        if self is TextMode.STYLED:
            return TagTransform.APPLY
        if self is TextMode.DEBUG:
            return TagTransform.KEEP
        return TagTransform.REMOVE


class OutputMode(str, Enum):
    """Target rendering profile of one invocation."""

    AUTO = "auto"
    TERM = "term"
    TEXT = "text"
    TERM_DEBUG = "term-debug"
    JSON = "json"
    YAML = "yaml"
    XML = "xml"
    CSV = "csv"

    @classmethod
    def parse(cls, raw: Union[str, "OutputMode", None]) -> "OutputMode":
        """
        Parse a mode name, accepting ``_`` for ``-``.

        Raises:
            ValueError: For names that are not output modes.
        """
        if raw is None:
            return cls.AUTO
        if isinstance(raw, OutputMode):
            return raw
        normalized = str(raw).strip().lower().replace("_", "-")
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(mode.value for mode in cls)
            raise ValueError(f"unknown output mode '{raw}' (expected one of: {valid})") from None

    @property
    def is_structured(self) -> bool:
        return self in (OutputMode.JSON, OutputMode.YAML, OutputMode.XML, OutputMode.CSV)

    @property
    def is_debug(self) -> bool:
        return self is OutputMode.TERM_DEBUG

    @property
    def is_text(self) -> bool:
        return not self.is_structured

    def resolve_auto(
        self,
        *,
        is_terminal: Optional[bool] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "OutputMode":
        """Return ``TERM`` or ``TEXT`` for ``AUTO``; any other mode is returned as is."""

        if self is not OutputMode.AUTO:
            return self
        terminal = stdout_is_terminal() if is_terminal is None else is_terminal
        if terminal and not color_disabled(environ):
            return OutputMode.TERM
        return OutputMode.TEXT

    def text_mode(self, *, is_terminal: Optional[bool] = None) -> Optional[TextMode]:
        """Return the text treatment for this mode, or ``None`` for structured modes."""

        resolved = self.resolve_auto(is_terminal=is_terminal)
        if resolved is OutputMode.TERM:
            return TextMode.STYLED
        if resolved is OutputMode.TEXT:
            return TextMode.PLAIN
        if resolved is OutputMode.TERM_DEBUG:
            return TextMode.DEBUG
        return None

    def tag_transform(self, *, is_terminal: Optional[bool] = None) -> TagTransform:
        text_mode = self.text_mode(is_terminal=is_terminal)
        if text_mode is None:
            return TagTransform.REMOVE
        return text_mode.tag_transform


@dataclass(frozen=True)
class OutputDestination:
    """Standard output, or a file whose parent directory must already exist."""

    path: Optional[Path] = None

    @classmethod
    def stdout(cls) -> "OutputDestination":
        return cls(None)

    @classmethod
    def file(cls, path: Union[str, Path]) -> "OutputDestination":
        return cls(Path(path))

    def _check_parent(self) -> Path:
        if self.path is None:
            raise DispatchError("standard output has no parent directory to check")
        parent = self.path.parent
        if str(parent) and not parent.exists():
            raise DispatchError(f"Parent directory does not exist: {parent}")
        return self.path

    def write_text(self, content: str) -> None:
        """
        Write ``content``; stdout gets a trailing newline like ``print``.

        Raises:
            DispatchError: When the target directory is missing or the write fails.
        """
        if self.path is None:
            sys.stdout.write(content)
            if not content.endswith("\n"):
                sys.stdout.write("\n")
            sys.stdout.flush()
            return
        path = self._check_parent()
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise DispatchError(f"Failed to write {path}: {exc}") from exc
        logger.debug("Wrote %d characters to %s", len(content), path)

    def write_binary(self, content: bytes) -> None:
        if self.path is None:
            sys.stdout.buffer.write(content)
            sys.stdout.flush()
            return
        path = self._check_parent()
        try:
            path.write_bytes(content)
        except OSError as exc:
            raise DispatchError(f"Failed to write {path}: {exc}") from exc
        logger.debug("Wrote %d bytes to %s", len(content), path)
