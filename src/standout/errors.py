"""Exception hierarchy shared by every rendering component."""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Sequence


class StandoutError(Exception):
    """Base class for every error raised by the toolkit."""


# --- stylesheets -----------------------------------------------------------


class StylesheetError(StandoutError):
    """Raised when a stylesheet or one of its values cannot be parsed."""

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        self.message = message
        self.path = path
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message

    def with_path(self, path: Path) -> "StylesheetError":
        """Attach the source file so the message points at it."""

        self.path = path
        self.args = (str(self),)
        return self


class InvalidColor(StylesheetError):
    """A colour literal is malformed or out of range."""


class UnknownAttribute(StylesheetError):
    """A style mapping uses a key that is not a style attribute."""

    def __init__(self, attribute: str, *, style: Optional[str] = None, path: Optional[Path] = None) -> None:
        self.attribute = attribute
        self.style = style
        where = f" in style '{style}'" if style else ""
        super().__init__(f"unknown attribute '{attribute}'{where}", path=path)


class InvalidShorthand(StylesheetError):
    """A shorthand string is empty, names two colours, or has an unknown token."""


class InvalidDefinition(StylesheetError):
    """A style definition has the wrong shape."""


class StylesheetParseError(StylesheetError):
    """The YAML or CSS document is not well formed."""


class StylesheetLoadError(StylesheetError):
    """A stylesheet file could not be read."""


class StyleValidationError(StandoutError):
    """Raised when alias chains in a style set cannot be resolved."""


class UnresolvedAlias(StyleValidationError):
    def __init__(self, source: str, target: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"style '{source}' aliases non-existent style '{target}'")


class CycleDetected(StyleValidationError):
    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        super().__init__(f"cycle detected in style aliases: {' -> '.join(self.path)}")


# --- registries --------------------------------------------------------------


class RegistryError(StandoutError):
    """Raised by template and stylesheet registries."""


class TemplateNotFound(RegistryError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Template not found: "{name}"')


class ThemeNotFound(RegistryError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Theme not found: "{name}"')


class RegistryCollision(RegistryError):
    """The same bare name was found in two registered directories."""

    def __init__(
        self,
        name: str,
        existing_path: Path,
        existing_dir: Path,
        conflicting_path: Path,
        conflicting_dir: Path,
    ) -> None:
        self.name = name
        self.existing_path = existing_path
        self.existing_dir = existing_dir
        self.conflicting_path = conflicting_path
        self.conflicting_dir = conflicting_dir
        super().__init__(
            f'Collision detected for "{name}":\n'
            f"  - {existing_path} (from {existing_dir})\n"
            f"  - {conflicting_path} (from {conflicting_dir})"
        )


class ResourceLoadError(RegistryError):
    """A registered file or directory could not be read."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f'Failed to read "{path}": {message}')


# --- templates ---------------------------------------------------------------


class TemplateError(StandoutError):
    """Base class for template compilation and expansion failures."""

    def __init__(
        self,
        message: str,
        *,
        template_name: Optional[str] = None,
        line_number: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        self.message = message
        self.template_name = template_name
        self.line_number = line_number
        self.original_error = original_error
        super().__init__(self._format())

    def _format(self) -> str:
        location = ""
        if self.template_name:
            location = f" in template '{self.template_name}'"
            if self.line_number is not None:
                location += f" at line {self.line_number}"
        return f"{self.message}{location}"


class TemplateParseError(TemplateError):
    """The template source does not compile."""


class RenderError(TemplateError):
    """Expansion failed (undefined variable, filter error, bad argument)."""


class IncludeRecursionError(TemplateError):
    """An include directive recursed back into a template being rendered."""


class TagError(StandoutError):
    """Raised in strict mode when a style tag names an unknown style."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"unknown style tag '[{tag}]'")


class LayoutError(StandoutError):
    """A column specification cannot be laid out."""


class QueryCompileError(StandoutError):
    """A query clause could not be compiled (invalid regular expression)."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"invalid regex pattern {pattern!r}: {reason}")


# --- dispatch ----------------------------------------------------------------


class HookPhase(str, Enum):
    """Point in the dispatch pipeline at which a hook runs."""

    PRE_DISPATCH = "pre-dispatch"
    POST_DISPATCH = "post-dispatch"
    POST_OUTPUT = "post-output"


class HookError(StandoutError):
    """A hook refused to let the invocation proceed."""

    def __init__(
        self,
        message: str,
        phase: HookPhase,
        *,
        source: Optional[BaseException] = None,
    ) -> None:
        self.message = message
        self.phase = phase
        self.source = source
        super().__init__(f"hook error ({phase.value}): {message}")

    @classmethod
    def pre_dispatch(cls, message: str, *, source: Optional[BaseException] = None) -> "HookError":
        return cls(message, HookPhase.PRE_DISPATCH, source=source)

    @classmethod
    def post_dispatch(cls, message: str, *, source: Optional[BaseException] = None) -> "HookError":
        return cls(message, HookPhase.POST_DISPATCH, source=source)

    @classmethod
    def post_output(cls, message: str, *, source: Optional[BaseException] = None) -> "HookError":
        return cls(message, HookPhase.POST_OUTPUT, source=source)


class DispatchError(StandoutError):
    """A command path has no recipe, or a handler failed."""
