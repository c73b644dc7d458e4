"""Resolved style table used by the style-tag pass."""
from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Optional

from ..errors import CycleDetected, UnresolvedAlias
from ..terminal import ANSI_RESET, ColorCapability
from .attributes import StyleAttributes
from .colorspace import ThemePalette


class Styles:
    """
    Concrete styles plus aliases for one colour mode.

    Aliases are stored by name and resolved on lookup, so a theme only needs
    to materialize each concrete style once. :meth:`validate` walks every alias
    chain up front; :meth:`resolve` repeats the walk lazily and raises the same
    errors for registries that were never validated.
    """

    def __init__(
        self,
        styles: Optional[Mapping[str, StyleAttributes]] = None,
        aliases: Optional[Mapping[str, str]] = None,
        *,
        palette: Optional[ThemePalette] = None,
        capability: ColorCapability = ColorCapability.ANSI256,
    ) -> None:
        self._styles: Dict[str, StyleAttributes] = dict(styles or {})
        self._aliases: Dict[str, str] = dict(aliases or {})
        self.palette = palette
        self.capability = capability

    def add(self, name: str, attributes: StyleAttributes) -> "Styles":
        self._aliases.pop(name, None)
        self._styles[name] = attributes
        return self

    def add_alias(self, name: str, target: str) -> "Styles":
        self._styles.pop(name, None)
        self._aliases[name] = target
        return self

    def __contains__(self, name: object) -> bool:
        return name in self._styles or name in self._aliases

    def __len__(self) -> int:
        return len(self._styles) + len(self._aliases)

    def __iter__(self) -> Iterator[str]:
        yield from self._styles
        yield from self._aliases

    def names(self) -> List[str]:
        return sorted(self)

    @property
    def aliases(self) -> Dict[str, str]:
        return dict(self._aliases)

    def _walk(self, name: str) -> StyleAttributes:
        path = [name]
        current = name
        while current in self._aliases:
            target = self._aliases[current]
            if target in path:
                raise CycleDetected(path + [target])
            if target not in self._styles and target not in self._aliases:
                raise UnresolvedAlias(current, target)
            path.append(target)
            current = target
        return self._styles[current]

    def validate(self) -> None:
        """
        Check that every alias chain ends at a concrete style.

        Raises:
            UnresolvedAlias: When a chain points at a missing style.
            CycleDetected: When a chain revisits one of its own names.
        """
        for name in self._aliases:
            self._walk(name)

    def resolve(self, name: str) -> Optional[StyleAttributes]:
        """Return the attributes for ``name``, following aliases; ``None`` if unknown."""

        if name not in self:
            return None
        return self._walk(name)

    def sgr(self, name: str) -> str:
        attributes = self.resolve(name)
        if attributes is None:
            return ""
        return attributes.sgr(self.palette, self.capability)

    def apply(self, name: str, text: str) -> str:
        """Wrap ``text`` in the escape for ``name`` and a reset."""

        prefix = self.sgr(name)
        if not prefix or not text:
            return text
        return f"{prefix}{text}{ANSI_RESET}"
