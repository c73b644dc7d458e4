"""Icon glyphs with classic and Nerd Font renditions."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..errors import InvalidDefinition
from ..terminal import is_truthy_flag


class IconMode(str, Enum):
    """Which glyph set to use for icons."""

    AUTO = "auto"
    CLASSIC = "classic"
    NERDFONT = "nerdfont"


def detect_icon_mode(environ: Optional[Mapping[str, str]] = None) -> IconMode:
    """Return ``NERDFONT`` when ``NERD_FONT`` is truthy, ``CLASSIC`` otherwise."""

    env = os.environ if environ is None else environ
    return IconMode.NERDFONT if is_truthy_flag(env.get("NERD_FONT")) else IconMode.CLASSIC


@dataclass(frozen=True)
class IconDefinition:
    classic: str
    nerdfont: Optional[str] = None

    def resolve(self, mode: IconMode) -> str:
        if mode is IconMode.NERDFONT and self.nerdfont is not None:
            return self.nerdfont
        return self.classic


@dataclass
class IconSet:
    icons: Dict[str, IconDefinition] = field(default_factory=dict)

    def add(self, name: str, definition: IconDefinition) -> "IconSet":
        self.icons[name] = definition
        return self

    def __len__(self) -> int:
        return len(self.icons)

    def resolve(self, mode: IconMode = IconMode.AUTO) -> Dict[str, str]:
        if mode is IconMode.AUTO:
            mode = detect_icon_mode()
        return {name: icon.resolve(mode) for name, icon in self.icons.items()}

    def merge(self, other: "IconSet") -> "IconSet":
        merged = dict(self.icons)
        merged.update(other.icons)
        return IconSet(merged)

    @classmethod
    def from_mapping(cls, raw: Any) -> "IconSet":
        """
        Parse the ``icons:`` section of a YAML theme.

        Each entry is either a string or a ``{classic, nerdfont}`` mapping.

        Raises:
            InvalidDefinition: When the section or one of its entries has the wrong shape.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise InvalidDefinition("'icons' must be a mapping")
        icons: Dict[str, IconDefinition] = {}
        for name, value in raw.items():
            name = str(name)
            if isinstance(value, str):
                icons[name] = IconDefinition(value)
                continue
            if isinstance(value, Mapping):
                classic = value.get("classic")
                if not isinstance(classic, str):
                    raise InvalidDefinition(f"icon '{name}' needs a string 'classic' glyph")
                nerdfont = value.get("nerdfont")
                if nerdfont is not None and not isinstance(nerdfont, str):
                    raise InvalidDefinition(f"icon '{name}' has a non-string 'nerdfont' glyph")
                unknown = set(map(str, value)) - {"classic", "nerdfont"}
                if unknown:
                    raise InvalidDefinition(f"icon '{name}' has unknown keys: {', '.join(sorted(unknown))}")
                icons[name] = IconDefinition(classic, nerdfont)
                continue
            raise InvalidDefinition(f"icon '{name}' must be a string or a mapping")
        return cls(icons)
