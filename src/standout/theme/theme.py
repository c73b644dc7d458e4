"""Themes: named style collections with light and dark variants."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from ..errors import StylesheetError, StylesheetLoadError
from ..style.attributes import StyleAttributes
from ..style.colorspace import ThemePalette
from ..style.css import parse_css
from ..style.definition import (
    AliasDefinition,
    ThemeVariants,
    load_yaml_document,
    parse_definition,
    parse_stylesheet,
)
from ..style.registry import Styles
from ..terminal import ColorCapability, background_is_light
from .icons import IconDefinition, IconMode, IconSet

logger = logging.getLogger(__name__)

CSS_EXTENSIONS = (".css",)


class ColorMode(str, Enum):
    """Terminal background brightness used to pick adaptive variants."""

    LIGHT = "light"
    DARK = "dark"


def detect_color_mode(environ: Optional[Mapping[str, str]] = None) -> ColorMode:
    """Guess the colour mode from the environment, defaulting to dark."""

    env = os.environ if environ is None else environ
    forced = env.get("STANDOUT_COLOR_MODE", "").strip().lower()
    if forced in (ColorMode.LIGHT.value, ColorMode.DARK.value):
        return ColorMode(forced)
    return ColorMode.LIGHT if background_is_light(env) else ColorMode.DARK


@dataclass
class Theme:
    """
    A named collection of styles.

    ``base`` holds every concrete style. ``light`` and ``dark`` hold the already
    merged variants of adaptive styles only. ``aliases`` maps alias names to
    their targets and is resolved when the theme is applied, not when it is
    built.
    """

    name: Optional[str] = None
    source_path: Optional[Path] = None
    base: Dict[str, StyleAttributes] = field(default_factory=dict)
    light: Dict[str, StyleAttributes] = field(default_factory=dict)
    dark: Dict[str, StyleAttributes] = field(default_factory=dict)
    aliases: Dict[str, str] = field(default_factory=dict)
    icons: IconSet = field(default_factory=IconSet)
    palette: Optional[ThemePalette] = None

    # --- construction ------------------------------------------------------

    @classmethod
    def _from_variants(
        cls,
        variants: ThemeVariants,
        *,
        name: Optional[str] = None,
        source_path: Optional[Path] = None,
        icons: Optional[IconSet] = None,
    ) -> "Theme":
        return cls(
            name=name,
            source_path=source_path,
            base=dict(variants.base),
            light=dict(variants.light),
            dark=dict(variants.dark),
            aliases=dict(variants.aliases),
            icons=icons or IconSet(),
        )

    @classmethod
    def from_yaml(cls, text: str, *, name: Optional[str] = None) -> "Theme":
        """Build a theme from a YAML stylesheet, including its ``icons`` section."""

        variants = parse_stylesheet(text)
        icons = IconSet.from_mapping(load_yaml_document(text).get("icons"))
        return cls._from_variants(variants, name=name, icons=icons)

    @classmethod
    def from_css(cls, text: str, *, name: Optional[str] = None) -> "Theme":
        return cls._from_variants(parse_css(text), name=name)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Theme":
        """
        Load a ``.yaml``, ``.yml`` or ``.css`` stylesheet; the name is the file stem.

        Raises:
            StylesheetLoadError: If the file cannot be read.
            StylesheetError: If its content is invalid; the error carries ``path``.
        """
        path = Path(path)
        theme = cls(name=path.stem, source_path=path)
        theme.refresh()
        return theme

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StylesheetLoadError(f"cannot read stylesheet: {exc}", path=path) from exc

    def refresh(self) -> None:
        """
        Re-read the theme from its source file, replacing every table.

        Raises:
            StylesheetLoadError: If the theme was not loaded from a file or the file is unreadable.
        """
        if self.source_path is None:
            raise StylesheetLoadError(f"theme '{self.name or '<unnamed>'}' has no source file to refresh from")
        text = self._read(self.source_path)
        try:
            if self.source_path.suffix.lower() in CSS_EXTENSIONS:
                loaded = Theme.from_css(text)
            else:
                loaded = Theme.from_yaml(text)
        except StylesheetError as exc:
            raise exc.with_path(self.source_path)
        self.base = loaded.base
        self.light = loaded.light
        self.dark = loaded.dark
        self.aliases = loaded.aliases
        self.icons = loaded.icons
        logger.debug("Loaded theme %s from %s (%d styles)", self.name, self.source_path, len(self))

    # --- programmatic building ---------------------------------------------

    def add(self, name: str, value: Union[StyleAttributes, str]) -> "Theme":
        """Add a concrete style, or parse a shorthand / alias string."""

        if isinstance(value, StyleAttributes):
            self._set_concrete(name, value)
            return self
        definition = parse_definition(name, value)
        if isinstance(definition, AliasDefinition):
            self._drop(name)
            self.aliases[name] = definition.target
        else:
            self._set_concrete(name, definition.base)
        return self

    def add_adaptive(
        self,
        name: str,
        base: StyleAttributes,
        *,
        light: Optional[StyleAttributes] = None,
        dark: Optional[StyleAttributes] = None,
    ) -> "Theme":
        self._set_concrete(name, base)
        if light is not None:
            self.light[name] = base.merge(light)
        if dark is not None:
            self.dark[name] = base.merge(dark)
        return self

    def add_icon(self, name: str, icon: Union[IconDefinition, str]) -> "Theme":
        self.icons.add(name, icon if isinstance(icon, IconDefinition) else IconDefinition(icon))
        return self

    def with_palette(self, palette: ThemePalette) -> "Theme":
        self.palette = palette
        return self

    def _drop(self, name: str) -> None:
        self.base.pop(name, None)
        self.light.pop(name, None)
        self.dark.pop(name, None)
        self.aliases.pop(name, None)

    def _set_concrete(self, name: str, attributes: StyleAttributes) -> None:
        self._drop(name)
        self.base[name] = attributes

    # --- queries -----------------------------------------------------------

    def __len__(self) -> int:
        return len(self.base) + len(self.aliases)

    def names(self) -> List[str]:
        return sorted(set(self.base) | set(self.aliases))

    def resolve_styles(
        self,
        mode: Optional[ColorMode] = None,
        *,
        capability: ColorCapability = ColorCapability.ANSI256,
    ) -> Styles:
        """Materialize the style table for ``mode``; ``None`` uses base styles only."""

        overrides: Dict[str, StyleAttributes] = {}
        if mode is ColorMode.LIGHT:
            overrides = self.light
        elif mode is ColorMode.DARK:
            overrides = self.dark
        styles = {name: overrides.get(name, attributes) for name, attributes in self.base.items()}
        return Styles(styles, self.aliases, palette=self.palette, capability=capability)

    def validate(self) -> None:
        """Raise ``UnresolvedAlias`` or ``CycleDetected`` for broken alias chains."""

        self.resolve_styles().validate()

    def get_style(self, name: str, mode: Optional[ColorMode] = None) -> Optional[StyleAttributes]:
        return self.resolve_styles(mode).resolve(name)

    def resolve_icons(self, mode: IconMode = IconMode.AUTO) -> Dict[str, str]:
        return self.icons.resolve(mode)

    def merge(self, other: "Theme") -> "Theme":
        """Return a theme where ``other`` overwrites this theme's entries table by table."""

        merged = Theme(
            name=self.name,
            source_path=self.source_path,
            base=dict(self.base),
            light=dict(self.light),
            dark=dict(self.dark),
            aliases=dict(self.aliases),
            icons=self.icons.merge(other.icons),
            palette=other.palette if other.palette is not None else self.palette,
        )
        merged.base.update(other.base)
        merged.light.update(other.light)
        merged.dark.update(other.dark)
        merged.aliases.update(other.aliases)
        return merged
