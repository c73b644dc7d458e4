"""Configuration dataclasses for the standout command line."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .standout.output import OutputMode
from .standout.theme.icons import IconMode


class ColorModeSetting(str, Enum):
    """Light/dark selection for adaptive styles; ``auto`` asks the terminal."""

    AUTO = "auto"
    LIGHT = "light"
    DARK = "dark"


@dataclass
class OutputConfig:
    """How rendered output is produced."""

    mode: OutputMode = OutputMode.AUTO
    width: int = 0
    strict_tags: bool = False
    color_mode: ColorModeSetting = ColorModeSetting.AUTO
    icon_mode: IconMode = IconMode.AUTO


@dataclass
class TemplatesConfig:
    """Template directories and reload behaviour."""

    dirs: List[str] = field(default_factory=lambda: ["templates"])
    debug: bool = False


@dataclass
class ThemesConfig:
    """Stylesheet directories and the theme selected by default."""

    dirs: List[str] = field(default_factory=lambda: ["themes"])
    default: str = ""


@dataclass
class AppConfig:
    """Aggregated configuration loaded from ``standout.toml``."""

    output: OutputConfig = field(default_factory=OutputConfig)
    templates: TemplatesConfig = field(default_factory=TemplatesConfig)
    themes: ThemesConfig = field(default_factory=ThemesConfig)
    source_path: Optional[Path] = None

    def base_dir(self) -> Path:
        """Directory that relative template and theme directories resolve against."""

        if self.source_path is not None:
            return self.source_path.parent
        return Path.cwd()

    def template_dirs(self) -> List[Path]:
        return [self.base_dir() / entry for entry in self.templates.dirs]

    def theme_dirs(self) -> List[Path]:
        return [self.base_dir() / entry for entry in self.themes.dirs]
