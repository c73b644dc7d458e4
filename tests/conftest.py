from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from src.standout.style.attributes import StyleAttributes
from src.standout.terminal import ColorCapability
from src.standout.theme.theme import ColorMode, Theme

SAMPLE_STYLESHEET = """\
ok: green
warn: "yellow bold"
base: bold
emphasis: base
critical: emphasis
panel:
  fg: white
  bg: 236
  light:
    fg: black
    bg: 254
icons:
  check: "v"
  folder:
    classic: "[d]"
    nerdfont: "\\uf07b"
"""


@pytest.fixture
def runner() -> CliRunner:
    """Provide a Click runner configured for CLI smoke tests."""

    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated_terminal_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep colour and icon detection independent of the developer's shell."""

    for name in ("NO_COLOR", "COLORTERM", "COLORFGBG", "NERD_FONT", "STANDOUT_COLOR_MODE", "STANDOUT_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")


@pytest.fixture
def sample_theme() -> Theme:
    """Theme parsed from the sample stylesheet used across tests."""

    return Theme.from_yaml(SAMPLE_STYLESHEET, name="sample")


@pytest.fixture
def sample_styles(sample_theme: Theme):
    return sample_theme.resolve_styles(ColorMode.DARK, capability=ColorCapability.ANSI256)


@pytest.fixture
def theme_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.yaml"
    path.write_text(SAMPLE_STYLESHEET, encoding="utf-8")
    return path


@pytest.fixture
def green_theme() -> Theme:
    return Theme(name="green").add("ok", StyleAttributes.from_shorthand("green"))
