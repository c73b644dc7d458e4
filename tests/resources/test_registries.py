"""Template and stylesheet lookup across sources."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.standout.errors import (
    RegistryCollision,
    ResourceLoadError,
    StylesheetError,
    TemplateNotFound,
    ThemeNotFound,
)
from src.standout.resources.stylesheets import StylesheetRegistry
from src.standout.resources.templates import TemplateRegistry


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_higher_priority_extension_claims_bare_name(tmp_path: Path) -> None:
    _write(tmp_path / "list.txt", "from txt")
    _write(tmp_path / "list.jinja", "from jinja")
    registry = TemplateRegistry(debug=False)
    registry.add_dir(tmp_path)

    assert registry.get_content("list") == "from jinja"
    assert registry.get_content("list.txt") == "from txt"
    assert registry.get_content("list.jinja") == "from jinja"


def test_bare_name_in_two_directories_is_a_collision(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    _write(first / "show.jinja", "one")
    _write(second / "show.j2", "two")
    registry = TemplateRegistry(debug=False)
    registry.add_dir(first)
    registry.add_dir(second)

    with pytest.raises(RegistryCollision) as excinfo:
        registry.get("show")

    assert excinfo.value.name == "show"
    assert "first" in str(excinfo.value) and "second" in str(excinfo.value)


def test_inline_wins_over_files_and_framework(tmp_path: Path) -> None:
    _write(tmp_path / "help.jinja", "file")
    registry = TemplateRegistry(debug=False)
    registry.add_framework("help.jinja", "framework")
    registry.add_dir(tmp_path)
    assert registry.get_content("help") == "file"

    registry.add_inline("help", "inline")

    assert registry.get_content("help") == "inline"


def test_framework_templates_are_a_fallback() -> None:
    registry = TemplateRegistry(debug=False)
    registry.add_framework_entries([("standout/error.jinja", "error: {{ message }}")])

    assert registry.get_content("standout/error") == "error: {{ message }}"
    assert "standout/error.jinja" in registry

    registry.clear_framework()

    assert registry.get("standout/error") is None


def test_embedded_entries_follow_file_naming() -> None:
    registry = TemplateRegistry.from_embedded_entries(
        [("config/get.txt", "plain"), ("config/get.jinja", "jinja")]
    )

    assert registry.get_content("config/get") == "jinja"
    assert registry.get_content("config/get.txt") == "plain"
    assert registry.names() == ["config/get", "config/get.jinja", "config/get.txt"]


def test_unknown_template_name_raises() -> None:
    with pytest.raises(TemplateNotFound):
        TemplateRegistry(debug=False).resolve("nothing")


def test_missing_directory_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ResourceLoadError):
        TemplateRegistry(debug=False).add_dir(tmp_path / "absent")


def test_stylesheet_registry_loads_and_caches_themes(tmp_path: Path) -> None:
    _write(tmp_path / "dark.yaml", "ok: green\n")
    registry = StylesheetRegistry(debug=False)
    registry.add_dir(tmp_path)

    theme = registry.get("dark")

    assert theme.name == "dark"
    assert theme.source_path == (tmp_path / "dark.yaml").resolve()
    assert registry.get("dark.yaml") is registry.get("dark.yaml")


def test_stylesheet_registry_inline_and_missing() -> None:
    registry = StylesheetRegistry(debug=False)
    registry.add_inline("mini", "title: bold\n")

    assert registry.get("mini").names() == ["title"]
    with pytest.raises(ThemeNotFound):
        registry.get("other")


def test_broken_stylesheet_error_carries_path(tmp_path: Path) -> None:
    path = _write(tmp_path / "broken.yaml", "title: [1, 2\n")
    registry = StylesheetRegistry(debug=False)
    registry.add_dir(tmp_path)

    with pytest.raises(StylesheetError) as excinfo:
        registry.get("broken")

    assert excinfo.value.path == path.resolve()


def test_broken_embedded_stylesheet_fails_at_registration() -> None:
    with pytest.raises(StylesheetError):
        StylesheetRegistry.from_embedded_entries([("bad.yaml", "title: 12 34 56\n")])
