from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from src.standout.cli_entry import main


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "data.json").write_text(json.dumps({"name": "Ana", "items": [1, 2]}), encoding="utf-8")
    (tmp_path / "hello.j2").write_text("Hello [ok]{{ name }}[/ok] ({{ items | length }})", encoding="utf-8")
    return tmp_path


def test_render_template_file_as_text(runner: CliRunner, workdir: Path) -> None:
    result = runner.invoke(main, ["render", "hello.j2", "--data", "data.json", "--output", "text"])

    assert result.exit_code == 0, result.output
    assert result.output == "Hello Ana (2)\n"


def test_render_structured_output_ignores_template(runner: CliRunner, workdir: Path) -> None:
    result = runner.invoke(main, ["render", "hello.j2", "--data", "data.json", "--output", "json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"name": "Ana", "items": [1, 2]}


def test_render_registered_template_with_theme(runner: CliRunner, workdir: Path, theme_file: Path) -> None:
    templates = workdir / "views"
    templates.mkdir()
    (templates / "greet.jinja").write_text("[ok]{{ name }}[/ok]", encoding="utf-8")

    result = runner.invoke(
        main,
        [
            "render",
            "greet",
            "--templates",
            str(templates),
            "--theme",
            str(theme_file),
            "--data",
            "data.json",
            "--output",
            "term",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "\x1b[32mAna\x1b[0m" in result.output


def test_render_uses_config_file(runner: CliRunner, workdir: Path) -> None:
    (workdir / "standout.toml").write_text('[output]\nmode = "yaml"\n', encoding="utf-8")

    result = runner.invoke(main, ["render", "hello.j2", "--data", "data.json"])

    assert result.exit_code == 0, result.output
    assert "name: Ana" in result.output


def test_render_reports_invalid_config(runner: CliRunner, workdir: Path) -> None:
    (workdir / "standout.toml").write_text("[output]\ncolour = true\n", encoding="utf-8")

    result = runner.invoke(main, ["render", "hello.j2"])

    assert result.exit_code != 0
    assert "Invalid keys in [output]: colour" in result.output


def test_render_missing_template_fails(runner: CliRunner, workdir: Path) -> None:
    result = runner.invoke(main, ["render", "nope", "--output", "text"])

    assert result.exit_code != 0
    assert "nope" in result.output


def test_check_theme_lists_styles_and_icons(runner: CliRunner, theme_file: Path) -> None:
    result = runner.invoke(main, ["check-theme", str(theme_file), "--output", "text"])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "sample.yaml: 6 style(s) OK"
    assert "  critical -> emphasis" in lines
    assert "  panel" in lines
    assert "  icon check: v" in lines
    assert "  icon folder: [d]" in lines


def test_check_theme_rejects_broken_alias(runner: CliRunner, tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("title: heading\n", encoding="utf-8")

    result = runner.invoke(main, ["check-theme", str(path)])

    assert result.exit_code != 0
    assert "heading" in result.output
