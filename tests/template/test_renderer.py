"""Two-pass rendering: template expansion, then the style-tag pass."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.standout.errors import (
    IncludeRecursionError,
    RenderError,
    TagError,
    TemplateNotFound,
    TemplateParseError,
)
from src.standout.output import OutputMode
from src.standout.resources.templates import TemplateRegistry
from src.standout.template.context import ContextRegistry
from src.standout.template.renderer import Renderer, render, render_auto
from src.standout.terminal import ColorCapability
from src.standout.theme.icons import IconMode
from src.standout.theme.theme import Theme


@pytest.fixture
def term_renderer(sample_theme: Theme) -> Renderer:
    return Renderer(sample_theme, mode=OutputMode.TERM, capability=ColorCapability.ANSI256)


def test_apply_mode_emits_escapes(green_theme: Theme) -> None:
    """A forced term render wraps the expanded value in the style's escape."""

    renderer = Renderer(green_theme, mode="term", capability=ColorCapability.ANSI256)

    output = renderer.render_string("[ok]{{ msg }}[/ok]", {"msg": "hi"})

    assert "\x1b[32m" in output
    assert "hi" in output
    assert output.endswith("\x1b[0m")


def test_alias_chain_applies_concrete_attributes() -> None:
    theme = Theme.from_yaml("base: bold\nemphasis: base\ncritical: emphasis\n")
    renderer = Renderer(theme, mode=OutputMode.TERM, capability=ColorCapability.ANSI256)

    output = renderer.render_string("[critical]X[/critical]")

    assert "\x1b[1" in output
    assert "X" in output


def test_text_mode_strips_tags(sample_theme: Theme) -> None:
    renderer = Renderer(sample_theme, mode=OutputMode.TEXT)

    assert renderer.render_string("[ok]{{ msg }}[/ok]!", {"msg": "done"}) == "done!"


def test_debug_mode_keeps_tags(sample_theme: Theme) -> None:
    renderer = Renderer(sample_theme, mode=OutputMode.TERM_DEBUG)

    assert renderer.render_string("[ok]{{ msg }}[/ok]", {"msg": "done"}) == "[ok]done[/ok]"


def test_auto_mode_is_plain_when_not_a_terminal(sample_theme: Theme) -> None:
    renderer = Renderer(sample_theme, is_terminal=False)

    assert renderer.render_string("[ok]x[/ok]") == "x"


def test_auto_mode_honours_no_color(sample_theme: Theme, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NO_COLOR", "1")
    renderer = Renderer(sample_theme, is_terminal=True)

    assert renderer.render_string("[ok]x[/ok]") == "x"


def test_explicit_term_mode_ignores_no_color(sample_theme: Theme, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NO_COLOR", "1")
    renderer = Renderer(sample_theme, mode=OutputMode.TERM)

    assert renderer.render_string("[ok]x[/ok]") == "\x1b[32mx\x1b[0m"


def test_structured_modes_serialize_data(sample_theme: Theme) -> None:
    renderer = Renderer(sample_theme, mode=OutputMode.JSON)
    renderer.add_template("report", "[ok]{{ total }}[/ok]")

    output = renderer.render("report", {"total": 3})

    assert json.loads(output) == {"total": 3}


def test_strict_tags_fail_on_unknown_style(sample_theme: Theme) -> None:
    renderer = Renderer(sample_theme, mode=OutputMode.TERM, strict_tags=True)

    with pytest.raises(TagError):
        renderer.render_string("[nope]x[/nope]")


def test_unknown_template_name() -> None:
    with pytest.raises(TemplateNotFound):
        Renderer(mode=OutputMode.TEXT).render("missing")


def test_syntax_errors_report_the_line() -> None:
    renderer = Renderer(mode=OutputMode.TEXT)
    renderer.add_template("broken", "ok\n{% if %}\n")

    with pytest.raises(TemplateParseError) as excinfo:
        renderer.render("broken")

    assert excinfo.value.line_number == 2
    assert excinfo.value.template_name == "broken"


def test_replacing_a_template_invalidates_the_compiled_copy() -> None:
    renderer = Renderer(mode=OutputMode.TEXT)
    renderer.add_template("greet", "hi {{ name }}")
    assert renderer.render("greet", {"name": "ana"}) == "hi ana"

    renderer.add_template("greet", "bye {{ name }}")

    assert renderer.render("greet", {"name": "ana"}) == "bye ana"


def test_includes_resolve_through_the_registry() -> None:
    renderer = Renderer(mode=OutputMode.TEXT)
    renderer.add_template("header", "== {{ title }} ==")
    renderer.add_template("page", "{% include 'header' %}\nbody")

    assert renderer.render("page", {"title": "T"}) == "== T ==\nbody"


def test_include_cycles_are_rejected() -> None:
    renderer = Renderer(mode=OutputMode.TEXT)
    renderer.add_template("a", "A{% include 'b' %}")
    renderer.add_template("b", "B{% include 'a' %}")

    with pytest.raises(IncludeRecursionError) as excinfo:
        renderer.render("a")

    assert "a -> b -> a" in str(excinfo.value)


def test_dynamic_self_include_is_a_render_error() -> None:
    renderer = Renderer(mode=OutputMode.TEXT)
    renderer.add_template("loop", "x{% include name %}")

    with pytest.raises(RenderError) as excinfo:
        renderer.render("loop", {"name": "loop"})

    assert isinstance(excinfo.value.__cause__, RecursionError)


def test_missing_include_is_reported_by_name() -> None:
    renderer = Renderer(mode=OutputMode.TEXT)
    renderer.add_template("page", "{% include 'nowhere' %}")

    with pytest.raises(TemplateNotFound) as excinfo:
        renderer.render("page")

    assert excinfo.value.name == "nowhere"


def test_context_entries_are_merged_under_data() -> None:
    context = ContextRegistry().add_static("name", "context").add_provider("cols", lambda ctx: ctx.terminal_width)
    renderer = Renderer(mode=OutputMode.TEXT, context=context, width=42)

    assert renderer.render_string("{{ name }} {{ cols }}") == "context 42"
    assert renderer.render_string("{{ name }} {{ cols }}", {"name": "data"}) == "data 42"


def test_non_mapping_data_is_exposed_as_data() -> None:
    assert Renderer(mode=OutputMode.TEXT).render_string("{{ data | length }}", [1, 2, 3]) == "3"


def test_theme_icons_are_available_to_templates(sample_theme: Theme) -> None:
    renderer = Renderer(sample_theme, mode=OutputMode.TEXT, icon_mode=IconMode.CLASSIC)

    assert renderer.render_string("{{ icons.check }} {{ icons.folder }}") == "v [d]"


def test_layout_helpers_in_templates() -> None:
    renderer = Renderer(mode=OutputMode.TEXT)
    source = (
        "{% set t = tabular([10, 'fill', 10], separator='  ', width=80) %}{{ t.widths }}|"
        "{{ 'abcdefgh' | col(5) }}|{{ 'x' | col(3, align='right') }}|{{ 'done' | style('ok') }}"
    )

    assert renderer.render_string(source) == "[10, 56, 10]|abcd…|  x|done"


def test_template_directories_resolve_with_and_without_extension(tmp_path: Path) -> None:
    (tmp_path / "reports").mkdir()
    (tmp_path / "reports" / "summary.jinja").write_text("total={{ total }}", encoding="utf-8")
    renderer = Renderer(mode=OutputMode.TEXT, templates=TemplateRegistry(debug=False))
    renderer.add_template_dir(tmp_path)

    assert renderer.render("reports/summary", {"total": 1}) == "total=1"
    assert renderer.render("reports/summary.jinja", {"total": 2}) == "total=2"


def test_debug_mode_rereads_templates(tmp_path: Path) -> None:
    template = tmp_path / "live.jinja"
    template.write_text("v1", encoding="utf-8")
    renderer = Renderer(mode=OutputMode.TEXT, templates=TemplateRegistry(debug=True))
    renderer.add_template_dir(tmp_path)
    assert renderer.render("live") == "v1"

    template.write_text("v2", encoding="utf-8")

    assert renderer.render("live") == "v2"


def test_refresh_picks_up_changes_outside_debug_mode(tmp_path: Path) -> None:
    template = tmp_path / "cached.jinja"
    template.write_text("v1", encoding="utf-8")
    renderer = Renderer(mode=OutputMode.TEXT, templates=TemplateRegistry(debug=False))
    renderer.add_template_dir(tmp_path)
    assert renderer.render("cached") == "v1"

    template.write_text("v2", encoding="utf-8")
    assert renderer.render("cached") == "v1"

    renderer.refresh()

    assert renderer.render("cached") == "v2"


def test_one_shot_helpers(green_theme: Theme) -> None:
    assert render("[ok]{{ n }}[/ok]", {"n": 1}, green_theme, mode="text") == "1"
    assert json.loads(render_auto("[ok]{{ n }}[/ok]", {"n": 1}, green_theme, "json")) == {"n": 1}

    registry = TemplateRegistry()
    registry.add_inline("count", "n={{ n }}")

    assert render_auto("count", {"n": 5}, None, "text", templates=registry) == "n=5"
