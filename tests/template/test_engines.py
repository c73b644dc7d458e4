from __future__ import annotations

import pytest

from src.standout.errors import RenderError, TemplateNotFound, TemplateParseError
from src.standout.template.engine import JinjaEngine, SimpleEngine, create_engine


@pytest.fixture
def simple() -> SimpleEngine:
    return SimpleEngine()


def test_simple_engine_substitutes_dotted_paths(simple: SimpleEngine) -> None:
    data = {"user": {"name": "ana"}, "items": ["a", "b"], "ok": True, "none": None, "meta": {"k": 1}}

    rendered = simple.render_template("{user.name} {items.1} {ok}|{none}|{meta}", data)

    assert rendered == 'ana b true||{"k":1}'


def test_simple_engine_escapes_and_missing_names(simple: SimpleEngine) -> None:
    assert simple.render_template("{{literal}} {missing}", {}) == "{literal} {missing}"


@pytest.mark.parametrize(
    ("source", "message"),
    [("hello {name", "Unclosed variable substitution"), ("hello {}", "Empty variable name")],
)
def test_simple_engine_syntax_errors(simple: SimpleEngine, source: str, message: str) -> None:
    with pytest.raises(TemplateParseError) as excinfo:
        simple.compile(source, "greeting")

    assert message in str(excinfo.value)
    assert excinfo.value.template_name == "greeting"


def test_simple_engine_named_templates(simple: SimpleEngine) -> None:
    simple.add_template("hello", "hi {name}")

    assert simple.render_named("hello", {"name": "bo"}) == "hi bo"
    with pytest.raises(TemplateNotFound):
        simple.render_named("bye", {})


def test_jinja_engine_filter_errors_become_render_errors() -> None:
    engine = JinjaEngine()

    with pytest.raises(RenderError):
        engine.render_template("{{ value | col('wide') }}", {"value": "x"})


def test_jinja_engine_custom_filters_and_globals() -> None:
    engine = JinjaEngine()
    engine.add_filter("shout", lambda value: f"{value}!".upper())
    engine.add_global("site", "docs")

    assert engine.render_template("{{ 'hi' | shout }} {{ site }}", {}) == "HI! docs"


def test_jinja_engine_resolves_includes_through_loader() -> None:
    sources = {"part": "[{{ n }}]"}
    engine = JinjaEngine()
    engine.set_loader(sources.get)

    assert engine.render_template("{% include 'part' %}", {"n": 3}) == "[3]"


def test_create_engine_by_name() -> None:
    assert isinstance(create_engine(), JinjaEngine)
    assert isinstance(create_engine("simple"), SimpleEngine)
    with pytest.raises(ValueError):
        create_engine("mustache")
