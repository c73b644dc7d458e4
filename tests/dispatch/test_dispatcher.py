"""Command dispatch: handlers, hooks, rendering and output."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Mapping

import click
import pytest
from click.testing import CliRunner

from src.standout.dispatch import (
    Binary,
    CommandContext,
    Dispatcher,
    Hooks,
    Render,
    RunStatus,
    Silent,
    TextOutput,
    command_path_from_click,
    insert_default_command,
    template_name_for,
)
from src.standout.errors import DispatchError, HookError, HookPhase
from src.standout.output import OutputDestination, OutputMode
from src.standout.template.renderer import Renderer


@pytest.fixture
def dispatcher() -> Dispatcher:
    renderer = Renderer(mode=OutputMode.TEXT)
    renderer.add_template("config/get", "[key]{{ key }}[/key] = {{ value }}")
    return Dispatcher(renderer, app_state={"store": {"color": "blue"}})


def _config_get(args: Mapping[str, Any], ctx: CommandContext) -> dict:
    key = args["key"]
    return {"key": key, "value": ctx.state("store")[key]}


def test_handler_output_renders_through_conventional_template(dispatcher: Dispatcher) -> None:
    dispatcher.add("config.get", _config_get)

    result = dispatcher.dispatch("config.get", {"key": "color"})

    assert result.status is RunStatus.HANDLED
    assert result.output == "color = blue"


def test_structured_mode_skips_the_template(dispatcher: Dispatcher) -> None:
    dispatcher.add("config.get", _config_get)

    result = dispatcher.dispatch("config.get", {"key": "color"}, output_mode="json")

    assert json.loads(result.output) == {"key": "color", "value": "blue"}


def test_missing_template_falls_back_to_json(dispatcher: Dispatcher) -> None:
    dispatcher.add(["config", "list"], lambda args, ctx: Render({"keys": ["color"]}))

    result = dispatcher.dispatch(["config", "list"])

    assert json.loads(result.output) == {"keys": ["color"]}


def test_inline_source_and_explicit_template(dispatcher: Dispatcher) -> None:
    dispatcher.add("hello", lambda args, ctx: {"who": args.get("who", "world")}, source="hi {{ who }}")
    dispatcher.add("show", _config_get, template="config/get")

    assert dispatcher.dispatch("hello", {"who": "ana"}).output == "hi ana"
    assert dispatcher.dispatch("show", {"key": "color"}).output == "color = blue"
    assert template_name_for(["db", "migrate", "up"]) == "db/migrate/up"


def test_decorator_registration_and_object_handlers(dispatcher: Dispatcher) -> None:
    class Counter:
        def __init__(self) -> None:
            self.calls = 0

        def handle(self, args: Mapping[str, Any], ctx: CommandContext) -> dict:
            self.calls += 1
            return {"calls": self.calls}

    counter = Counter()
    dispatcher.add("count", counter, source="{{ calls }}")

    @dispatcher.command("path", source="{{ path }}")
    def show_path(args: Mapping[str, Any], ctx: CommandContext) -> dict:
        return {"path": "/".join(ctx.command_path)}

    dispatcher.dispatch("count")
    assert dispatcher.dispatch("count").output == "2"
    assert dispatcher.dispatch("path").output == "path"
    assert "count" in dispatcher
    assert dispatcher.paths() == ["count", "path"]


def test_duplicate_paths_are_rejected(dispatcher: Dispatcher) -> None:
    dispatcher.add("config.get", _config_get)

    with pytest.raises(DispatchError):
        dispatcher.add("config.get", _config_get)


def test_unknown_path_is_no_match(dispatcher: Dispatcher) -> None:
    result = dispatcher.dispatch("nothing.here", {"x": 1})

    assert result.is_no_match
    assert result.args == {"x": 1}


def test_empty_path_runs_default_command() -> None:
    dispatcher = Dispatcher(Renderer(mode=OutputMode.TEXT), default_command="status")
    dispatcher.add("status", lambda args, ctx: {"ok": True}, source="ok={{ ok }}")

    assert dispatcher.dispatch([]).output == "ok=True"


def test_handler_failures_become_dispatch_errors(dispatcher: Dispatcher) -> None:
    def broken(args: Mapping[str, Any], ctx: CommandContext) -> None:
        raise KeyError("boom")

    dispatcher.add("broken", broken)

    with pytest.raises(DispatchError) as excinfo:
        dispatcher.dispatch("broken")

    assert isinstance(excinfo.value.__cause__, KeyError)


def test_hooks_run_in_order_and_transform(dispatcher: Dispatcher) -> None:
    calls: List[str] = []

    def pre(args: Mapping[str, Any], ctx: CommandContext) -> None:
        calls.append("pre")

    def add_flag(args: Mapping[str, Any], ctx: CommandContext, data: Any) -> Any:
        calls.append("post-dispatch")
        return {**data, "value": data["value"].upper()}

    def frame(args: Mapping[str, Any], ctx: CommandContext, output: Any) -> Any:
        calls.append("post-output")
        return TextOutput(f"<{output.text}>")

    hooks = Hooks().pre_dispatch(pre).post_dispatch(add_flag).post_output(frame)
    dispatcher.add("config.get", _config_get, hooks=hooks)

    result = dispatcher.dispatch("config.get", {"key": "color"})

    assert result.output == "<color = BLUE>"
    assert calls == ["pre", "post-dispatch", "post-output"]


def test_pre_dispatch_hook_aborts_before_the_handler(dispatcher: Dispatcher) -> None:
    called = []

    def deny(args: Mapping[str, Any], ctx: CommandContext) -> None:
        raise HookError.pre_dispatch("not allowed")

    dispatcher.add("secret", lambda args, ctx: called.append(1), hooks=Hooks().pre_dispatch(deny))

    with pytest.raises(HookError) as excinfo:
        dispatcher.dispatch("secret")

    assert excinfo.value.phase is HookPhase.PRE_DISPATCH
    assert called == []


def test_unexpected_hook_exceptions_are_wrapped_and_logged(
    dispatcher: Dispatcher, caplog: pytest.LogCaptureFixture
) -> None:
    def explode(args: Mapping[str, Any], ctx: CommandContext, data: Any) -> Any:
        raise ValueError("bad data")

    dispatcher.add("config.get", _config_get, hooks=Hooks().post_dispatch(explode))

    with caplog.at_level(logging.WARNING), pytest.raises(HookError) as excinfo:
        dispatcher.dispatch("config.get", {"key": "color"})

    assert excinfo.value.phase is HookPhase.POST_DISPATCH
    assert isinstance(excinfo.value.source, ValueError)
    assert "bad data" in caplog.text


def test_silent_results_still_run_post_output_hooks(dispatcher: Dispatcher) -> None:
    seen = []

    def record(args: Mapping[str, Any], ctx: CommandContext, output: Any) -> Any:
        seen.append(output)
        return output

    dispatcher.add("quiet", lambda args, ctx: Silent(), hooks=Hooks().post_output(record))
    dispatcher.add("nothing", lambda args, ctx: None)

    assert dispatcher.dispatch("quiet").is_silent
    assert dispatcher.dispatch("nothing").is_silent
    assert len(seen) == 1


def test_binary_output_is_written_to_its_filename(
    dispatcher: Dispatcher, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    dispatcher.add("export", lambda args, ctx: Binary(b"\x00\x01", "export.bin"))

    result = dispatcher.run("export")

    assert result.is_binary
    assert result.filename == "export.bin"
    assert (tmp_path / "export.bin").read_bytes() == b"\x00\x01"


def test_text_output_goes_to_destination_file(dispatcher: Dispatcher, tmp_path: Path) -> None:
    dispatcher.add("config.get", _config_get)
    target = tmp_path / "out.txt"

    dispatcher.run("config.get", {"key": "color"}, destination=OutputDestination.file(target))

    assert target.read_text(encoding="utf-8") == "color = blue"


def test_destination_requires_existing_parent(tmp_path: Path) -> None:
    with pytest.raises(DispatchError):
        OutputDestination.file(tmp_path / "missing" / "out.txt").write_text("x")


def test_stdout_destination_has_no_parent_to_check() -> None:
    with pytest.raises(DispatchError):
        OutputDestination.stdout()._check_parent()


def test_command_path_from_click_context() -> None:
    seen: List[List[str]] = []

    @click.group()
    def app() -> None:
        pass

    @app.group()
    def config() -> None:
        pass

    @config.command()
    def get() -> None:
        seen.append(command_path_from_click(click.get_current_context()))

    result = CliRunner().invoke(app, ["config", "get"])

    assert result.exit_code == 0, result.output
    assert seen == [["config", "get"]]


def test_insert_default_command() -> None:
    assert insert_default_command(["prog"], "list") == ["prog", "list"]
    assert insert_default_command(["prog", "--json"], "list") == ["prog", "list", "--json"]
    assert insert_default_command([], "list") == ["list"]
