"""Click CLI wiring and entry points for standout."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, cast

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler

from src.config_loader import ConfigError, load_config
from src.datatypes import AppConfig, ColorModeSetting

from .errors import StandoutError
from .output import OutputMode
from .resources.stylesheets import StylesheetRegistry
from .resources.templates import TemplateRegistry
from .tags import StyleTagParser
from .template.renderer import Renderer
from .terminal import enable_windows_vt_mode
from .theme.theme import ColorMode, Theme

logger = logging.getLogger(__name__)

_MODE_CHOICES = [mode.value for mode in OutputMode]
_THEME_SUFFIXES = (".yaml", ".yml", ".css")


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_app_config(ctx: click.Context) -> AppConfig:
    params = cast(Dict[str, Any], ctx.ensure_object(dict))
    try:
        return load_config(params.get("config_path"))
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _load_data(source: Optional[str]) -> Any:
    """Read JSON or YAML from a file, or from stdin for ``-``."""

    if source is None:
        return {}
    try:
        if source == "-":
            text = sys.stdin.read()
            suffix = ""
        else:
            path = Path(source)
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
    except OSError as exc:
        raise click.ClickException(f"Failed to read data from {source}: {exc}") from exc
    try:
        if suffix == ".json":
            return json.loads(text)
        # YAML also accepts JSON documents
        loaded = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise click.ClickException(f"Invalid data in {source}: {exc}") from exc
    return {} if loaded is None else loaded


def _existing_dirs(paths: Tuple[Path, ...]) -> Tuple[Path, ...]:
    kept = []
    for path in paths:
        if path.is_dir():
            kept.append(path)
        else:
            logger.debug("Skipping missing directory %s", path)
    return tuple(kept)


def _select_theme(
    theme_option: Optional[str],
    config: AppConfig,
    theme_dirs: Tuple[Path, ...],
) -> Optional[Theme]:
    name = theme_option or config.themes.default
    if not name:
        return None
    candidate = Path(name)
    if candidate.suffix.lower() in _THEME_SUFFIXES and candidate.is_file():
        return Theme.from_file(candidate)
    registry = StylesheetRegistry(debug=config.templates.debug or None)
    for directory in theme_dirs:
        registry.add_dir(directory)
    return registry.get(name)


def _color_mode(config: AppConfig) -> Optional[ColorMode]:
    if config.output.color_mode is ColorModeSetting.AUTO:
        return None
    return ColorMode(config.output.color_mode.value)


def _echo(text: str) -> None:
    click.echo(text, nl=not text.endswith("\n"), color=True)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to standout.toml (default: ./standout.toml when present).",
)
@click.option("--verbose", is_flag=True, help="Log registry, cache and dispatch activity to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """Render templates and inspect themes."""

    params = cast(Dict[str, Any], ctx.ensure_object(dict))
    params["config_path"] = config_path
    params["verbose"] = verbose
    _configure_logging(verbose)
    enable_windows_vt_mode()


@main.command()
@click.argument("template")
@click.option("--data", "data_source", default=None, help="JSON or YAML data file, or '-' for stdin.")
@click.option(
    "--output",
    "output_mode",
    type=click.Choice(_MODE_CHOICES, case_sensitive=False),
    default=None,
    help="Output mode (overrides [output].mode).",
)
@click.option("--theme", "theme_option", default=None, help="Theme name from the theme directories, or a stylesheet path.")
@click.option(
    "--templates",
    "template_dirs",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Additional template directory (repeatable).",
)
@click.option(
    "--themes",
    "theme_dirs",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Additional theme directory (repeatable).",
)
@click.option("--width", type=int, default=None, help="Terminal width used for table layout.")
@click.option("--strict-tags", is_flag=True, default=None, help="Fail on style tags naming unknown styles.")
@click.pass_context
def render(
    ctx: click.Context,
    template: str,
    data_source: Optional[str],
    output_mode: Optional[str],
    theme_option: Optional[str],
    template_dirs: Tuple[Path, ...],
    theme_dirs: Tuple[Path, ...],
    width: Optional[int],
    strict_tags: Optional[bool],
) -> None:
    """Render TEMPLATE (a registered name or a template file) against --data."""

    config = _load_app_config(ctx)
    data = _load_data(data_source)
    mode = OutputMode.parse(output_mode) if output_mode else config.output.mode
    resolved_width = width or config.output.width or Console().width

    templates = TemplateRegistry(debug=config.templates.debug or None)
    for directory in _existing_dirs(template_dirs + tuple(config.template_dirs())):
        templates.add_dir(directory)

    try:
        theme = _select_theme(theme_option, config, _existing_dirs(theme_dirs + tuple(config.theme_dirs())))
        renderer = Renderer(
            theme,
            mode=mode,
            templates=templates,
            width=resolved_width,
            strict_tags=config.output.strict_tags if strict_tags is None else strict_tags,
            color_mode=_color_mode(config),
            icon_mode=config.output.icon_mode,
        )
        template_path = Path(template)
        if template not in templates and template_path.is_file():
            logger.debug("Rendering template file %s", template_path)
            output = renderer.render_string(template_path.read_text(encoding="utf-8"), data)
        else:
            output = renderer.render(template, data)
    except (StandoutError, OSError) as exc:
        raise click.ClickException(str(exc)) from exc
    _echo(output)


@main.command("check-theme")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--mode",
    "color_mode",
    type=click.Choice([mode.value for mode in ColorMode], case_sensitive=False),
    default=None,
    help="Resolve adaptive styles for a light or dark background.",
)
@click.option(
    "--output",
    "output_mode",
    type=click.Choice(["auto", "term", "text"], case_sensitive=False),
    default="auto",
    help="Show styled samples (term) or names only (text).",
)
def check_theme(path: Path, color_mode: Optional[str], output_mode: str) -> None:
    """Parse and validate the stylesheet at PATH, then list its styles."""

    try:
        theme = Theme.from_file(path)
        theme.validate()
    except StandoutError as exc:
        raise click.ClickException(str(exc)) from exc

    mode = OutputMode.parse(output_mode).resolve_auto()
    styles = theme.resolve_styles(ColorMode(color_mode) if color_mode else None)
    parser = StyleTagParser(styles, mode.tag_transform())
    aliases = theme.aliases
    click.echo(f"{path.name}: {len(theme)} style(s) OK")
    for name in theme.names():
        label = f"{name} -> {aliases[name]}" if name in aliases else name
        _echo(parser.process(f"  [{name}]{label}[/{name}]"))
    icons = theme.resolve_icons()
    for name, glyph in sorted(icons.items()):
        click.echo(f"  icon {name}: {glyph}")


cli = main

__all__ = ["cli", "main"]
