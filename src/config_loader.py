"""Configuration loader that parses and validates ``standout.toml``."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .datatypes import AppConfig, OutputConfig, TemplatesConfig, ThemesConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "standout.toml"


class ConfigError(ValueError):
    """Raised when the configuration file is malformed or fails validation."""


def _coerce_bool(value: Any, dotted_key: str) -> bool:
    """Return a bool, coercing simple 0/1 representations when necessary."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"0", "1"}:
            return normalized == "1"
        if normalized in {"true", "false"}:
            return normalized == "true"
    raise ConfigError(f"{dotted_key} must be a boolean (use true/false).")


def _coerce_enum(value: Any, dotted_key: str, enum_type: type[Enum]) -> Enum:
    """Return an enum member, coercing string values case-insensitively."""

    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower().replace("_", "-")
        for member in enum_type:
            member_value = str(member.value).lower()
            if normalized in (member_value, member_value.replace("_", "-")):
                return member
    raise ConfigError(
        f"{dotted_key} must be one of: {', '.join(str(member.value) for member in enum_type)}"
    )


def _coerce_str_list(value: Any, dotted_key: str) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ConfigError(f"{dotted_key} must be a string or an array of strings")


def _sanitize_section(raw: Any, name: str, cls):
    """
    Coerce a raw TOML table into an instance of ``cls``.

    Parameters:
        raw (Any): Raw TOML section data.
        name (str): Section name used when reporting validation errors.
        cls: Dataclass type used to construct the section object.

    Returns:
        Any: Instantiated dataclass populated with values from ``raw``.

    Raises:
        ConfigError: If the section is not a table or contains invalid keys or values.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"[{name}] must be a table")
    cleaned: Dict[str, Any] = {}
    cls_fields = {field.name: field for field in fields(cls)}
    bool_fields = {field_name for field_name, field in cls_fields.items() if field.type is bool}
    int_fields = {field_name for field_name, field in cls_fields.items() if field.type is int}
    list_fields = {
        field_name for field_name, field in cls_fields.items() if field.type == List[str]
    }
    enum_fields = {
        field_name: field.type
        for field_name, field in cls_fields.items()
        if isinstance(field.type, type) and issubclass(field.type, Enum)
    }
    nested_fields = {
        field_name: field.type
        for field_name, field in cls_fields.items()
        if is_dataclass(field.type)
    }
    unknown = sorted(set(raw) - set(cls_fields))
    if unknown:
        raise ConfigError(f"Invalid keys in [{name}]: {', '.join(unknown)}")
    for key, value in raw.items():
        dotted = f"{name}.{key}"
        if key in bool_fields:
            cleaned[key] = _coerce_bool(value, dotted)
        elif key in int_fields:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{dotted} must be an integer")
            cleaned[key] = value
        elif key in list_fields:
            cleaned[key] = _coerce_str_list(value, dotted)
        elif key in enum_fields:
            cleaned[key] = _coerce_enum(value, dotted, enum_fields[key])
        elif key in nested_fields:
            cleaned[key] = _sanitize_section(value, dotted, nested_fields[key])
        else:
            if not isinstance(value, str):
                raise ConfigError(f"{dotted} must be a string")
            cleaned[key] = value
    try:
        return cls(**cleaned)
    except TypeError as exc:
        raise ConfigError(f"Invalid keys in [{name}]: {exc}") from exc


def _parse(raw_bytes: bytes) -> Dict[str, Any]:
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        raw_bytes = raw_bytes[3:]
    try:
        return tomllib.loads(raw_bytes.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ConfigError("Configuration file must be UTF-8 encoded") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse TOML: {exc}") from exc


def config_from_mapping(raw: Dict[str, Any], *, source_path: Optional[Path] = None) -> AppConfig:
    """Validate an already parsed TOML document."""

    known = {"output", "templates", "themes"}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration sections: {', '.join(unknown)}")
    app = AppConfig(
        output=_sanitize_section(raw.get("output", {}), "output", OutputConfig),
        templates=_sanitize_section(raw.get("templates", {}), "templates", TemplatesConfig),
        themes=_sanitize_section(raw.get("themes", {}), "themes", ThemesConfig),
        source_path=source_path,
    )
    if app.output.width < 0:
        raise ConfigError("output.width must be >= 0")
    app.themes.default = app.themes.default.strip()
    if any(not entry.strip() for entry in app.templates.dirs + app.themes.dirs):
        raise ConfigError("template and theme directories must not be empty strings")
    return app


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load and validate the application configuration.

    With no ``path``, ``standout.toml`` in the working directory is used when
    it exists and defaults are returned otherwise. An explicit ``path`` must
    exist.

    Returns:
        AppConfig: The validated configuration; relative directories resolve
        against the config file's parent.

    Raises:
        ConfigError: If the file is missing (explicit path), not UTF-8, not
            valid TOML, or any value fails validation.
    """
    if path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_NAME
        if not candidate.is_file():
            logger.debug("No %s found; using defaults", DEFAULT_CONFIG_NAME)
            return AppConfig()
        config_path = candidate
    else:
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        raw_bytes = config_path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Failed to read {config_path}: {exc}") from exc
    app = config_from_mapping(_parse(raw_bytes), source_path=config_path.resolve())
    logger.debug("Loaded configuration from %s", config_path)
    return app
