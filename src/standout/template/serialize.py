"""Serialization of handler data for the structured output modes."""
from __future__ import annotations

import csv
import dataclasses
import datetime as _dt
import enum
import io
import json
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import yaml

from ..errors import RenderError
from ..output import OutputMode

_XML_NAME_START = re.compile(r"[A-Za-z_]")
_XML_NAME_CHAR = re.compile(r"[A-Za-z0-9_.\-]")


def to_plain(value: Any) -> Any:
    """
    Convert ``value`` into JSON-shaped data: dicts, lists, strings, numbers, booleans and ``None``.

    Dataclasses and objects with ``to_dict``/``_asdict`` become mappings,
    enums become their values, dates become ISO strings and paths become
    strings. Anything else falls back to ``str``.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, enum.Enum):
        return to_plain(value.value)
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {field.name: to_plain(getattr(value, field.name)) for field in dataclasses.fields(value)}
    if hasattr(value, "_asdict"):
        return to_plain(value._asdict())
    if callable(getattr(value, "to_dict", None)):
        return to_plain(value.to_dict())
    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain(item) for item in value]
    return str(value)


def to_json(data: Any) -> str:
    return json.dumps(to_plain(data), indent=2, ensure_ascii=False)


def to_yaml(data: Any) -> str:
    return yaml.safe_dump(to_plain(data), sort_keys=False, allow_unicode=True, default_flow_style=False)


def xml_name(name: str) -> str:
    """Coerce ``name`` into a valid XML element name by replacing invalid characters."""

    if not name:
        return "_"
    chars: List[str] = []
    for index, char in enumerate(name):
        if index == 0 and not _XML_NAME_START.match(char):
            chars.append("_")
            if char.isascii() and char.isalnum():
                chars.append(char)
            continue
        chars.append(char if char.isascii() and _XML_NAME_CHAR.match(char) else "_")
    return "".join(chars)


def _xml_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _xml_fill(element: ET.Element, value: Any) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            _xml_append(element, xml_name(key), item)
    elif value is not None:
        element.text = _xml_scalar(value)


def _xml_append(parent: ET.Element, tag: str, value: Any) -> None:
    # sequences repeat the element once per item
    if isinstance(value, list):
        for item in value:
            _xml_append(parent, tag, item)
        return
    child = ET.SubElement(parent, tag)
    _xml_fill(child, value)


def to_xml(data: Any) -> str:
    """
    Serialize under a ``<data>`` root.

    Mappings become child elements, lists repeat their element, and a bare
    scalar or list is wrapped as ``<data><value>...</value></data>``.
    """
    plain = to_plain(data)
    root = ET.Element("data")
    if isinstance(plain, dict):
        _xml_fill(root, plain)
    elif plain is not None:
        _xml_append(root, "value", plain)
    return ET.tostring(root, encoding="unicode")


def _flatten(value: Any, prefix: str, acc: Dict[str, str]) -> None:
    key = prefix or "value"
    if value is None:
        return
    if isinstance(value, bool):
        acc[key] = "true" if value else "false"
    elif isinstance(value, (int, float, str)):
        acc[key] = str(value)
    elif isinstance(value, list):
        acc[key] = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    elif isinstance(value, dict):
        if not value:
            acc[key] = "{}"
        for name, item in value.items():
            _flatten(item, f"{prefix}.{name}" if prefix else name, acc)


def _csv_records(plain: Any) -> List[Any]:
    if isinstance(plain, list):
        return plain
    if isinstance(plain, dict):
        # a mapping with exactly one list of records is treated as that list
        sequences = [
            item for item in plain.values()
            if isinstance(item, list) and item and all(isinstance(entry, dict) for entry in item)
        ]
        if len(sequences) == 1:
            return sequences[0]
    return [plain]


def flatten_for_csv(data: Any) -> Tuple[List[str], List[List[str]]]:
    """
    Return ``(headers, rows)`` for CSV output.

    Each record becomes a row; nested mappings flatten to dotted column
    names and nested lists are JSON-encoded. Headers are sorted.
    """
    records: List[Dict[str, str]] = []
    for record in _csv_records(to_plain(data)):
        flat: Dict[str, str] = {}
        _flatten(record, "", flat)
        records.append(flat)
    headers = sorted({key for record in records for key in record})
    rows = [[record.get(header, "") for header in headers] for record in records]
    return headers, rows


def to_csv(data: Any) -> str:
    headers, rows = flatten_for_csv(data)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


_SERIALIZERS = {
    OutputMode.JSON: to_json,
    OutputMode.YAML: to_yaml,
    OutputMode.XML: to_xml,
    OutputMode.CSV: to_csv,
}


def serialize(data: Any, mode: OutputMode) -> str:
    """
    Serialize ``data`` for a structured ``mode``.

    Raises:
        RenderError: When ``mode`` is not structured or the data cannot be encoded.
    """
    serializer = _SERIALIZERS.get(mode)
    if serializer is None:
        raise RenderError(f"output mode '{mode.value}' is not a structured mode")
    try:
        return serializer(data)
    except (TypeError, ValueError, yaml.YAMLError, csv.Error) as exc:
        raise RenderError(f"{mode.value.upper()} serialization error: {exc}", original_error=exc) from exc
