"""Structured output modes serialize handler data directly."""

from __future__ import annotations

import csv
import datetime as dt
import enum
import io
import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

import pytest
import yaml

from src.standout.errors import RenderError
from src.standout.output import OutputMode
from src.standout.template.serialize import flatten_for_csv, serialize, to_plain, xml_name


class Status(enum.Enum):
    OPEN = "open"


@dataclass
class Item:
    name: str
    status: Status
    due: dt.date
    path: Path


def test_to_plain_converts_rich_values() -> None:
    item = Item("a", Status.OPEN, dt.date(2024, 5, 1), Path("/tmp/x"))

    assert to_plain({"item": item, "tags": ("x", "y")}) == {
        "item": {"name": "a", "status": "open", "due": "2024-05-01", "path": "/tmp/x"},
        "tags": ["x", "y"],
    }


def test_json_and_yaml_keep_structure() -> None:
    data = {"name": "build", "count": 2, "tags": ["ci"]}

    assert json.loads(serialize(data, OutputMode.JSON)) == data
    assert yaml.safe_load(serialize(data, OutputMode.YAML)) == data


def test_xml_uses_data_root_and_repeats_list_elements() -> None:
    output = serialize({"item": [{"id": 1}, {"id": 2}], "my key": True}, OutputMode.XML)
    root = ET.fromstring(output)

    assert root.tag == "data"
    assert [child.findtext("id") for child in root.findall("item")] == ["1", "2"]
    assert root.findtext("my_key") == "true"


def test_xml_wraps_scalars() -> None:
    assert serialize(5, OutputMode.XML) == "<data><value>5</value></data>"


@pytest.mark.parametrize(("raw", "expected"), [("1abc", "_1abc"), ("a b", "a_b"), ("", "_"), ("ok", "ok")])
def test_xml_name(raw: str, expected: str) -> None:
    assert xml_name(raw) == expected


def test_csv_flattens_nested_records() -> None:
    rows = [
        {"name": "a", "owner": {"login": "x"}, "tags": ["p", "q"]},
        {"name": "b", "done": True},
    ]

    headers, values = flatten_for_csv(rows)

    assert headers == ["done", "name", "owner.login", "tags"]
    assert values == [["", "a", "x", '["p","q"]'], ["true", "b", "", ""]]


def test_csv_uses_the_single_record_list_of_a_mapping() -> None:
    output = serialize({"total": 2, "items": [{"id": 1}, {"id": 2}]}, OutputMode.CSV)

    assert list(csv.reader(io.StringIO(output))) == [["id"], ["1"], ["2"]]


def test_csv_single_mapping_is_one_row() -> None:
    assert serialize({"a": 1, "b": "x"}, OutputMode.CSV) == "a,b\n1,x\n"


def test_serialize_rejects_text_modes() -> None:
    with pytest.raises(RenderError):
        serialize({}, OutputMode.TERM)
