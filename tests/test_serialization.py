"""Tests for asyncapigen.serialization."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from asyncapigen.errors import EmitterError, ErrorCategory
from asyncapigen.serialization import dump_document, load_document, output_path, write_document

_DOCUMENT = {
    "asyncapi": "3.0.0",
    "info": {"title": "Orders", "version": "1.0.0"},
    "channels": {"orders": {"address": "/orders", "bindings": {"kafka": {"topic": "orders", "partitions": 3}}}},
    "operations": {"publishOrder": {"action": "send", "channel": {"$ref": "#/channels/orders"}}},
    "components": {"schemas": {}, "messages": {"Ünïcode": {"name": "Ünïcode", "examples": [{"payload": 1.5}]}}, "securitySchemes": {}},
}


def test_json_to_yaml_round_trip_is_structurally_equal() -> None:
    as_json = dump_document(_DOCUMENT, "json")
    from_json = load_document(as_json, "json")
    as_yaml = dump_document(from_json, "yaml")

    assert load_document(as_yaml, "yaml") == _DOCUMENT


def test_yaml_output_keeps_insertion_order() -> None:
    text = dump_document(_DOCUMENT, "yml")

    assert text.splitlines()[0] == "asyncapi: 3.0.0"
    assert list(yaml.safe_load(text)) == list(_DOCUMENT)


def test_json_output_is_indented() -> None:
    text = dump_document(_DOCUMENT, "json")

    assert text.startswith('{\n  "asyncapi": "3.0.0"')
    assert json.loads(text) == _DOCUMENT


def test_unsupported_file_type_is_a_configuration_error() -> None:
    with pytest.raises(EmitterError) as excinfo:
        dump_document(_DOCUMENT, "toml")

    assert excinfo.value.category is ErrorCategory.CONFIGURATION


def test_load_document_rejects_non_mapping() -> None:
    with pytest.raises(EmitterError) as excinfo:
        load_document("- 1\n- 2\n", "yaml")

    assert excinfo.value.category is ErrorCategory.IO


def test_write_document_creates_parent_directories(tmp_path: Path) -> None:
    target = output_path(tmp_path / "out" / "nested", "asyncapi", "json")

    written = write_document(_DOCUMENT, target)

    assert written == tmp_path / "out" / "nested" / "asyncapi.json"
    assert json.loads(written.read_text(encoding="utf-8")) == _DOCUMENT


def test_write_document_io_failure_is_reported(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(EmitterError) as excinfo:
        write_document(_DOCUMENT, blocker / "asyncapi.yaml")

    assert excinfo.value.category is ErrorCategory.IO
    assert excinfo.value.code == "DOCUMENT_WRITE_FAILED"
