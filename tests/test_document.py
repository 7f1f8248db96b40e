"""Tests for asyncapigen.document."""

from __future__ import annotations

import logging

from asyncapigen.document import DocumentBuilder
from asyncapigen.loader import build_program
from tests._fixtures.program_builder import ProgramBuilder


def test_initial_document_has_pinned_version_and_containers() -> None:
    document = DocumentBuilder().create_initial_document()

    assert document["asyncapi"] == "3.0.0"
    assert document["info"] == {"title": "AsyncAPI Specification", "version": "1.0.0"}
    assert document["channels"] == {}
    assert document["operations"] == {}
    assert document["components"] == {"schemas": {}, "messages": {}, "securitySchemes": {}}
    assert "servers" not in document


def test_initial_document_uses_configured_info() -> None:
    builder = DocumentBuilder(title="Orders", version="2.0.0", description="Order events")

    document = builder.create_initial_document()

    assert document["info"] == {"title": "Orders", "version": "2.0.0", "description": "Order events"}


def test_servers_are_collected_from_namespaces(program_builder: ProgramBuilder) -> None:
    document = DocumentBuilder().create_initial_document(program_builder.build())

    assert document["servers"] == {
        "production": {
            "host": "broker.example.com:9092",
            "protocol": "kafka",
            "description": "Production cluster",
        }
    }


def test_server_mapping_form_and_malformed_entries(caplog) -> None:
    program = build_program(
        {
            "servers": {
                "ws": {"url": "wss://stream.example.com/live", "protocol": "WSS"},
                "broken": {"protocol": "kafka"},
            }
        }
    )

    with caplog.at_level(logging.WARNING, logger="asyncapigen"):
        servers = DocumentBuilder().build_servers(program)

    assert [server.name for server in servers] == ["ws"]
    assert servers[0].protocol == "wss"
    assert "name, url and protocol are required" in caplog.text

    document = DocumentBuilder().create_initial_document(servers=servers)
    assert document["servers"]["ws"] == {"host": "stream.example.com", "protocol": "wss", "pathname": "/live"}


def test_non_mapping_server_bindings_are_dropped_with_warning(caplog) -> None:
    program = build_program(
        {
            "servers": [
                {
                    "name": "production",
                    "url": "kafka://broker:9092",
                    "protocol": "kafka",
                    "bindings": {"kafka": None, "http": {"method": "GET"}},
                },
                {"name": "edge", "url": "edge:9092", "protocol": "kafka", "bindings": ["kafka"]},
            ]
        }
    )

    with caplog.at_level(logging.WARNING, logger="asyncapigen"):
        document = DocumentBuilder().create_initial_document(program)

    assert document["servers"]["production"]["bindings"] == {"http": {"method": "GET"}}
    assert "bindings" not in document["servers"]["edge"]
    assert "Ignoring kafka binding on server 'production'" in caplog.text
    assert "Ignoring bindings on server 'edge'" in caplog.text


def test_structure_helpers_are_idempotent() -> None:
    document = {"asyncapi": "3.0.0", "info": {"title": "t", "version": "1"}, "components": {"schemas": {"A": {}}}}

    DocumentBuilder.initialize_document_structure(document)
    DocumentBuilder.initialize_document_structure(document)

    assert document["channels"] == {}
    assert document["components"] == {"schemas": {"A": {}}, "messages": {}, "securitySchemes": {}}

    builder = DocumentBuilder()
    builder.update_document_info(document, description="Added", title=None)
    assert document["info"] == {"title": "t", "version": "1", "description": "Added"}
