"""Tests for the AsyncAPI document validators."""

from __future__ import annotations

import asyncio
import json

import pytest

from asyncapigen.document import DocumentBuilder
from asyncapigen.models import MessageModel, Operation
from asyncapigen.plugins import ProtocolPluginRegistry
from asyncapigen.processing import MessageProcessingService, OperationProcessingService
from asyncapigen.validators import (
    ReferenceValidator,
    StructureValidator,
    ValidationIssue,
    ValidationService,
    render_report,
)


def _document(**overrides) -> dict:
    document = {
        "asyncapi": "3.0.0",
        "info": {"title": "Orders", "version": "1.0.0", "description": "Order events"},
        "channels": {"bar": {"address": "/bar"}},
        "operations": {"sendBar": {"action": "send", "channel": {"$ref": "#/channels/bar"}}},
        "components": {"schemas": {}, "messages": {}, "securitySchemes": {}},
    }
    document.update(overrides)
    return document


class _ExplodingValidator:
    name = "exploding"

    def validate(self, document):
        raise RuntimeError("validator crashed")


def test_valid_document_passes_with_metrics() -> None:
    result = ValidationService().validate(_document())

    assert result.valid is True
    assert result.errors == []
    assert result.metrics["channels"] == 1
    assert result.metrics["operations"] == 1
    assert result.metrics["messages"] == 0
    assert "duration_ms" in result.metrics
    assert result.summary.startswith("Document is valid")


def test_missing_channel_reference_yields_one_error_naming_it() -> None:
    document = _document(operations={"sendFoo": {"action": "send", "channel": {"$ref": "#/channels/foo"}}})

    result = ValidationService().validate(document)

    assert result.valid is False
    assert len(result.errors) == 1
    assert "foo" in result.errors[0].message
    assert result.errors[0].code == "UNRESOLVED_CHANNEL_REF"


def test_missing_message_reference_is_an_error() -> None:
    document = _document(
        channels={"bar": {"address": "/bar", "messages": {"Gone": {"$ref": "#/components/messages/Gone"}}}}
    )

    result = ValidationService().validate(document)

    assert [issue.code for issue in result.errors] == ["UNRESOLVED_MESSAGE_REF"]
    assert "Gone" in result.errors[0].message


@pytest.mark.parametrize("ref", ["#/components/channels/foo", "other.yaml#/channels/bar", "#/channels/"])
def test_channel_refs_outside_local_channels_are_errors(ref: str) -> None:
    document = _document(operations={"sendFoo": {"action": "send", "channel": {"$ref": ref}}})

    result = ValidationService().validate(document)

    assert result.valid is False
    assert [issue.code for issue in result.errors] == ["UNRESOLVED_CHANNEL_REF"]
    assert result.errors[0].path == "operations.sendFoo.channel"


@pytest.mark.parametrize("ref", ["#/components/schemas/Missing", "events.yaml#/components/messages/Gone"])
def test_message_refs_outside_component_messages_are_errors(ref: str) -> None:
    document = _document(channels={"bar": {"address": "/bar", "messages": {"Gone": {"$ref": ref}}}})

    result = ValidationService().validate(document)

    assert result.valid is False
    assert [issue.code for issue in result.errors] == ["UNRESOLVED_MESSAGE_REF"]
    assert ref in result.errors[0].message


def test_structural_and_reference_errors_accumulate() -> None:
    document = _document(
        asyncapi="2.6.0",
        info={"title": "", "version": "1.0.0"},
        operations={"op": {"action": "send", "channel": {"$ref": "#/channels/missing"}}},
    )

    result = ValidationService().validate(document)

    codes = sorted(issue.code for issue in result.errors)
    assert codes == ["MISSING_FIELD", "UNRESOLVED_CHANNEL_REF", "UNSUPPORTED_VERSION"]


def test_missing_top_level_fields_are_reported_per_field() -> None:
    result = ValidationService().validate({"channels": {}, "operations": {}})

    paths = sorted(issue.path for issue in result.errors)
    assert paths == ["asyncapi", "info"]


def test_structural_oddities_are_warnings_only() -> None:
    document = _document(
        info={"title": "Orders", "version": "1.0.0"},
        channels={"bar": {"address": "/bar"}, "noAddress": {}},
        operations={
            "sendBar": {"action": "publish", "channel": {"$ref": "#/channels/bar"}},
            "floating": {"action": "send"},
        },
        components={"schemas": {}, "messages": {"Unnamed": {}}, "securitySchemes": {}},
    )

    result = ValidationService().validate(document)

    assert result.valid is True
    warning_codes = {issue.code for issue in result.warnings}
    assert {
        "MISSING_DESCRIPTION",
        "MISSING_ADDRESS",
        "INVALID_ACTION",
        "MISSING_CHANNEL",
        "MISSING_MESSAGE_NAME",
    } <= warning_codes


def test_references_are_checked_one_hop_only() -> None:
    document = _document(channels={"bar": {"$ref": "#/components/channels/bar"}})

    result = ValidationService().validate(document)

    assert result.valid is True
    assert any(issue.code == "REFERENCE_SKIPPED" for issue in result.warnings)


def test_escaped_pointer_tokens_resolve() -> None:
    document = _document(
        channels={"a/b": {"address": "/a/b"}},
        operations={"op": {"action": "send", "channel": {"$ref": "#/channels/a~1b"}}},
    )

    assert ValidationService().validate(document).valid is True


def test_crashing_validator_becomes_system_error_issue() -> None:
    service = ValidationService([StructureValidator(), _ExplodingValidator(), ReferenceValidator()])

    result = service.validate(_document())

    assert result.valid is False
    assert [issue.code for issue in result.errors] == ["system_error"]
    assert "validator crashed" in result.errors[0].message


def test_validate_content_reports_parse_failures_as_io_errors() -> None:
    result = ValidationService().validate_content("{broken", "json")

    assert result.valid is False
    assert result.errors[0].code == "io_error"


def test_validate_content_parses_serialized_documents() -> None:
    text = json.dumps(_document())

    assert ValidationService().validate_content(text, "json").valid is True


def test_processed_documents_satisfy_cross_reference_law(registry: ProtocolPluginRegistry) -> None:
    document = DocumentBuilder().create_initial_document()
    operations = [
        Operation(name="publishOrder", channel="/orders", message="OrderCreated"),
        Operation(name="onUser", direction="subscribe"),
    ]
    messages = [MessageModel(name="OrderCreated")]

    async def _run() -> None:
        await OperationProcessingService().process(operations, document, registry)
        await MessageProcessingService().process(messages, document, registry)

    asyncio.run(_run())
    result = ValidationService().validate(document)

    assert result.errors == []
    channels = document["channels"]
    for operation in document["operations"].values():
        assert operation["channel"]["$ref"].rsplit("/", 1)[-1] in channels
    for channel in channels.values():
        for ref in channel.get("messages", {}).values():
            assert ref["$ref"].rsplit("/", 1)[-1] in document["components"]["messages"]


def test_render_report_lists_errors_and_warnings() -> None:
    result = ValidationService().validate(_document(asyncapi="2.0.0", info={"title": "t", "version": "1"}))

    report = render_report(result)

    assert report.splitlines()[0] == result.summary
    assert "Errors:" in report
    assert "UNSUPPORTED_VERSION at asyncapi" in report
    assert "Warnings:" in report
    assert "Metrics: channels=1" in report


def test_validation_issue_string_includes_path() -> None:
    assert str(ValidationIssue("X", "bad", "info.title")) == "X at info.title: bad"
    assert str(ValidationIssue("X", "bad")) == "X: bad"
