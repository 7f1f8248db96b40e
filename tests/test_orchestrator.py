"""Tests for asyncapigen.orchestrator."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest
import yaml

from asyncapigen.config import EmitterConfig, InfoConfig
from asyncapigen.errors import EmitterError, ErrorCategory
from asyncapigen.loader import build_program
from asyncapigen.orchestrator import REPORT_DIRNAME, REPORT_FILENAME, Orchestrator
from asyncapigen.validators import StructureValidator, ValidationIssue, ValidationService
from tests._fixtures.program_builder import ProgramBuilder


class _RejectingValidator:
    name = "rejecting"

    def validate(self, document):
        return [ValidationIssue("REJECTED", "Rejected for testing", "info")]


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ASYNCAPIGEN_FILE_TYPE", raising=False)
    monkeypatch.delenv("ASYNCAPIGEN_FAIL_ON_INVALID", raising=False)


def test_emit_builds_a_valid_document_for_the_sample(program_builder: ProgramBuilder) -> None:
    outcome = asyncio.run(Orchestrator().emit(program_builder.build()))

    document = outcome.document
    assert outcome.valid is True
    assert document["asyncapi"] == "3.0.0"
    assert sorted(document["channels"]) == ["orders_created", "receiveuser"]
    assert sorted(document["operations"]) == ["publishOrder", "receiveUser"]
    assert document["operations"]["publishOrder"]["action"] == "send"
    assert document["operations"]["receiveUser"]["action"] == "receive"
    assert sorted(document["components"]["messages"]) == ["OrderCreated", "UserEventMessage"]
    assert document["components"]["securitySchemes"]["orderAuth"]["in"] == "user"
    assert "kafka" in document["servers"]["production"]["bindings"]
    assert [report.stage for report in outcome.reports] == ["operations", "messages", "security", "servers"]


def test_emit_uses_configured_info(program_builder: ProgramBuilder) -> None:
    config = EmitterConfig(info=InfoConfig(title="Orders API", version="2.1.0", description="Order events"))

    outcome = asyncio.run(Orchestrator().emit(program_builder.build(), config))

    assert outcome.document["info"] == {"title": "Orders API", "version": "2.1.0", "description": "Order events"}
    assert outcome.validation is not None
    assert outcome.validation.warnings == []


def test_emit_restricted_plugins_skip_unregistered_bindings(program_builder: ProgramBuilder) -> None:
    config = EmitterConfig(protocol_bindings=["http"])

    outcome = asyncio.run(Orchestrator().emit(program_builder.build(), config))

    channel = outcome.document["channels"]["orders_created"]
    assert "bindings" not in channel
    assert "bindings" not in outcome.document["servers"]["production"]


def test_emit_survives_malformed_server_bindings() -> None:
    program = build_program(
        {
            "servers": [
                {"name": "production", "url": "kafka://broker:9092", "protocol": "kafka", "bindings": {"kafka": None}}
            ],
            "operations": {"publishOrder": {"direction": "publish"}},
        }
    )

    outcome = asyncio.run(Orchestrator().emit(program))

    assert outcome.valid is True
    assert outcome.document["servers"]["production"]["bindings"]["kafka"]["bindingVersion"] == "0.5.0"


def test_emit_with_validation_disabled(program_builder: ProgramBuilder) -> None:
    config = EmitterConfig()
    config.validation.enabled = False

    outcome = asyncio.run(Orchestrator().emit(program_builder.build(), config))

    assert outcome.validation is None
    assert outcome.valid is True


def test_run_emit_writes_document_and_report(program_builder: ProgramBuilder, tmp_path: Path) -> None:
    description = program_builder.write("orders.yaml", program_builder.sample())

    outcome = Orchestrator().run_emit(description, config=EmitterConfig(root=tmp_path), output=tmp_path / "out")

    assert outcome.output_path == tmp_path / "out" / "asyncapi.yaml"
    written = yaml.safe_load(outcome.output_path.read_text(encoding="utf-8"))
    assert written == outcome.document
    report_path = tmp_path / "out" / REPORT_DIRNAME / REPORT_FILENAME
    assert outcome.report_path == report_path
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["status"] == "passed"
    assert report["valid"] is True
    assert report["generated_at"].endswith("Z")
    assert [entry["stage"] for entry in report["processing"]] == ["operations", "messages", "security", "servers"]


def test_run_emit_infers_json_from_output_suffix(program_builder: ProgramBuilder, tmp_path: Path) -> None:
    description = program_builder.write("orders.yaml", program_builder.sample())
    target = tmp_path / "docs" / "orders.json"

    outcome = Orchestrator().run_emit(description, config=EmitterConfig(root=tmp_path), output=target)

    assert outcome.output_path == target
    assert json.loads(target.read_text(encoding="utf-8"))["asyncapi"] == "3.0.0"


def test_run_emit_reads_config_next_to_description(program_builder: ProgramBuilder) -> None:
    description = program_builder.write("orders.yaml", program_builder.sample())
    program_builder.write(
        ".asyncapigen.yml",
        {"info": {"title": "Configured"}, "output": {"file": "orders", "file_type": "json", "dir": "generated"}},
    )

    outcome = Orchestrator().run_emit(description)

    assert outcome.output_path == program_builder.root.resolve() / "generated" / "orders.json"
    assert outcome.document["info"]["title"] == "Configured"


def test_run_emit_env_override_selects_file_type(
    program_builder: ProgramBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("ASYNCAPIGEN_FILE_TYPE", "json")
    description = program_builder.write("orders.yaml", program_builder.sample())

    outcome = Orchestrator().run_emit(description, output=tmp_path / "out")

    assert outcome.output_path == tmp_path / "out" / "asyncapi.json"


def test_fail_on_invalid_blocks_the_write_but_keeps_the_report(
    program_builder: ProgramBuilder, tmp_path: Path
) -> None:
    description = program_builder.write("orders.yaml", program_builder.sample())
    orchestrator = Orchestrator(validation=ValidationService([StructureValidator(), _RejectingValidator()]))

    with pytest.raises(EmitterError) as excinfo:
        orchestrator.run_emit(
            description,
            config=EmitterConfig(root=tmp_path),
            output=tmp_path / "out",
            fail_on_invalid=True,
        )

    assert excinfo.value.category is ErrorCategory.VALIDATION
    assert excinfo.value.code == "DOCUMENT_INVALID"
    assert not (tmp_path / "out" / "asyncapi.yaml").exists()
    report = json.loads((tmp_path / "out" / REPORT_DIRNAME / REPORT_FILENAME).read_text(encoding="utf-8"))
    assert report["status"] == "failed"
    assert report["errors"][0]["code"] == "REJECTED"


def test_invalid_document_is_still_written_by_default(program_builder: ProgramBuilder, tmp_path: Path) -> None:
    description = program_builder.write("orders.yaml", program_builder.sample())
    orchestrator = Orchestrator(validation=ValidationService([_RejectingValidator()]))

    outcome = orchestrator.run_emit(description, config=EmitterConfig(root=tmp_path), output=tmp_path / "out")

    assert outcome.valid is False
    assert outcome.output_path is not None and outcome.output_path.exists()


def test_skip_validation_writes_no_report(program_builder: ProgramBuilder, tmp_path: Path) -> None:
    description = program_builder.write("orders.yaml", program_builder.sample())

    outcome = Orchestrator().run_emit(
        description,
        config=EmitterConfig(root=tmp_path),
        output=tmp_path / "out",
        skip_validation=True,
    )

    assert outcome.validation is None
    assert outcome.report_path is None
    assert not (tmp_path / "out" / REPORT_DIRNAME).exists()
    assert outcome.output_path.exists()


def test_missing_description_is_a_compilation_error(tmp_path: Path) -> None:
    with pytest.raises(EmitterError) as excinfo:
        Orchestrator().run_emit(tmp_path / "missing.yaml", config=EmitterConfig(root=tmp_path))

    assert excinfo.value.category is ErrorCategory.COMPILATION


def test_validate_file_reads_serialized_documents(program_builder: ProgramBuilder, tmp_path: Path) -> None:
    description = program_builder.write("orders.yaml", program_builder.sample())
    outcome = Orchestrator().run_emit(description, config=EmitterConfig(root=tmp_path), output=tmp_path / "out")

    result = Orchestrator().validate_file(outcome.output_path)

    assert result.valid is True
    assert result.metrics["channels"] == 2


def test_validate_file_missing_path_is_an_io_error(tmp_path: Path) -> None:
    with pytest.raises(EmitterError) as excinfo:
        Orchestrator().validate_file(tmp_path / "nope.yaml")

    assert excinfo.value.category is ErrorCategory.IO
