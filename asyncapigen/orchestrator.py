"""Pipeline orchestration: discovery, document building, processing, validation, output."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .config import EmitterConfig, apply_env_overrides, load_config
from .discovery import DiscoveryService
from .document import DocumentBuilder
from .errors import EmitterError, ErrorCategory
from .loader import load_program
from .logging import enable_debug, get_logger
from .models import DiscoveryResult, Document, ServerDeclaration
from .plugins import ProtocolPluginRegistry, create_default_registry
from .processing import (
    MessageProcessingService,
    OperationProcessingService,
    ProcessingReport,
    SecurityProcessingService,
    ServerBindingService,
)
from .program import ProgramSource
from .schema import SchemaConverter
from .serialization import file_type_for, output_path, write_document
from .validators import ValidationResult, ValidationService

REPORT_DIRNAME = ".asyncapigen"
REPORT_FILENAME = "validation.json"


@dataclass
class EmissionOutcome:
    """Result of one emission run."""

    document: Document
    validation: Optional[ValidationResult] = None
    reports: List[ProcessingReport] = field(default_factory=list)
    output_path: Optional[Path] = None
    report_path: Optional[Path] = None

    @property
    def valid(self) -> bool:
        return self.validation is None or self.validation.valid

    @property
    def warnings(self) -> List[str]:
        return [warning for report in self.reports for warning in report.warnings]


class Orchestrator:
    """Coordinates the emission pipeline.

    Every collaborator can be injected; missing ones are built per run from
    the effective configuration so that no state leaks between runs.
    """

    def __init__(
        self,
        registry: ProtocolPluginRegistry | None = None,
        discovery: DiscoveryService | None = None,
        builder: DocumentBuilder | None = None,
        validation: ValidationService | None = None,
        registry_factory: Callable[[Sequence[str] | None], ProtocolPluginRegistry] | None = None,
    ) -> None:
        self.registry = registry
        self.discovery = discovery or DiscoveryService()
        self.builder = builder
        self.validation = validation or ValidationService()
        self.registry_factory = registry_factory or create_default_registry
        self.logger = get_logger("orchestrator")

    async def emit(self, program: ProgramSource, config: EmitterConfig | None = None) -> EmissionOutcome:
        """Build and validate a document without touching the filesystem."""
        config = config or EmitterConfig()
        registry = self.registry or self.registry_factory(config.protocol_bindings or None)
        builder = self.builder or DocumentBuilder(
            title=config.info.title,
            version=config.info.version,
            description=config.info.description,
        )
        self.logger.info("Starting emission with plugins: %s", ", ".join(registry.names()) or "none")

        discovered, (document, servers) = await asyncio.gather(
            self._discover(program),
            self._build_skeleton(builder, program),
        )

        converter = SchemaConverter(program)
        stages = await asyncio.gather(
            OperationProcessingService().process(discovered.operations, document, registry),
            MessageProcessingService(converter).process(discovered.message_models, document, registry),
            SecurityProcessingService(config.security.key_strategy).process(
                discovered.security_configs, document, registry
            ),
        )
        reports = list(stages)
        reports.append(await ServerBindingService().process(servers, document, registry))

        for report in reports:
            if report.failed:
                self.logger.warning("%s stage skipped %d element(s)", report.stage, report.failed)

        validation = None
        if config.validation.enabled:
            validation = self.validation.validate(document)
        else:
            self.logger.info("Validation disabled; skipping")
        return EmissionOutcome(document=document, validation=validation, reports=reports)

    def run_emit(
        self,
        description: Path | str,
        *,
        config: EmitterConfig | None = None,
        output: Path | str | None = None,
        file_type: str | None = None,
        fail_on_invalid: bool | None = None,
        skip_validation: bool = False,
    ) -> EmissionOutcome:
        """Emit a document for the API description at ``description`` and write it."""
        description_path = Path(description).expanduser().resolve()
        if config is None:
            config = apply_env_overrides(load_config(description_path.parent))
        if file_type:
            config.output.file_type = file_type
        elif output is not None and Path(output).suffix:
            config.output.file_type = file_type_for(Path(output))
        if fail_on_invalid is not None:
            config.validation.fail_on_invalid = fail_on_invalid
        if skip_validation:
            config.validation.enabled = False
        if config.debug:
            enable_debug()

        self.logger.info("Starting emit run for %s", description_path)
        program = load_program(description_path)
        outcome = asyncio.run(self.emit(program, config))

        target = self._resolve_output(config, output)
        if outcome.validation is not None and config.validation.report:
            outcome.report_path = self._write_validation_report(target.parent, outcome.validation, outcome.reports)

        if outcome.validation is not None and not outcome.validation.valid and config.validation.fail_on_invalid:
            raise EmitterError(
                ErrorCategory.VALIDATION,
                "DOCUMENT_INVALID",
                outcome.validation.summary,
                details={"errors": [issue.to_dict() for issue in outcome.validation.errors]},
                recoverable=False,
            )

        outcome.output_path = write_document(outcome.document, target, config.output.file_type)
        return outcome

    def validate_file(self, path: Path | str) -> ValidationResult:
        """Validate a serialized AsyncAPI document on disk."""
        document_path = Path(path).expanduser()
        try:
            text = document_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise EmitterError(
                ErrorCategory.IO,
                "DOCUMENT_UNREADABLE",
                f"Unable to read {document_path}: {exc}",
                context={"path": str(document_path)},
            ) from exc
        return self.validation.validate_content(text, file_type_for(document_path))

    async def _discover(self, program: ProgramSource) -> DiscoveryResult:
        try:
            return self.discovery.execute_discovery(program)
        except EmitterError:
            raise
        except Exception as exc:
            self._log_exception("Discovery failed", exc)
            raise EmitterError.wrap(exc, code="DISCOVERY_FAILED", recoverable=False) from exc

    async def _build_skeleton(
        self, builder: DocumentBuilder, program: ProgramSource
    ) -> Tuple[Document, List[ServerDeclaration]]:
        try:
            servers = builder.build_servers(program)
            return builder.create_initial_document(servers=servers), servers
        except EmitterError:
            raise
        except Exception as exc:
            self._log_exception("Document skeleton construction failed", exc)
            raise EmitterError.wrap(exc, code="DOCUMENT_BUILD_FAILED", recoverable=False) from exc

    @staticmethod
    def _resolve_output(config: EmitterConfig, output: Path | str | None) -> Path:
        if output is None:
            return output_path(config.output_dir, config.output.file, config.output.file_type)
        target = Path(output).expanduser()
        if target.is_dir() or not target.suffix:
            return output_path(target, config.output.file, config.output.file_type)
        return target

    def _write_validation_report(
        self,
        output_dir: Path,
        validation: ValidationResult,
        reports: Sequence[ProcessingReport],
    ) -> Optional[Path]:
        report_dir = output_dir / REPORT_DIRNAME
        report_path = report_dir / REPORT_FILENAME
        payload = {
            "status": "passed" if validation.valid else "failed",
            **validation.to_dict(),
            "processing": [report.to_dict() for report in reports],
            "generated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        try:
            report_dir.mkdir(parents=True, exist_ok=True)
            report_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        except OSError:
            self.logger.debug("Unable to write validation report", exc_info=True)
            return None
        self.logger.debug("Wrote validation report to %s", report_path)
        return report_path

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


__all__ = ["EmissionOutcome", "Orchestrator", "REPORT_DIRNAME", "REPORT_FILENAME"]
