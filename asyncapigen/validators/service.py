"""Validation entry point combining the structural and reference checks."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..errors import EmitterError, ErrorCategory
from ..logging import get_logger
from ..models import Document
from ..serialization import load_document
from .base import WARNING, ValidationIssue, ValidationResult, Validator, section
from .references import ReferenceValidator
from .structure import StructureValidator


class ValidationService:
    """Runs every configured validator and folds the findings into one result.

    Validators never short-circuit each other, and the service never raises:
    a validator that fails is itself reported as a ``system_error`` issue.
    """

    def __init__(self, validators: Optional[Sequence[Validator]] = None) -> None:
        if validators is None:
            validators = [StructureValidator(), ReferenceValidator()]
        self.validators: List[Validator] = list(validators)
        self.logger = get_logger("validation")

    def validate(self, document: Document) -> ValidationResult:
        started = time.perf_counter()
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        if not isinstance(document, Mapping):
            errors.append(ValidationIssue("INVALID_DOCUMENT", "Document must be an object"))
        else:
            for validator in self.validators:
                for issue in self._run(validator, document):
                    (warnings if issue.severity == WARNING else errors).append(issue)

        metrics = collect_metrics(document if isinstance(document, Mapping) else {})
        metrics["duration_ms"] = round((time.perf_counter() - started) * 1000, 3)
        result = ValidationResult(
            valid=not errors,
            errors=errors,
            warnings=warnings,
            summary=_summary(errors, warnings),
            metrics=metrics,
        )

        if result.valid:
            self.logger.info(result.summary)
        else:
            self.logger.error(result.summary)
            for issue in errors:
                self.logger.error("  %s", issue)
        for issue in warnings:
            self.logger.debug("  %s", issue)
        return result

    def validate_content(self, text: str, file_type: str = "yaml") -> ValidationResult:
        """Parse serialized content and validate it; parse failures yield an invalid result."""
        try:
            document = load_document(text, file_type)
        except EmitterError as exc:
            issue = ValidationIssue(exc.category.value, exc.message)
            self.logger.error("Unable to validate content: %s", exc.message)
            return ValidationResult(
                valid=False,
                errors=[issue],
                summary=_summary([issue], []),
                metrics={"duration_ms": 0.0},
            )
        return self.validate(document)

    def _run(self, validator: Validator, document: Document) -> List[ValidationIssue]:
        name = getattr(validator, "name", validator.__class__.__name__)
        try:
            return list(validator.validate(document))
        except Exception as exc:
            self.logger.exception("Validator %s failed", name)
            return [
                ValidationIssue(
                    ErrorCategory.SYSTEM.value,
                    f"Validator '{name}' failed: {exc}",
                )
            ]


def collect_metrics(document: Mapping[str, Any]) -> Dict[str, Any]:
    components = section(document, "components")
    return {
        "channels": len(section(document, "channels")),
        "operations": len(section(document, "operations")),
        "messages": len(section(components, "messages")),
        "schemas": len(section(components, "schemas")),
        "securitySchemes": len(section(components, "securitySchemes")),
        "servers": len(section(document, "servers")),
    }


def render_report(result: ValidationResult) -> str:
    """Render a validation result as a multi-line human-readable report."""
    lines = [result.summary]
    if result.errors:
        lines.append("Errors:")
        lines.extend(f"  - {issue}" for issue in result.errors)
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(f"  - {issue}" for issue in result.warnings)
    counts = ", ".join(f"{key}={value}" for key, value in result.metrics.items() if key != "duration_ms")
    if counts:
        lines.append(f"Metrics: {counts}")
    return "\n".join(lines)


def _summary(errors: Sequence[ValidationIssue], warnings: Sequence[ValidationIssue]) -> str:
    if errors:
        return f"Document is invalid: {len(errors)} error(s), {len(warnings)} warning(s)"
    return f"Document is valid: 0 errors, {len(warnings)} warning(s)"


__all__ = ["ValidationService", "collect_metrics", "render_report"]
