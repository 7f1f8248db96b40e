"""Validation package for generated AsyncAPI documents."""

from .base import ERROR, WARNING, ValidationIssue, ValidationResult, Validator
from .references import ReferenceValidator
from .service import ValidationService, collect_metrics, render_report
from .structure import StructureValidator

__all__ = [
    "ERROR",
    "WARNING",
    "ReferenceValidator",
    "StructureValidator",
    "ValidationIssue",
    "ValidationResult",
    "ValidationService",
    "Validator",
    "collect_metrics",
    "render_report",
]
