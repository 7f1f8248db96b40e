"""Core validation data structures."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Protocol

from ..models import Document

ERROR = "error"
WARNING = "warning"


@dataclass
class ValidationIssue:
    """A single finding about an AsyncAPI document.

    ``path`` is a dotted location inside the document (``operations.send``)
    and is empty for document-level findings.
    """

    code: str
    message: str
    path: str = ""
    severity: str = ERROR

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __str__(self) -> str:
        location = f" at {self.path}" if self.path else ""
        return f"{self.code}{location}: {self.message}"


@dataclass
class ValidationResult:
    """Outcome of validating one document; ``valid`` is true when ``errors`` is empty."""

    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    summary: str = ""
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "summary": self.summary,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "metrics": dict(self.metrics),
        }


class Validator(Protocol):
    """Protocol implemented by document validators."""

    name: str

    def validate(self, document: Document) -> List[ValidationIssue]:
        """Run validation and return any issues; never mutate ``document``."""


def section(document: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Return ``document[key]`` when it is a mapping, else an empty mapping."""
    value = document.get(key)
    return value if isinstance(value, Mapping) else {}


def unescape_pointer(token: str) -> str:
    """Decode one JSON pointer reference token."""
    return token.replace("~1", "/").replace("~0", "~")


__all__ = [
    "ERROR",
    "WARNING",
    "ValidationIssue",
    "ValidationResult",
    "Validator",
    "section",
    "unescape_pointer",
]
