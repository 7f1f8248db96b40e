"""Error taxonomy shared by every pipeline stage."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ErrorCategory(str, Enum):
    """Discriminant for :class:`EmitterError`."""

    VALIDATION = "validation_error"
    TYPE = "type_error"
    COMPILATION = "compilation_error"
    IO = "io_error"
    PLUGIN = "plugin_error"
    CONFIGURATION = "configuration_error"
    SYSTEM = "system_error"


_FATAL_BY_DEFAULT = frozenset({ErrorCategory.COMPILATION, ErrorCategory.SYSTEM})


class EmitterError(RuntimeError):
    """Single error type raised across discovery, processing, plugins and output.

    Callers branch on ``category`` rather than on subclasses. ``recoverable``
    defaults to ``False`` for compilation and system errors and ``True`` for
    everything else; call sites may override it (I/O failures are fatal when
    writing the final document but recoverable for best-effort reports).
    """

    def __init__(
        self,
        category: ErrorCategory,
        code: str,
        message: str,
        *,
        details: Optional[Mapping[str, Any]] = None,
        context: Optional[Mapping[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.category = ErrorCategory(category)
        self.code = code
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        self.context: Dict[str, Any] = dict(context or {})
        self.timestamp = datetime.now(UTC)
        if recoverable is None:
            recoverable = self.category not in _FATAL_BY_DEFAULT
        self.recoverable = recoverable

    def __str__(self) -> str:
        return f"[{self.category.value}:{self.code}] {self.message}"

    @classmethod
    def wrap(
        cls,
        exc: BaseException,
        *,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        code: str = "UNEXPECTED_ERROR",
        context: Optional[Mapping[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ) -> "EmitterError":
        """Return ``exc`` unchanged when already classified, else wrap it."""
        if isinstance(exc, EmitterError):
            if context:
                exc.context.update(context)
            return exc
        error = cls(
            category,
            code,
            str(exc) or exc.__class__.__name__,
            details={"exception": exc.__class__.__name__},
            context=context,
            recoverable=recoverable,
        )
        error.__cause__ = exc
        return error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "code": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
            "details": dict(self.details),
            "context": dict(self.context),
        }


__all__ = ["EmitterError", "ErrorCategory"]
