"""Shared batch processing for document-building stages."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Mapping, Sequence, TypeVar

from ..document import DocumentBuilder
from ..errors import EmitterError
from ..logging import get_logger
from ..models import Document
from ..plugins import ProtocolPluginRegistry

T = TypeVar("T")


@dataclass
class ProcessingReport:
    """Outcome of one processing stage.

    ``processed`` counts the elements incorporated into the document;
    ``failures`` holds the errors of the elements that were skipped.
    """

    stage: str
    processed: int = 0
    keys: List[str] = field(default_factory=list)
    failures: List[EmitterError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "processed": self.processed,
            "failed": self.failed,
            "keys": list(self.keys),
            "warnings": list(self.warnings),
            "failures": [failure.to_dict() for failure in self.failures],
        }


class ProcessingService(ABC, Generic[T]):
    """Fans a batch out as concurrent tasks and collects successes and failures.

    Each element writes to its own document keys, so tasks never need locks.
    Workers finish all awaited work before touching the document.
    """

    stage: str = "processing"

    def __init__(self) -> None:
        self.logger = get_logger(f"processing.{self.stage}")

    async def process(
        self,
        elements: Sequence[T],
        document: Document,
        registry: ProtocolPluginRegistry,
    ) -> ProcessingReport:
        DocumentBuilder.initialize_document_structure(document)
        items = list(elements)
        self.logger.info("Processing %d %s", len(items), self.stage)
        results = await asyncio.gather(
            *(self.process_one(item, document, registry) for item in items),
            return_exceptions=True,
        )

        report = ProcessingReport(stage=self.stage)
        for item, result in zip(items, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                error = EmitterError.wrap(
                    result,
                    context={"stage": self.stage, "element": self.describe(item)},
                    recoverable=True,
                )
                report.failures.append(error)
                message = f"Skipped {self.describe(item)}: {error.message}"
                report.warnings.append(message)
                self.logger.warning("%s (%s)", message, error.category.value)
                continue
            report.processed += 1
            report.keys.append(result)

        self.logger.info(
            "Processed %d/%d %s",
            report.processed,
            len(items),
            self.stage,
        )
        return report

    @abstractmethod
    async def process_one(self, element: T, document: Document, registry: ProtocolPluginRegistry) -> str:
        """Incorporate one element and return the document key it wrote."""

    def describe(self, element: T) -> str:
        return str(getattr(element, "name", element))


def merge_bindings(target: Dict[str, Any], fragment: Mapping[str, Any] | None) -> None:
    """Merge a binding fragment into ``target['bindings']``; later keys win."""
    if not fragment:
        return
    bindings = target.setdefault("bindings", {})
    for protocol, binding in fragment.items():
        bindings[protocol] = dict(binding) if isinstance(binding, Mapping) else binding


__all__ = ["ProcessingReport", "ProcessingService", "merge_bindings"]
