"""Reading and writing AsyncAPI documents as JSON or YAML."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml

from .errors import EmitterError, ErrorCategory
from .logging import get_logger
from .models import Document

FILE_TYPES = ("yaml", "json")

_EXTENSIONS = {"yaml": ".yaml", "json": ".json"}


def normalize_file_type(file_type: str) -> str:
    value = (file_type or "").strip().lower()
    if value == "yml":
        value = "yaml"
    if value not in FILE_TYPES:
        raise EmitterError(
            ErrorCategory.CONFIGURATION,
            "UNSUPPORTED_FILE_TYPE",
            f"Unsupported file type '{file_type}'; expected one of {', '.join(FILE_TYPES)}",
        )
    return value


def file_type_for(path: Path) -> str:
    """Guess the file type from a path suffix; YAML unless the suffix is ``.json``."""
    return "json" if path.suffix.lower() == ".json" else "yaml"


def output_path(directory: Path, stem: str, file_type: str) -> Path:
    return directory / f"{stem}{_EXTENSIONS[normalize_file_type(file_type)]}"


def dump_document(document: Document, file_type: str = "yaml") -> str:
    file_type = normalize_file_type(file_type)
    if file_type == "json":
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True, default_flow_style=False)


def load_document(text: str, file_type: str = "yaml") -> Dict[str, Any]:
    """Parse serialized content into a document mapping.

    Parse failures and non-mapping roots raise ``io_error``.
    """

    file_type = normalize_file_type(file_type)
    try:
        data = json.loads(text) if file_type == "json" else yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise EmitterError(
            ErrorCategory.IO,
            "DOCUMENT_PARSE_FAILED",
            f"Unable to parse {file_type.upper()} document: {exc}",
            recoverable=True,
        ) from exc
    if not isinstance(data, dict):
        raise EmitterError(
            ErrorCategory.IO,
            "DOCUMENT_NOT_A_MAPPING",
            f"Expected a {file_type.upper()} object at the document root",
            recoverable=True,
        )
    return data


def write_document(document: Document, path: Path, file_type: str | None = None) -> Path:
    file_type = normalize_file_type(file_type) if file_type else file_type_for(path)
    content = dump_document(document, file_type)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise EmitterError(
            ErrorCategory.IO,
            "DOCUMENT_WRITE_FAILED",
            f"Unable to write {path}: {exc}",
            context={"path": str(path)},
        ) from exc
    get_logger("serialization").info("Wrote %s document to %s", file_type.upper(), path)
    return path


__all__ = [
    "FILE_TYPES",
    "dump_document",
    "file_type_for",
    "load_document",
    "normalize_file_type",
    "output_path",
    "write_document",
]
