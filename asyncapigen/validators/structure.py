"""Structural checks for AsyncAPI 3.0.0 documents."""

from __future__ import annotations

from typing import Any, List, Mapping

from ..constants import ASYNCAPI_VERSION
from ..models import Document
from .base import WARNING, ValidationIssue, Validator, section

_ACTIONS = {"send", "receive"}
_CONTAINERS = ("channels", "operations")
_COMPONENT_MAPS = ("schemas", "messages", "securitySchemes")


class StructureValidator(Validator):
    """Checks the version pin, the required ``info`` fields and the overall shape.

    Only the version pin and the required top-level and ``info`` fields are
    errors; every other finding is a warning.
    """

    name = "structure"

    def validate(self, document: Document) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        issues.extend(self._check_version(document))
        issues.extend(self._check_info(document))
        issues.extend(self._check_containers(document))
        issues.extend(self._check_channels(document))
        issues.extend(self._check_operations(document))
        issues.extend(self._check_messages(document))
        return issues

    def _check_version(self, document: Document) -> List[ValidationIssue]:
        if "asyncapi" not in document:
            return [ValidationIssue("MISSING_FIELD", "Missing required field 'asyncapi'", "asyncapi")]
        version = document["asyncapi"]
        if version != ASYNCAPI_VERSION:
            return [
                ValidationIssue(
                    "UNSUPPORTED_VERSION",
                    f"Expected asyncapi '{ASYNCAPI_VERSION}', found {version!r}",
                    "asyncapi",
                )
            ]
        return []

    def _check_info(self, document: Document) -> List[ValidationIssue]:
        if "info" not in document:
            return [ValidationIssue("MISSING_FIELD", "Missing required field 'info'", "info")]
        info = document["info"]
        if not isinstance(info, Mapping):
            return [ValidationIssue("INVALID_FIELD", "Field 'info' must be an object", "info")]

        issues = []
        for key in ("title", "version"):
            value = info.get(key)
            if not isinstance(value, str) or not value.strip():
                issues.append(
                    ValidationIssue(
                        "MISSING_FIELD",
                        f"Field 'info.{key}' must be a non-empty string",
                        f"info.{key}",
                    )
                )
        if not info.get("description"):
            issues.append(
                ValidationIssue("MISSING_DESCRIPTION", "Document has no info.description", "info.description", WARNING)
            )
        return issues

    def _check_containers(self, document: Document) -> List[ValidationIssue]:
        issues = []
        for key in _CONTAINERS:
            value = document.get(key)
            if value is None:
                continue
            if not isinstance(value, Mapping):
                issues.append(ValidationIssue("INVALID_CONTAINER", f"'{key}' should be an object", key, WARNING))
            elif not value:
                issues.append(ValidationIssue("EMPTY_CONTAINER", f"Document declares no {key}", key, WARNING))

        components = document.get("components")
        if components is not None and not isinstance(components, Mapping):
            issues.append(ValidationIssue("INVALID_CONTAINER", "'components' should be an object", "components", WARNING))
        elif isinstance(components, Mapping):
            for key in _COMPONENT_MAPS:
                value = components.get(key)
                if value is not None and not isinstance(value, Mapping):
                    issues.append(
                        ValidationIssue(
                            "INVALID_CONTAINER",
                            f"'components.{key}' should be an object",
                            f"components.{key}",
                            WARNING,
                        )
                    )
        return issues

    def _check_channels(self, document: Document) -> List[ValidationIssue]:
        issues = []
        for name, channel in section(document, "channels").items():
            path = f"channels.{name}"
            if not isinstance(channel, Mapping):
                issues.append(ValidationIssue("INVALID_CHANNEL", "Channel should be an object", path, WARNING))
                continue
            if "$ref" in channel:
                issues.append(_skipped_reference(path, channel["$ref"]))
                continue
            if "address" not in channel:
                issues.append(ValidationIssue("MISSING_ADDRESS", f"Channel '{name}' has no address", path, WARNING))
        return issues

    def _check_operations(self, document: Document) -> List[ValidationIssue]:
        issues = []
        for name, operation in section(document, "operations").items():
            path = f"operations.{name}"
            if not isinstance(operation, Mapping):
                issues.append(ValidationIssue("INVALID_OPERATION", "Operation should be an object", path, WARNING))
                continue
            if "$ref" in operation:
                issues.append(_skipped_reference(path, operation["$ref"]))
                continue
            action = operation.get("action")
            if action not in _ACTIONS:
                issues.append(
                    ValidationIssue(
                        "INVALID_ACTION",
                        f"Operation '{name}' has action {action!r}; expected send or receive",
                        f"{path}.action",
                        WARNING,
                    )
                )
            if not operation.get("channel"):
                issues.append(
                    ValidationIssue("MISSING_CHANNEL", f"Operation '{name}' has no channel", f"{path}.channel", WARNING)
                )
        return issues

    def _check_messages(self, document: Document) -> List[ValidationIssue]:
        issues = []
        messages = section(section(document, "components"), "messages")
        for name, message in messages.items():
            path = f"components.messages.{name}"
            if not isinstance(message, Mapping):
                issues.append(ValidationIssue("INVALID_MESSAGE", "Message should be an object", path, WARNING))
                continue
            if "$ref" in message:
                issues.append(_skipped_reference(path, message["$ref"]))
                continue
            if not message.get("name"):
                issues.append(ValidationIssue("MISSING_MESSAGE_NAME", f"Message '{name}' has no name", path, WARNING))
        return issues


def _skipped_reference(path: str, ref: Any) -> ValidationIssue:
    return ValidationIssue("REFERENCE_SKIPPED", f"Reference object {ref!r} is not checked structurally", path, WARNING)


__all__ = ["StructureValidator"]
