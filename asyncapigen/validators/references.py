"""Cross-reference checks between operations, channels and messages."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from ..constants import CHANNELS_REF_PREFIX, MESSAGES_REF_PREFIX
from ..models import Document
from .base import WARNING, ValidationIssue, Validator, section, unescape_pointer


class ReferenceValidator(Validator):
    """Resolves operation channel references and channel message references.

    References are followed one hop only; the target is never dereferenced
    further. A reference that does not point into the local channels or
    component messages counts as unresolved.
    """

    name = "references"

    def validate(self, document: Document) -> List[ValidationIssue]:
        channels = section(document, "channels")
        messages = section(section(document, "components"), "messages")
        issues: List[ValidationIssue] = []

        for name, operation in section(document, "operations").items():
            if not isinstance(operation, Mapping):
                continue
            issues.extend(self._check_operation(name, operation, channels))

        for name, channel in channels.items():
            if not isinstance(channel, Mapping):
                continue
            channel_messages = channel.get("messages")
            if not isinstance(channel_messages, Mapping):
                continue
            for message_name, message in channel_messages.items():
                ref = _ref_of(message)
                if ref is None:
                    continue
                path = f"channels.{name}.messages.{message_name}"
                target = _local_target(ref, MESSAGES_REF_PREFIX)
                if target is None or target not in messages:
                    issues.append(
                        ValidationIssue(
                            "UNRESOLVED_MESSAGE_REF",
                            f"Channel '{name}' references missing message '{target or ref}'",
                            path,
                        )
                    )
        return issues

    def _check_operation(
        self,
        name: str,
        operation: Mapping[str, Any],
        channels: Mapping[str, Any],
    ) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        ref = _ref_of(operation.get("channel"))
        if ref is None:
            return issues
        path = f"operations.{name}.channel"
        channel_name = _local_target(ref, CHANNELS_REF_PREFIX)
        if channel_name is None or channel_name not in channels:
            issues.append(
                ValidationIssue(
                    "UNRESOLVED_CHANNEL_REF",
                    f"Operation '{name}' references missing channel '{channel_name or ref}'",
                    path,
                )
            )
            return issues

        channel = channels[channel_name]
        channel_messages = channel.get("messages") if isinstance(channel, Mapping) else None
        for index, message in enumerate(operation.get("messages") or []):
            message_ref = _ref_of(message)
            if message_ref is None:
                continue
            prefix = f"{CHANNELS_REF_PREFIX}{channel_name}/messages/"
            target = _local_target(message_ref, prefix)
            if target is None or not isinstance(channel_messages, Mapping) or target not in channel_messages:
                issues.append(
                    ValidationIssue(
                        "UNRESOLVED_OPERATION_MESSAGE",
                        f"Operation '{name}' lists message {message_ref!r} not found on channel '{channel_name}'",
                        f"operations.{name}.messages.{index}",
                        WARNING,
                    )
                )
        return issues


def _ref_of(value: Any) -> Optional[str]:
    if isinstance(value, Mapping) and isinstance(value.get("$ref"), str):
        return value["$ref"]
    return None


def _local_target(ref: str, prefix: str) -> Optional[str]:
    if not ref.startswith(prefix):
        return None
    token = ref[len(prefix):].split("/", 1)[0]
    return unescape_pointer(token) if token else None


__all__ = ["ReferenceValidator"]
