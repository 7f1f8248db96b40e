"""Transformation of operations into channels and operation entries."""

from __future__ import annotations

import re
from typing import Any, Dict, Tuple

from ..constants import CHANNELS_REF_PREFIX, MESSAGES_REF_PREFIX
from ..errors import EmitterError, ErrorCategory
from ..models import Document, Operation
from ..plugins import BindingKind, ChannelContext, ProtocolPluginRegistry
from .base import ProcessingService, merge_bindings

_INVALID_CHANNEL_CHARS = re.compile(r"[^a-z0-9_-]")
_REPEATED_UNDERSCORES = re.compile(r"_+")
_ADDRESS_PARAMETER = re.compile(r"\{([A-Za-z0-9_.-]+)\}")


def sanitize_channel_id(path: str) -> str:
    """Return a channel key made of ``[a-z0-9_-]`` characters."""
    cleaned = path.strip().lower().lstrip("/").replace("/", "_")
    cleaned = _INVALID_CHANNEL_CHARS.sub("_", cleaned)
    cleaned = _REPEATED_UNDERSCORES.sub("_", cleaned)
    return cleaned.strip("_")


def channel_identity(operation: Operation) -> Tuple[str, str]:
    """Return ``(channel key, channel address)`` for an operation."""
    address = operation.channel or f"/{operation.name.lower()}"
    name = sanitize_channel_id(address) or sanitize_channel_id(operation.name)
    if not name:
        raise EmitterError(
            ErrorCategory.VALIDATION,
            "CHANNEL_NAME_EMPTY",
            f"Unable to derive a channel name for operation '{operation.name}'",
            context={"operation": operation.name},
        )
    return name, address


class OperationProcessingService(ProcessingService[Operation]):
    """Adds one channel and one operation entry per discovered operation."""

    stage = "operations"

    async def process_one(
        self,
        operation: Operation,
        document: Document,
        registry: ProtocolPluginRegistry,
    ) -> str:
        channel_name, address = channel_identity(operation)

        channel_fragment: Dict[str, Any] | None = None
        operation_fragment: Dict[str, Any] | None = None
        if operation.protocol:
            valid = await registry.validate_config(operation.protocol, operation.protocol_config)
            if not valid:
                raise EmitterError(
                    ErrorCategory.CONFIGURATION,
                    "INVALID_BINDING_CONFIG",
                    f"Invalid {operation.protocol} binding configuration on operation '{operation.name}'",
                    details={"config": operation.protocol_config},
                    context={"operation": operation.name, "protocol": operation.protocol},
                )
            context = ChannelContext(
                name=channel_name,
                address=address,
                operation=operation,
                config=dict(operation.protocol_config),
            )
            channel_fragment = await registry.generate(operation.protocol, BindingKind.CHANNEL, context)
            operation_fragment = await registry.generate(operation.protocol, BindingKind.OPERATION, operation)

        channel = document["channels"].setdefault(channel_name, {"address": address})
        channel.setdefault("description", f"Channel for {operation.name}")
        parameters = self._address_parameters(operation, address)
        if parameters:
            channel.setdefault("parameters", {}).update(parameters)
        if operation.message:
            channel.setdefault("messages", {})[operation.message] = {
                "$ref": f"{MESSAGES_REF_PREFIX}{operation.message}"
            }
        merge_bindings(channel, channel_fragment)

        entry: Dict[str, Any] = {
            "action": operation.action,
            "channel": {"$ref": f"{CHANNELS_REF_PREFIX}{channel_name}"},
            "summary": f"Operation {operation.name}",
        }
        if operation.description:
            entry["description"] = operation.description
        if operation.message:
            entry["messages"] = [
                {"$ref": f"{CHANNELS_REF_PREFIX}{channel_name}/messages/{operation.message}"}
            ]
        merge_bindings(entry, operation_fragment)
        document["operations"][operation.name] = entry

        self.logger.debug("Processed operation %s -> channel %s (%s)", operation.name, channel_name, operation.action)
        return operation.name

    @staticmethod
    def _address_parameters(operation: Operation, address: str) -> Dict[str, Dict[str, Any]]:
        declared = {param.name: param for param in operation.parameters}
        parameters: Dict[str, Dict[str, Any]] = {}
        for name in _ADDRESS_PARAMETER.findall(address):
            param = declared.get(name)
            description = param.description if param and param.description else f"Parameter {name}"
            parameters[name] = {"description": description}
        return parameters


__all__ = ["OperationProcessingService", "channel_identity", "sanitize_channel_id"]
