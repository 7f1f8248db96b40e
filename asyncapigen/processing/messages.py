"""Transformation of message models into component messages and schemas."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..constants import DEFAULT_CONTENT_TYPE, SCHEMAS_REF_PREFIX
from ..errors import EmitterError, ErrorCategory
from ..models import Document, MessageModel
from ..plugins import BindingKind, ProtocolPluginRegistry
from ..program import Program
from ..schema import SchemaConverter
from .base import ProcessingService, merge_bindings


class MessageProcessingService(ProcessingService[MessageModel]):
    """Adds ``components.messages`` and ``components.schemas`` entries."""

    stage = "messages"

    def __init__(self, converter: SchemaConverter | None = None) -> None:
        super().__init__()
        self.converter = converter or SchemaConverter(Program())

    async def process_one(
        self,
        message: MessageModel,
        document: Document,
        registry: ProtocolPluginRegistry,
    ) -> str:
        name = message.resolved_name
        schema = self._payload_schema(message)
        bindings = await self._bindings(message, registry)

        payload: Dict[str, Any] = {
            "name": name,
            "title": message.title or name,
            "contentType": message.content_type or DEFAULT_CONTENT_TYPE,
        }
        if message.summary:
            payload["summary"] = message.summary
        if message.description:
            payload["description"] = message.description
        if message.examples:
            payload["examples"] = _normalise_examples(message.examples)
        if message.correlation_id:
            payload["correlationId"] = _correlation_id(message.correlation_id)
        if message.headers:
            payload["headers"] = self._headers(message.headers)
        if schema is not None:
            payload["payload"] = {"$ref": f"{SCHEMAS_REF_PREFIX}{name}Schema"}
        merge_bindings(payload, bindings)

        components = document["components"]
        components["messages"][name] = payload
        if schema is not None:
            components["schemas"][f"{name}Schema"] = schema

        self.logger.debug("Processed message %s (payload: %s)", name, schema is not None)
        return name

    def _payload_schema(self, message: MessageModel) -> Optional[Dict[str, Any]]:
        if not message.properties:
            return None
        schema = self.converter.convert_properties(message.properties, description=message.description)
        if message.name:
            schema["title"] = message.name
        return schema

    def _headers(self, headers: str) -> Dict[str, Any]:
        if headers.startswith("#/"):
            return {"$ref": headers}
        return self.converter.convert_type(headers)

    async def _bindings(self, message: MessageModel, registry: ProtocolPluginRegistry) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for protocol, config in message.bindings.items():
            plugin = registry.get_plugin(protocol)
            if plugin is None:
                # Pre-resolved configuration for protocols without a plugin is embedded verbatim.
                merged[protocol] = dict(config)
                continue
            if not await registry.validate_config(protocol, config):
                raise EmitterError(
                    ErrorCategory.CONFIGURATION,
                    "INVALID_BINDING_CONFIG",
                    f"Invalid {protocol} binding configuration on message '{message.resolved_name}'",
                    details={"config": config},
                    context={"message": message.resolved_name, "protocol": protocol},
                )
            fragment = await registry.generate(protocol, BindingKind.MESSAGE, message)
            if fragment:
                merged.update(fragment)
            else:
                merged[plugin.binding_key] = dict(config)
        return merged


def _normalise_examples(examples: List[Any]) -> List[Dict[str, Any]]:
    normalised = []
    for example in examples:
        if isinstance(example, dict) and ({"payload", "headers"} & set(example)):
            normalised.append(dict(example))
        else:
            normalised.append({"payload": example})
    return normalised


def _correlation_id(value: str) -> Dict[str, Any]:
    if value.startswith("#/components/"):
        return {"$ref": value}
    return {"location": value}


__all__ = ["MessageProcessingService"]
