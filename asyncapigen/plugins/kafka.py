"""Kafka protocol bindings."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..constants import KAFKA_BINDING_VERSION, KAFKA_DEFAULTS
from ..models import MessageModel, Operation, ServerDeclaration
from .base import BindingKind, ChannelContext, Fragment, ProtocolPlugin

_SCHEMA_ID_LOCATIONS = {"header", "payload"}


class KafkaPlugin(ProtocolPlugin):
    """Generates Kafka operation, channel, message and server bindings."""

    name = "kafka"
    binding_key = "kafka"
    binding_version = KAFKA_BINDING_VERSION
    aliases = ("kafka-secure",)
    capabilities = frozenset(
        {
            BindingKind.OPERATION,
            BindingKind.MESSAGE,
            BindingKind.SERVER,
            BindingKind.CHANNEL,
            BindingKind.CONFIG_VALIDATION,
        }
    )

    async def generate_operation_binding(self, operation: Operation) -> Fragment:
        config = operation.protocol_config
        binding = {
            "groupId": config.get("groupId", KAFKA_DEFAULTS["group_id"]),
            "clientId": config.get("clientId", KAFKA_DEFAULTS["client_id"]),
        }
        return self.stamp(binding)

    async def generate_channel_binding(self, channel: ChannelContext) -> Fragment:
        config = channel.config
        binding: Dict[str, Any] = {"topic": config.get("topic") or channel.address.lstrip("/") or channel.name}
        for key in ("partitions", "replicas", "topicConfiguration"):
            if config.get(key):
                binding[key] = config[key]
        return self.stamp(binding)

    async def generate_message_binding(self, message: MessageModel) -> Fragment:
        binding: Dict[str, Any] = {
            "key": {"type": "string", "description": "Message key for partitioning"},
            "schemaIdLocation": KAFKA_DEFAULTS["schema_id_location"],
            "schemaIdPayloadEncoding": KAFKA_DEFAULTS["schema_id_payload_encoding"],
        }
        binding.update(self.config_for(message.bindings))
        return self.stamp(binding)

    async def generate_server_binding(self, server: ServerDeclaration) -> Fragment:
        binding: Dict[str, Any] = {
            "schemaRegistryUrl": KAFKA_DEFAULTS["schema_registry_url"],
            "schemaRegistryVendor": KAFKA_DEFAULTS["schema_registry_vendor"],
        }
        binding.update(self.config_for(server.bindings))
        return self.stamp(binding)

    async def validate_config(self, config: Any) -> bool:
        if not isinstance(config, Mapping):
            return False
        location = config.get("schemaIdLocation")
        if location is not None and location not in _SCHEMA_ID_LOCATIONS:
            return False
        for key in ("partitions", "replicas"):
            value = config.get(key)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 1):
                return False
        for key in ("groupId", "clientId"):
            value = config.get(key)
            if value is not None and not isinstance(value, (str, Mapping)):
                return False
        topic = config.get("topic")
        if topic is not None and (not isinstance(topic, str) or not topic.strip()):
            return False
        return True


__all__ = ["KafkaPlugin"]
