"""WebSocket protocol bindings."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..constants import WEBSOCKET_BINDING_VERSION, WEBSOCKET_DEFAULTS
from ..models import MessageModel, Operation, ServerDeclaration
from .base import BindingKind, ChannelContext, Fragment, ProtocolPlugin

_HANDSHAKE_METHODS = {"GET", "POST"}


class WebSocketPlugin(ProtocolPlugin):
    """Generates WebSocket channel, message and server bindings."""

    name = "websocket"
    binding_key = "ws"
    binding_version = WEBSOCKET_BINDING_VERSION
    aliases = ("ws", "wss")
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
        # AsyncAPI 3 defines no WebSocket operation binding.
        return {}

    async def generate_channel_binding(self, channel: ChannelContext) -> Fragment:
        config = channel.config
        binding: Dict[str, Any] = {"method": str(config.get("method", WEBSOCKET_DEFAULTS["method"])).upper()}
        for key in ("query", "headers"):
            if isinstance(config.get(key), Mapping):
                binding[key] = dict(config[key])
        return self.stamp(binding)

    async def generate_message_binding(self, message: MessageModel) -> Fragment:
        binding = self._handshake_defaults()
        binding.update(self.config_for(message.bindings))
        return self.stamp(binding)

    async def generate_server_binding(self, server: ServerDeclaration) -> Fragment:
        binding = self._handshake_defaults()
        binding.update(self.config_for(server.bindings))
        return self.stamp(binding)

    async def validate_config(self, config: Any) -> bool:
        if not isinstance(config, Mapping):
            return False
        method = config.get("method")
        if method is not None and str(method).upper() not in _HANDSHAKE_METHODS:
            return False
        subprotocol = config.get("subprotocol")
        if subprotocol is not None and not isinstance(subprotocol, str):
            return False
        return True

    @staticmethod
    def _handshake_defaults() -> Dict[str, Any]:
        return {
            "method": WEBSOCKET_DEFAULTS["method"],
            "subprotocol": WEBSOCKET_DEFAULTS["subprotocol"],
        }


__all__ = ["WebSocketPlugin"]
