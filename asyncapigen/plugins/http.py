"""HTTP protocol bindings."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..constants import HTTP_BINDING_VERSION, HTTP_DEFAULTS, HTTP_METHODS
from ..models import MessageModel, Operation
from .base import BindingKind, Fragment, ProtocolPlugin


class HttpPlugin(ProtocolPlugin):
    """Generates HTTP operation and message bindings."""

    name = "http"
    binding_key = "http"
    binding_version = HTTP_BINDING_VERSION
    aliases = ("https",)
    capabilities = frozenset(
        {BindingKind.OPERATION, BindingKind.MESSAGE, BindingKind.CONFIG_VALIDATION}
    )

    async def generate_operation_binding(self, operation: Operation) -> Fragment:
        config = operation.protocol_config
        method = str(config.get("method", HTTP_DEFAULTS["method"])).upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method '{method}' on operation '{operation.name}'")
        binding: Dict[str, Any] = {
            "method": method,
            "type": "request" if operation.action == "send" else "response",
        }
        if isinstance(config.get("query"), Mapping):
            binding["query"] = dict(config["query"])
        return self.stamp(binding)

    async def generate_message_binding(self, message: MessageModel) -> Fragment:
        content_type = message.content_type or HTTP_DEFAULTS["content_type"]
        binding: Dict[str, Any] = {
            "headers": {
                "type": "object",
                "properties": {"Content-Type": {"type": "string", "enum": [content_type]}},
            },
        }
        binding.update(self.config_for(message.bindings))
        return self.stamp(binding)

    async def validate_config(self, config: Any) -> bool:
        if not isinstance(config, Mapping):
            return False
        method = config.get("method")
        if method is not None and str(method).upper() not in HTTP_METHODS:
            return False
        status = config.get("statusCode")
        if status is not None and (isinstance(status, bool) or not isinstance(status, int) or not 100 <= status <= 599):
            return False
        return True


__all__ = ["HttpPlugin"]
