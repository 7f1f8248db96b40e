"""Protocol bindings for declared servers."""

from __future__ import annotations

from ..errors import EmitterError, ErrorCategory
from ..models import Document, ServerDeclaration
from ..plugins import BindingKind, ProtocolPluginRegistry
from .base import ProcessingService, merge_bindings


class ServerBindingService(ProcessingService[ServerDeclaration]):
    """Merges plugin-generated server bindings into ``servers.<name>.bindings``.

    Servers whose protocol has no plugin, or whose plugin lacks the server
    capability, are left untouched.
    """

    stage = "servers"

    async def process_one(
        self,
        server: ServerDeclaration,
        document: Document,
        registry: ProtocolPluginRegistry,
    ) -> str:
        plugin = registry.get_plugin(server.protocol)
        if plugin is None or not plugin.supports(BindingKind.SERVER):
            self.logger.debug("No server binding for %s (%s)", server.name, server.protocol)
            return server.name

        for protocol, config in server.bindings.items():
            if registry.get_plugin(protocol) is plugin and not await registry.validate_config(protocol, config):
                raise EmitterError(
                    ErrorCategory.CONFIGURATION,
                    "INVALID_BINDING_CONFIG",
                    f"Invalid {protocol} binding configuration on server '{server.name}'",
                    details={"config": config},
                    context={"server": server.name, "protocol": protocol},
                )

        fragment = await registry.generate(server.protocol, BindingKind.SERVER, server)
        servers = document.get("servers")
        if not isinstance(servers, dict) or server.name not in servers:
            raise EmitterError(
                ErrorCategory.VALIDATION,
                "SERVER_NOT_FOUND",
                f"Server '{server.name}' is not part of the document",
                context={"server": server.name},
            )
        merge_bindings(servers[server.name], fragment)
        return server.name


__all__ = ["ServerBindingService"]
