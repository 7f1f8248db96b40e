"""Base classes for protocol binding plugins."""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Mapping, Tuple

from ..models import MessageModel, Operation, ServerDeclaration

Fragment = Dict[str, Any]


class BindingKind(str, Enum):
    """Capabilities a plugin may advertise."""

    OPERATION = "operation"
    MESSAGE = "message"
    SERVER = "server"
    CHANNEL = "channel"
    CONFIG_VALIDATION = "config_validation"


@dataclass
class ChannelContext:
    """Channel being bound, with the operation that produced it."""

    name: str
    address: str
    operation: Operation
    config: Dict[str, Any] = field(default_factory=dict)


class ProtocolPlugin(ABC):
    """Contract for plugins that emit protocol-specific binding fragments.

    Subclasses list the kinds they implement in ``capabilities``; callers must
    check :meth:`supports` before dispatching. Generated fragments are keyed by
    ``binding_key`` and stamped with ``binding_version``.
    """

    name: ClassVar[str]
    version: ClassVar[str] = "1.0.0"
    binding_key: ClassVar[str]
    binding_version: ClassVar[str]
    aliases: ClassVar[Tuple[str, ...]] = ()
    capabilities: ClassVar[FrozenSet[BindingKind]] = frozenset()

    def supports(self, kind: BindingKind) -> bool:
        return kind in self.capabilities

    async def generate_operation_binding(self, operation: Operation) -> Fragment:
        raise NotImplementedError(f"{self.name} does not generate operation bindings")

    async def generate_message_binding(self, message: MessageModel) -> Fragment:
        raise NotImplementedError(f"{self.name} does not generate message bindings")

    async def generate_server_binding(self, server: ServerDeclaration) -> Fragment:
        raise NotImplementedError(f"{self.name} does not generate server bindings")

    async def generate_channel_binding(self, channel: ChannelContext) -> Fragment:
        raise NotImplementedError(f"{self.name} does not generate channel bindings")

    async def validate_config(self, config: Any) -> bool:
        raise NotImplementedError(f"{self.name} does not validate configuration")

    def config_for(self, bindings: Mapping[str, Any] | None) -> Dict[str, Any]:
        """Return the user configuration addressed to this plugin, if any."""
        if not bindings:
            return {}
        for key in (self.binding_key, self.name, *self.aliases):
            value = bindings.get(key)
            if isinstance(value, Mapping):
                return dict(value)
        return {}

    def stamp(self, binding: Mapping[str, Any]) -> Fragment:
        """Wrap ``binding`` under the protocol key with the binding version applied last."""
        return {self.binding_key: {**binding, "bindingVersion": self.binding_version}}


__all__ = ["BindingKind", "ChannelContext", "Fragment", "ProtocolPlugin"]
