"""Protocol plugin implementations and registry construction."""

from __future__ import annotations

from typing import Callable, Dict, Sequence, Set

from ..errors import EmitterError, ErrorCategory
from .base import BindingKind, ChannelContext, Fragment, ProtocolPlugin
from .http import HttpPlugin
from .kafka import KafkaPlugin
from .registry import ProtocolPluginRegistry
from .websocket import WebSocketPlugin

_BUILTIN_FACTORIES: Dict[str, Callable[[], ProtocolPlugin]] = {
    "kafka": KafkaPlugin,
    "http": HttpPlugin,
    "websocket": WebSocketPlugin,
}


def create_default_registry(enabled: Sequence[str] | None = None) -> ProtocolPluginRegistry:
    """Return a fresh registry holding the built-in plugins.

    ``enabled`` limits registration to the named plugins (aliases accepted).
    """

    wanted: Set[str] | None = None
    if enabled:
        wanted = {name.strip().lower() for name in enabled if name and name.strip()}

    registry = ProtocolPluginRegistry()
    for name, factory in _BUILTIN_FACTORIES.items():
        plugin = factory()
        keys = {name, *(alias.lower() for alias in plugin.aliases)}
        if wanted is not None:
            matched = wanted & keys
            if not matched:
                continue
            wanted -= matched
        registry.register(plugin)

    if wanted:
        missing = ", ".join(sorted(wanted))
        raise EmitterError(
            ErrorCategory.CONFIGURATION,
            "UNKNOWN_PROTOCOL_PLUGIN",
            f"Unknown protocol plugins requested: {missing}",
            context={"requested": sorted(wanted)},
        )
    return registry


__all__ = [
    "BindingKind",
    "ChannelContext",
    "Fragment",
    "HttpPlugin",
    "KafkaPlugin",
    "ProtocolPlugin",
    "ProtocolPluginRegistry",
    "WebSocketPlugin",
    "create_default_registry",
]
