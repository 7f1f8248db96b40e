"""Name-keyed registry of protocol plugins."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..errors import EmitterError, ErrorCategory
from ..logging import get_logger
from .base import BindingKind, Fragment, ProtocolPlugin

_DISPATCH = {
    BindingKind.OPERATION: "generate_operation_binding",
    BindingKind.MESSAGE: "generate_message_binding",
    BindingKind.SERVER: "generate_server_binding",
    BindingKind.CHANNEL: "generate_channel_binding",
}


class ProtocolPluginRegistry:
    """Stores plugins for one emission run and dispatches binding requests.

    Registering a name twice replaces the earlier plugin. Lookups resolve
    plugin names first and aliases second, case-insensitively.
    """

    def __init__(self) -> None:
        self._plugins: Dict[str, ProtocolPlugin] = {}
        self._aliases: Dict[str, str] = {}
        self.logger = get_logger("plugins")

    def register(self, plugin: ProtocolPlugin) -> None:
        if not isinstance(plugin, ProtocolPlugin):
            raise TypeError(f"Expected a ProtocolPlugin instance, got {type(plugin).__name__}")
        key = plugin.name.lower()
        existing = self._plugins.get(key)
        if existing is not None:
            self.logger.warning(
                "Replacing protocol plugin '%s' v%s with v%s",
                key,
                existing.version,
                plugin.version,
            )
        self._plugins[key] = plugin
        for alias in plugin.aliases:
            self._aliases[alias.lower()] = key
        self.logger.debug("Registered protocol plugin %s v%s", key, plugin.version)

    def get_plugin(self, name: str) -> Optional[ProtocolPlugin]:
        key = (name or "").strip().lower()
        plugin = self._plugins.get(key)
        if plugin is not None:
            return plugin
        target = self._aliases.get(key)
        return self._plugins.get(target) if target else None

    def is_supported(self, name: str) -> bool:
        return self.get_plugin(name) is not None

    def names(self) -> List[str]:
        return sorted(self._plugins)

    def describe(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": plugin.name,
                "version": plugin.version,
                "bindingVersion": plugin.binding_version,
                "aliases": list(plugin.aliases),
                "capabilities": sorted(kind.value for kind in plugin.capabilities),
            }
            for _, plugin in sorted(self._plugins.items())
        ]

    async def generate(self, protocol: str, kind: BindingKind, subject: Any) -> Optional[Fragment]:
        """Invoke ``kind`` on the plugin for ``protocol``.

        Returns ``None`` when no plugin is registered for the protocol and an
        empty fragment when the plugin lacks the capability. Exceptions raised
        by the plugin surface as recoverable ``plugin_error`` failures.
        """
        plugin = self.get_plugin(protocol)
        if plugin is None:
            self.logger.info("No protocol plugin registered for '%s'; skipping %s binding", protocol, kind.value)
            return None
        if kind not in _DISPATCH or not plugin.supports(kind):
            self.logger.debug("Plugin '%s' does not support %s bindings", plugin.name, kind.value)
            return {}
        generator = getattr(plugin, _DISPATCH[kind])
        try:
            fragment = await generator(subject)
        except Exception as exc:
            raise EmitterError(
                ErrorCategory.PLUGIN,
                "PLUGIN_BINDING_FAILED",
                f"Plugin '{plugin.name}' failed to generate {kind.value} binding: {exc}",
                details={"exception": exc.__class__.__name__},
                context={"plugin": plugin.name, "kind": kind.value},
                recoverable=True,
            ) from exc
        return dict(fragment or {})

    async def validate_config(self, protocol: str, config: Any) -> bool:
        """Return the plugin's verdict, or ``True`` when it cannot judge ``config``."""
        plugin = self.get_plugin(protocol)
        if plugin is None or not plugin.supports(BindingKind.CONFIG_VALIDATION):
            return True
        try:
            return bool(await plugin.validate_config(config))
        except Exception as exc:
            raise EmitterError(
                ErrorCategory.PLUGIN,
                "PLUGIN_VALIDATION_FAILED",
                f"Plugin '{plugin.name}' failed to validate configuration: {exc}",
                context={"plugin": plugin.name},
                recoverable=True,
            ) from exc


__all__ = ["ProtocolPluginRegistry"]
