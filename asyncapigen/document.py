"""Construction of the initial AsyncAPI document skeleton."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import urlsplit

from .constants import ASYNCAPI_VERSION, DEFAULT_TITLE, DEFAULT_VERSION
from .logging import get_logger
from .models import Document, ServerDeclaration
from .program import ProgramSource, StateKey


class DocumentBuilder:
    """Creates documents with every container pre-initialised.

    Downstream stages can insert into ``channels``, ``operations`` and each
    ``components`` map without checking for their presence.
    """

    def __init__(
        self,
        *,
        title: str = DEFAULT_TITLE,
        version: str = DEFAULT_VERSION,
        description: Optional[str] = None,
    ) -> None:
        self.title = title
        self.version = version
        self.description = description
        self.logger = get_logger("document")

    def create_initial_document(
        self,
        server_source: ProgramSource | None = None,
        *,
        servers: Sequence[ServerDeclaration] | None = None,
    ) -> Document:
        """Return a fresh skeleton; servers come from ``servers`` or ``server_source``."""
        info: Dict[str, Any] = {"title": self.title, "version": self.version}
        if self.description:
            info["description"] = self.description

        document: Document = {
            "asyncapi": ASYNCAPI_VERSION,
            "info": info,
            "channels": {},
            "operations": {},
            "components": {
                "schemas": {},
                "messages": {},
                "securitySchemes": {},
            },
        }

        if servers is None:
            servers = self.build_servers(server_source) if server_source is not None else []
        if servers:
            document["servers"] = {server.name: server_to_object(server) for server in servers}
        self.logger.debug("Created initial document with %d server(s)", len(servers))
        return document

    def build_servers(self, program: ProgramSource) -> List[ServerDeclaration]:
        """Collect server declarations from every namespace."""
        root = program.global_namespace()
        if root is None:
            return []
        servers: List[ServerDeclaration] = []
        for namespace in root.walk():
            raw = program.get_stored_metadata(namespace, StateKey.SERVER_CONFIGS)
            if raw is None:
                continue
            for entry in _server_entries(raw):
                server = self._parse_server(entry, namespace.name)
                if server is not None:
                    servers.append(server)
        return servers

    def update_document_info(self, document: Document, **updates: Optional[str]) -> Document:
        info = document.setdefault("info", {})
        info.update({key: value for key, value in updates.items() if value is not None})
        return document

    @staticmethod
    def initialize_components(document: Document) -> Document:
        components = document.get("components")
        if not isinstance(components, dict):
            components = document["components"] = {}
        for key in ("schemas", "messages", "securitySchemes"):
            if not isinstance(components.get(key), dict):
                components[key] = {}
        return document

    @classmethod
    def initialize_document_structure(cls, document: Document) -> Document:
        for key in ("channels", "operations"):
            if not isinstance(document.get(key), dict):
                document[key] = {}
        return cls.initialize_components(document)

    def _parse_server(self, entry: Any, namespace: str) -> Optional[ServerDeclaration]:
        if not isinstance(entry, Mapping):
            self.logger.warning("Skipping server declaration in namespace '%s': expected a mapping", namespace)
            return None
        name, url, protocol = entry.get("name"), entry.get("url"), entry.get("protocol")
        if not all(isinstance(value, str) and value for value in (name, url, protocol)):
            self.logger.warning(
                "Skipping server declaration in namespace '%s': name, url and protocol are required",
                namespace,
            )
            return None
        variables = entry.get("variables") or {}
        bindings = self._server_bindings(entry.get("bindings"), name)
        return ServerDeclaration(
            name=name,
            url=url,
            protocol=protocol.lower(),
            description=entry.get("description"),
            protocol_version=entry.get("protocolVersion"),
            pathname=entry.get("pathname"),
            variables=dict(variables) if isinstance(variables, Mapping) else {},
            bindings=bindings,
        )

    def _server_bindings(self, raw: Any, server: str) -> Dict[str, Dict[str, Any]]:
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            self.logger.warning("Ignoring bindings on server '%s': expected a mapping", server)
            return {}
        bindings: Dict[str, Dict[str, Any]] = {}
        for protocol, config in raw.items():
            if isinstance(config, Mapping):
                bindings[str(protocol)] = dict(config)
            else:
                self.logger.warning(
                    "Ignoring %s binding on server '%s': expected a mapping", protocol, server
                )
        return bindings


def server_to_object(server: ServerDeclaration) -> Dict[str, Any]:
    """Render a server declaration as an AsyncAPI 3 server object."""
    host, pathname = _split_url(server.url)
    payload: Dict[str, Any] = {"host": host, "protocol": server.protocol}
    if server.protocol_version:
        payload["protocolVersion"] = server.protocol_version
    if server.pathname or pathname:
        payload["pathname"] = server.pathname or pathname
    if server.description:
        payload["description"] = server.description
    if server.variables:
        payload["variables"] = dict(server.variables)
    if server.bindings:
        payload["bindings"] = {key: dict(value) for key, value in server.bindings.items()}
    return payload


def _split_url(url: str) -> tuple[str, Optional[str]]:
    if "://" not in url:
        return url, None
    parts = urlsplit(url)
    path = parts.path if parts.path not in ("", "/") else None
    return parts.netloc, path


def _server_entries(raw: Any) -> List[Any]:
    if isinstance(raw, list):
        return raw
    if isinstance(raw, Mapping) and "url" not in raw and all(isinstance(v, Mapping) for v in raw.values()):
        # name -> declaration mapping
        return [{"name": name, **value} for name, value in raw.items()]
    return [raw]


__all__ = ["DocumentBuilder", "server_to_object"]
