"""Synthesis of ``components.securitySchemes`` from security declarations."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

from ..errors import EmitterError, ErrorCategory
from ..models import Document, SecurityConfig
from ..plugins import ProtocolPluginRegistry
from .base import ProcessingReport, ProcessingService

KEY_STRATEGIES = ("name", "type")

_SASL_MECHANISMS = {
    "plain": "plain",
    "scram-sha-256": "scramSha256",
    "scramsha256": "scramSha256",
    "scram-sha-512": "scramSha512",
    "scramsha512": "scramSha512",
    "gssapi": "gssapi",
}

_SIMPLE_TYPES = {
    "userPassword": "User/password security",
    "X509": "X509 certificate security",
    "symmetricEncryption": "Symmetric encryption security",
    "asymmetricEncryption": "Asymmetric encryption security",
    "plain": "SASL PLAIN security",
    "scramSha256": "SASL SCRAM-SHA-256 security",
    "scramSha512": "SASL SCRAM-SHA-512 security",
    "gssapi": "SASL GSSAPI security",
}

_API_KEY_LOCATIONS = {"user", "password", "query", "header", "cookie"}
_HTTP_API_KEY_LOCATIONS = {"query", "header", "cookie"}

FALLBACK_SCHEME: Dict[str, Any] = {
    "type": "apiKey",
    "name": "Authorization",
    "in": "header",
    "description": "API key authentication",
}


def synthesize_scheme(config: SecurityConfig) -> Tuple[Dict[str, Any], bool]:
    """Return ``(scheme object, recognised)`` for a security declaration.

    Unrecognised scheme types produce the ``Authorization`` header API key
    fallback with ``recognised`` set to ``False``.
    """

    scheme = config.scheme
    settings = scheme.settings
    kind = scheme.type

    if kind == "oauth2":
        flows = _oauth_flows(settings.get("flows"), config.scopes)
        result: Dict[str, Any] = {
            "type": "oauth2",
            "description": scheme.description or f"OAuth2 security: {config.name}",
            "flows": flows,
        }
        if config.scopes:
            result["scopes"] = list(config.scopes)
        return result, True

    if kind == "apiKey":
        location = str(settings.get("in", "header"))
        return (
            {
                "type": "apiKey",
                "description": scheme.description or f"API Key security: {config.name}",
                "name": str(settings.get("name", config.name)),
                "in": location if location in _API_KEY_LOCATIONS else "header",
            },
            True,
        )

    if kind == "httpApiKey":
        location = str(settings.get("in", "header"))
        return (
            {
                "type": "httpApiKey",
                "description": scheme.description or f"HTTP API key security: {config.name}",
                "name": str(settings.get("name", config.name)),
                "in": location if location in _HTTP_API_KEY_LOCATIONS else "header",
            },
            True,
        )

    if kind == "http":
        http_scheme = str(settings.get("scheme", "bearer")).lower()
        result = {
            "type": "http",
            "description": scheme.description or f"HTTP security: {config.name}",
            "scheme": http_scheme,
        }
        if http_scheme == "bearer":
            result["bearerFormat"] = str(settings.get("bearerFormat", "JWT"))
        return result, True

    if kind == "openIdConnect":
        result = {
            "type": "openIdConnect",
            "description": scheme.description or f"OpenID Connect security: {config.name}",
            "openIdConnectUrl": str(settings.get("openIdConnectUrl", "")),
        }
        if config.scopes:
            result["scopes"] = list(config.scopes)
        return result, True

    if kind == "sasl":
        mechanism = str(settings.get("mechanism", "plain"))
        kind = _SASL_MECHANISMS.get(mechanism.lower().replace("_", "-"), "")
        if not kind:
            return dict(FALLBACK_SCHEME), False

    if kind in _SIMPLE_TYPES:
        return (
            {
                "type": kind,
                "description": scheme.description or f"{_SIMPLE_TYPES[kind]}: {config.name}",
            },
            True,
        )

    return dict(FALLBACK_SCHEME), False


def _oauth_flows(flows: Any, scopes: List[str]) -> Dict[str, Any]:
    if not isinstance(flows, Mapping):
        return {}
    result: Dict[str, Any] = {}
    for flow_name, flow in flows.items():
        if not isinstance(flow, Mapping):
            continue
        entry = {key: value for key, value in flow.items() if key != "scopes"}
        available = flow.get("availableScopes", flow.get("scopes"))
        if isinstance(available, Mapping):
            entry["availableScopes"] = dict(available)
        elif scopes:
            entry["availableScopes"] = {scope: scope for scope in scopes}
        else:
            entry["availableScopes"] = {}
        result[str(flow_name)] = entry
    return result


class SecurityProcessingService(ProcessingService[SecurityConfig]):
    """Adds one ``components.securitySchemes`` entry per security declaration."""

    stage = "security"

    def __init__(self, key_strategy: str = "name") -> None:
        super().__init__()
        if key_strategy not in KEY_STRATEGIES:
            raise EmitterError(
                ErrorCategory.CONFIGURATION,
                "INVALID_KEY_STRATEGY",
                f"Unknown security key strategy '{key_strategy}'",
                details={"allowed": list(KEY_STRATEGIES)},
            )
        self.key_strategy = key_strategy

    def scheme_key(self, config: SecurityConfig) -> str:
        return config.scheme.type if self.key_strategy == "type" else config.name

    async def process(
        self,
        elements,
        document: Document,
        registry: ProtocolPluginRegistry,
    ) -> ProcessingReport:
        items = list(elements)
        seen: Dict[str, str] = {}
        collisions: List[str] = []
        for config in items:
            key = self.scheme_key(config)
            if key in seen:
                message = (
                    f"Security scheme '{key}' declared by both '{seen[key]}' and "
                    f"'{config.name}'; the last one wins"
                )
                collisions.append(message)
                self.logger.warning(message)
            seen[key] = config.name

        report = await super().process(items, document, registry)
        report.warnings[:0] = collisions
        return report

    async def process_one(
        self,
        config: SecurityConfig,
        document: Document,
        registry: ProtocolPluginRegistry,
    ) -> str:
        scheme, recognised = synthesize_scheme(config)
        if not recognised:
            self.logger.warning(
                "Unknown security scheme type '%s' on '%s'; using API key fallback",
                config.scheme.type,
                config.name,
            )
        key = self.scheme_key(config)
        document["components"]["securitySchemes"][key] = scheme
        self.logger.debug("Processed security scheme %s (%s)", key, scheme["type"])
        return key


__all__ = ["FALLBACK_SCHEME", "KEY_STRATEGIES", "SecurityProcessingService", "synthesize_scheme"]
