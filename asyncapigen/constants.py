"""Shared constants for document generation and protocol bindings."""

from __future__ import annotations

ASYNCAPI_VERSION = "3.0.0"

DEFAULT_TITLE = "AsyncAPI Specification"
DEFAULT_VERSION = "1.0.0"
DEFAULT_CONTENT_TYPE = "application/json"

# AsyncAPI binding versions stamped onto every generated fragment.
KAFKA_BINDING_VERSION = "0.5.0"
HTTP_BINDING_VERSION = "0.3.0"
WEBSOCKET_BINDING_VERSION = "0.1.0"

KAFKA_DEFAULTS = {
    "group_id": "asyncapigen-group",
    "client_id": "asyncapigen",
    "schema_id_location": "payload",
    "schema_id_payload_encoding": "apicurio-new",
    "schema_registry_url": "http://localhost:8081",
    "schema_registry_vendor": "apicurio",
}

HTTP_DEFAULTS = {
    "method": "POST",
    "content_type": DEFAULT_CONTENT_TYPE,
}

WEBSOCKET_DEFAULTS = {
    "method": "GET",
    "subprotocol": "asyncapi",
}

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "CONNECT", "TRACE")

CHANNELS_REF_PREFIX = "#/channels/"
MESSAGES_REF_PREFIX = "#/components/messages/"
SCHEMAS_REF_PREFIX = "#/components/schemas/"

__all__ = [
    "ASYNCAPI_VERSION",
    "CHANNELS_REF_PREFIX",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_TITLE",
    "DEFAULT_VERSION",
    "HTTP_BINDING_VERSION",
    "HTTP_DEFAULTS",
    "HTTP_METHODS",
    "KAFKA_BINDING_VERSION",
    "KAFKA_DEFAULTS",
    "MESSAGES_REF_PREFIX",
    "SCHEMAS_REF_PREFIX",
    "WEBSOCKET_BINDING_VERSION",
    "WEBSOCKET_DEFAULTS",
]
