"""Core data models shared across asyncapigen components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

# An AsyncAPI document is handled as plain JSON-compatible mappings.
Document = Dict[str, Any]


@dataclass(frozen=True)
class ModelProperty:
    """A single field of a model or operation parameter list."""

    name: str
    type: str
    optional: bool = False
    description: Optional[str] = None


@dataclass
class Operation:
    """Operation discovered in the API description."""

    name: str
    direction: str = "publish"
    channel: Optional[str] = None
    protocol: Optional[str] = None
    protocol_config: Dict[str, Any] = field(default_factory=dict)
    parameters: List[ModelProperty] = field(default_factory=list)
    message: Optional[str] = None
    description: Optional[str] = None
    namespace: Optional[str] = None

    @property
    def action(self) -> str:
        return "receive" if self.direction == "subscribe" else "send"


@dataclass
class MessageModel:
    """Model carrying message metadata."""

    name: str
    message_name: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    content_type: Optional[str] = None
    examples: List[Any] = field(default_factory=list)
    correlation_id: Optional[str] = None
    headers: Optional[str] = None
    bindings: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    properties: List[ModelProperty] = field(default_factory=list)

    @property
    def resolved_name(self) -> str:
        """Explicit message name, else model name, else ``<type>Message``."""
        if self.message_name:
            return self.message_name
        if self.name:
            return self.name
        return f"{self.type or 'Anonymous'}Message"


@dataclass
class SecurityScheme:
    """Discriminated security scheme; ``type`` selects the variant."""

    type: str
    description: Optional[str] = None
    settings: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SecurityConfig:
    """Security declaration attached to an operation or model."""

    name: str
    scheme: SecurityScheme
    scopes: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ServerDeclaration:
    """Namespace-level server declaration."""

    name: str
    url: str
    protocol: str
    description: Optional[str] = None
    protocol_version: Optional[str] = None
    pathname: Optional[str] = None
    variables: Dict[str, Any] = field(default_factory=dict)
    bindings: Dict[str, Dict[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True)
class DiscoveryResult:
    """Snapshot of the elements found during one discovery run."""

    operations: Tuple[Operation, ...] = ()
    message_models: Tuple[MessageModel, ...] = ()
    security_configs: Tuple[SecurityConfig, ...] = ()

    @property
    def total(self) -> int:
        return len(self.operations) + len(self.message_models) + len(self.security_configs)
