"""In-memory representation of the annotated API description.

The annotation front-end attaches metadata to nodes through per-key side
tables, the same way a compiler keeps decorator state. Discovery and document
building only talk to :class:`ProgramSource`, so any host that can expose
namespaces, nodes and stored metadata can drive the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Protocol, Union

from .models import ModelProperty


class StateKey(str, Enum):
    """Keys of the decorator side tables."""

    OPERATION_TYPES = "operationTypes"
    CHANNEL_PATHS = "channelPaths"
    MESSAGE_CONFIGS = "messageConfigs"
    PROTOCOL_CONFIGS = "protocolConfigs"
    SECURITY_CONFIGS = "securityConfigs"
    SERVER_CONFIGS = "serverConfigs"


@dataclass(eq=False)
class ModelNode:
    name: str
    properties: List[ModelProperty] = field(default_factory=list)
    doc: Optional[str] = None


@dataclass(eq=False)
class OperationNode:
    name: str
    parameters: List[ModelProperty] = field(default_factory=list)
    return_type: Optional[str] = None
    doc: Optional[str] = None


@dataclass(eq=False)
class NamespaceNode:
    name: str
    operations: Dict[str, OperationNode] = field(default_factory=dict)
    models: Dict[str, ModelNode] = field(default_factory=dict)
    namespaces: Dict[str, "NamespaceNode"] = field(default_factory=dict)
    doc: Optional[str] = None

    def walk(self) -> Iterator["NamespaceNode"]:
        """Yield this namespace and every nested namespace depth-first."""
        yield self
        for child in self.namespaces.values():
            yield from child.walk()


Node = Union[NamespaceNode, OperationNode, ModelNode]


class ProgramSource(Protocol):
    """Read-only view of the host AST consumed by discovery."""

    def global_namespace(self) -> Optional[NamespaceNode]:
        ...

    def get_stored_metadata(self, node: Node, key: StateKey) -> Any:
        ...

    def get_doc(self, node: Node) -> Optional[str]:
        ...

    def list_operations(self) -> List[OperationNode]:
        ...

    def list_annotated_models(self) -> List[ModelNode]:
        ...

    def find_model(self, name: str) -> Optional[ModelNode]:
        ...


class Program:
    """Concrete :class:`ProgramSource` backed by dict side tables."""

    def __init__(self, root: NamespaceNode | None = None) -> None:
        self._root = root or NamespaceNode(name="")
        self._state: Dict[StateKey, Dict[Node, Any]] = {key: {} for key in StateKey}

    def global_namespace(self) -> NamespaceNode:
        return self._root

    def state_map(self, key: StateKey) -> Dict[Node, Any]:
        return self._state[StateKey(key)]

    def set_metadata(self, node: Node, key: StateKey, value: Any) -> None:
        self._state[StateKey(key)][node] = value

    def get_stored_metadata(self, node: Node, key: StateKey) -> Any:
        return self._state[StateKey(key)].get(node)

    def get_doc(self, node: Node) -> Optional[str]:
        return node.doc

    def list_operations(self) -> List[OperationNode]:
        return [op for ns in self._root.walk() for op in ns.operations.values()]

    def list_annotated_models(self) -> List[ModelNode]:
        messages = self._state[StateKey.MESSAGE_CONFIGS]
        return [
            model
            for ns in self._root.walk()
            for model in ns.models.values()
            if model in messages
        ]

    def find_model(self, name: str) -> Optional[ModelNode]:
        """Return the first model named ``name`` anywhere in the program."""
        for ns in self._root.walk():
            model = ns.models.get(name)
            if model is not None:
                return model
        return None


__all__ = [
    "ModelNode",
    "NamespaceNode",
    "Node",
    "OperationNode",
    "Program",
    "ProgramSource",
    "StateKey",
]
