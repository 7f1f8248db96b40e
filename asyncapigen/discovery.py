"""Discovery of annotated operations, message models and security declarations."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from .logging import get_logger
from .models import DiscoveryResult, MessageModel, Operation, SecurityConfig, SecurityScheme
from .program import ModelNode, NamespaceNode, Node, OperationNode, ProgramSource, StateKey

_DIRECTIONS = {"publish", "subscribe"}


class DiscoveryService:
    """Walks the program namespaces and extracts the elements to emit.

    Discovery never mutates the program. Nodes whose stored metadata cannot be
    interpreted are skipped with a warning instead of aborting the run.
    """

    def __init__(self) -> None:
        self.logger = get_logger("discovery")

    def execute_discovery(self, program: ProgramSource) -> DiscoveryResult:
        """Run every discovery pass and return an immutable snapshot."""
        self.logger.info("Starting discovery")
        result = DiscoveryResult(
            operations=tuple(self.discover_operations(program)),
            message_models=tuple(self.discover_message_models(program)),
            security_configs=tuple(self.discover_security_configs(program)),
        )
        self.logger.info(
            "Discovery found %d operation(s), %d message model(s), %d security config(s)",
            len(result.operations),
            len(result.message_models),
            len(result.security_configs),
        )
        return result

    def discover_operations(self, program: ProgramSource) -> List[Operation]:
        operations: List[Operation] = []
        for namespace in _namespaces(program):
            for name, node in namespace.operations.items():
                operation = self._build_operation(program, namespace, node)
                if operation is None:
                    continue
                self.logger.debug("Found operation %s (%s)", name, operation.direction)
                operations.append(operation)
        return operations

    def discover_message_models(self, program: ProgramSource) -> List[MessageModel]:
        models: List[MessageModel] = []
        for node in program.list_annotated_models():
            config = program.get_stored_metadata(node, StateKey.MESSAGE_CONFIGS)
            if config is None:
                continue
            message = self._build_message_model(program, node, config)
            if message is None:
                continue
            self.logger.debug("Found message model %s", node.name)
            models.append(message)
        return models

    def discover_security_configs(self, program: ProgramSource) -> List[SecurityConfig]:
        configs: List[SecurityConfig] = []
        seen: Set[int] = set()
        for namespace in _namespaces(program):
            nodes: List[Node] = [*namespace.operations.values(), *namespace.models.values()]
            for node in nodes:
                raw = program.get_stored_metadata(node, StateKey.SECURITY_CONFIGS)
                if raw is None:
                    continue
                entries = raw if isinstance(raw, list) else [raw]
                for entry in entries:
                    if id(entry) in seen:
                        continue
                    seen.add(id(entry))
                    config = self._build_security_config(node, entry)
                    if config is not None:
                        self.logger.debug("Found security config %s on %s", config.name, node.name)
                        configs.append(config)
        return configs

    # ------------------------------------------------------------------
    # Node interpretation

    def _build_operation(
        self,
        program: ProgramSource,
        namespace: NamespaceNode,
        node: OperationNode,
    ) -> Optional[Operation]:
        if not isinstance(node.name, str) or not node.name:
            self.logger.warning("Skipping operation without a name in namespace '%s'", namespace.name)
            return None

        direction = program.get_stored_metadata(node, StateKey.OPERATION_TYPES)
        if direction is None:
            direction = "publish"
        elif direction not in _DIRECTIONS:
            self.logger.warning(
                "Operation '%s' has unrecognised direction %r; treating it as publish",
                node.name,
                direction,
            )
            direction = "publish"

        channel = program.get_stored_metadata(node, StateKey.CHANNEL_PATHS)
        if channel is not None and (not isinstance(channel, str) or not channel.strip()):
            self.logger.warning("Ignoring invalid channel path %r on operation '%s'", channel, node.name)
            channel = None

        protocol, protocol_config = self._read_protocol(program, node)

        return Operation(
            name=node.name,
            direction=direction,
            channel=channel.strip() if channel else None,
            protocol=protocol,
            protocol_config=protocol_config,
            parameters=list(node.parameters),
            message=self._resolve_operation_message(program, node),
            description=program.get_doc(node),
            namespace=namespace.name or None,
        )

    def _read_protocol(self, program: ProgramSource, node: OperationNode) -> tuple[Optional[str], Dict[str, Any]]:
        raw = program.get_stored_metadata(node, StateKey.PROTOCOL_CONFIGS)
        if raw is None:
            return None, {}
        if not isinstance(raw, Mapping) or not isinstance(raw.get("protocol"), str):
            self.logger.warning("Ignoring malformed protocol configuration on operation '%s'", node.name)
            return None, {}
        binding = raw.get("binding")
        if binding is None:
            binding = {key: value for key, value in raw.items() if key != "protocol"}
        if not isinstance(binding, Mapping):
            self.logger.warning("Ignoring non-mapping binding for operation '%s'", node.name)
            binding = {}
        return raw["protocol"].strip().lower(), dict(binding)

    def _resolve_operation_message(self, program: ProgramSource, node: OperationNode) -> Optional[str]:
        candidates: List[str] = []
        if node.return_type:
            candidates.append(node.return_type)
        candidates.extend(param.type for param in node.parameters)
        for type_name in candidates:
            model = program.find_model(type_name)
            if model is None:
                continue
            config = program.get_stored_metadata(model, StateKey.MESSAGE_CONFIGS)
            if not isinstance(config, Mapping):
                continue
            return _message_name(model, config)
        return None

    def _build_message_model(
        self,
        program: ProgramSource,
        node: ModelNode,
        config: Any,
    ) -> Optional[MessageModel]:
        if not isinstance(config, Mapping):
            self.logger.warning("Skipping model '%s': message metadata is not a mapping", node.name)
            return None

        examples = config.get("examples")
        if examples is None:
            examples = []
        elif not isinstance(examples, list):
            examples = [examples]

        bindings: Dict[str, Dict[str, Any]] = {}
        raw_bindings = config.get("bindings") or {}
        if not isinstance(raw_bindings, Mapping):
            self.logger.warning("Ignoring non-mapping bindings on message model '%s'", node.name)
            raw_bindings = {}
        for protocol, binding in raw_bindings.items():
            if not isinstance(binding, Mapping):
                self.logger.warning(
                    "Ignoring %s binding on message model '%s': expected a mapping",
                    protocol,
                    node.name,
                )
                continue
            bindings[str(protocol).lower()] = dict(binding)

        return MessageModel(
            name=node.name,
            message_name=_optional_str(config.get("name")),
            type=_optional_str(config.get("type")),
            title=_optional_str(config.get("title")),
            summary=_optional_str(config.get("summary")),
            description=_optional_str(config.get("description")) or program.get_doc(node),
            content_type=_optional_str(config.get("contentType")),
            examples=list(examples),
            correlation_id=_optional_str(config.get("correlationId")),
            headers=_optional_str(config.get("headers")),
            bindings=bindings,
            properties=list(node.properties),
        )

    def _build_security_config(self, node: Node, raw: Any) -> Optional[SecurityConfig]:
        if not isinstance(raw, Mapping):
            self.logger.warning("Skipping security metadata on '%s': expected a mapping", node.name)
            return None
        name = _optional_str(raw.get("name"))
        scheme = raw.get("scheme")
        if not name or not isinstance(scheme, Mapping) or not _optional_str(scheme.get("type")):
            self.logger.warning(
                "Skipping security metadata on '%s': a name and exactly one typed scheme are required",
                node.name,
            )
            return None
        scopes = raw.get("scopes") or []
        metadata = raw.get("metadata") or {}
        return SecurityConfig(
            name=name,
            scheme=SecurityScheme(
                type=str(scheme["type"]),
                description=_optional_str(scheme.get("description")),
                settings={k: v for k, v in scheme.items() if k not in {"type", "description"}},
            ),
            scopes=[str(scope) for scope in scopes] if isinstance(scopes, list) else [],
            metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
        )


def _namespaces(program: ProgramSource) -> Iterable[NamespaceNode]:
    root = program.global_namespace()
    if root is None:
        return []
    return root.walk()


def _message_name(model: ModelNode, config: Mapping[str, Any]) -> str:
    explicit = _optional_str(config.get("name"))
    if explicit:
        return explicit
    if model.name:
        return model.name
    return f"{_optional_str(config.get('type')) or 'Anonymous'}Message"


def _optional_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


__all__ = ["DiscoveryService"]
