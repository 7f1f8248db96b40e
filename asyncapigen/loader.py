"""Load API description files into a :class:`~asyncapigen.program.Program`.

A description is a YAML (or JSON) mapping describing one root namespace::

    name: Orders
    servers:
      - {name: production, url: kafka.example.com:9092, protocol: kafka}
    models:
      OrderCreated:
        properties:
          id: string
          total: {type: float64, optional: true}
        message: {contentType: application/json}
    operations:
      publishOrder:
        direction: publish
        channel: /orders/created
        protocol: {protocol: kafka, binding: {topic: orders}}
        returns: OrderCreated
    namespaces:
      Billing: {...}

Annotation keys (``message``, ``security``, ``direction``, ``channel``,
``protocol``, ``servers``) are written to the program side tables verbatim.
Their shape is checked later by discovery, which skips malformed entries.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from .errors import EmitterError, ErrorCategory
from .logging import get_logger
from .models import ModelProperty
from .program import ModelNode, NamespaceNode, OperationNode, Program, StateKey

_LOGGER = get_logger("loader")


def load_program(path: Path | str) -> Program:
    """Read ``path`` and build a program from its description."""
    source = Path(path).expanduser()
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise EmitterError(
            ErrorCategory.COMPILATION,
            "DESCRIPTION_UNREADABLE",
            f"Unable to read API description {source}: {exc}",
            context={"path": str(source)},
        ) from exc

    data = parse_description(text, json_format=source.suffix.lower() == ".json", origin=str(source))
    program = build_program(data)
    _LOGGER.debug("Loaded API description from %s", source)
    return program


def parse_description(text: str, *, json_format: bool = False, origin: str = "<string>") -> Dict[str, Any]:
    """Parse description text; YAML is accepted unless ``json_format`` is set."""
    try:
        data = json.loads(text) if json_format else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise EmitterError(
            ErrorCategory.COMPILATION,
            "DESCRIPTION_PARSE_FAILED",
            f"Failed to parse API description {origin}: {exc}",
            context={"path": origin},
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise EmitterError(
            ErrorCategory.COMPILATION,
            "DESCRIPTION_INVALID",
            f"API description {origin} must contain a mapping at the root",
            context={"path": origin},
        )
    return data


def build_program(data: Mapping[str, Any]) -> Program:
    """Build a program from an already-parsed description mapping."""
    program = Program(NamespaceNode(name=str(data.get("name") or "")))
    _populate_namespace(program, program.global_namespace(), data, path=[])
    return program


def _populate_namespace(
    program: Program,
    namespace: NamespaceNode,
    data: Mapping[str, Any],
    *,
    path: List[str],
) -> None:
    namespace.doc = _as_doc(data.get("doc"))
    location = ".".join(path) or "<root>"

    if "servers" in data:
        program.set_metadata(namespace, StateKey.SERVER_CONFIGS, data["servers"])

    for name, raw in _mapping_section(data, "models", location).items():
        model_data = _require_mapping(raw, f"{location}.models.{name}")
        model = ModelNode(
            name=str(name),
            properties=_parse_properties(model_data.get("properties"), f"{location}.models.{name}"),
            doc=_as_doc(model_data.get("doc")),
        )
        namespace.models[model.name] = model
        if "message" in model_data:
            program.set_metadata(model, StateKey.MESSAGE_CONFIGS, model_data["message"])
        if "security" in model_data:
            program.set_metadata(model, StateKey.SECURITY_CONFIGS, model_data["security"])

    for name, raw in _mapping_section(data, "operations", location).items():
        op_data = _require_mapping(raw, f"{location}.operations.{name}")
        returns = op_data.get("returns")
        operation = OperationNode(
            name=str(name),
            parameters=_parse_properties(op_data.get("parameters"), f"{location}.operations.{name}"),
            return_type=str(returns) if returns is not None else None,
            doc=_as_doc(op_data.get("doc")),
        )
        namespace.operations[operation.name] = operation
        if "direction" in op_data:
            program.set_metadata(operation, StateKey.OPERATION_TYPES, op_data["direction"])
        if "channel" in op_data:
            program.set_metadata(operation, StateKey.CHANNEL_PATHS, op_data["channel"])
        if "protocol" in op_data:
            protocol = op_data["protocol"]
            if isinstance(protocol, str):
                protocol = {"protocol": protocol}
            program.set_metadata(operation, StateKey.PROTOCOL_CONFIGS, protocol)
        if "security" in op_data:
            program.set_metadata(operation, StateKey.SECURITY_CONFIGS, op_data["security"])

    for name, raw in _mapping_section(data, "namespaces", location).items():
        child_data = _require_mapping(raw, f"{location}.namespaces.{name}")
        child = NamespaceNode(name=str(name))
        namespace.namespaces[child.name] = child
        _populate_namespace(program, child, child_data, path=[*path, str(name)])


def _mapping_section(data: Mapping[str, Any], key: str, location: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    return _require_mapping(value, f"{location}.{key}")


def _require_mapping(value: Any, location: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise EmitterError(
            ErrorCategory.COMPILATION,
            "DESCRIPTION_INVALID",
            f"Expected a mapping at {location}",
            context={"location": location},
        )
    return value


def _parse_properties(raw: Any, location: str) -> List[ModelProperty]:
    properties: List[ModelProperty] = []
    for name, value in _require_mapping(raw, f"{location}.properties").items():
        if isinstance(value, str):
            optional = value.endswith("?")
            properties.append(ModelProperty(name=str(name), type=value.rstrip("?"), optional=optional))
            continue
        if isinstance(value, dict) and isinstance(value.get("type"), str):
            properties.append(
                ModelProperty(
                    name=str(name),
                    type=value["type"],
                    optional=bool(value.get("optional", False)),
                    description=_as_doc(value.get("doc") or value.get("description")),
                )
            )
            continue
        raise EmitterError(
            ErrorCategory.TYPE,
            "PROPERTY_TYPE_UNRESOLVED",
            f"Property {location}.{name} must declare a type",
            context={"location": f"{location}.{name}"},
            recoverable=False,
        )
    return properties


def _as_doc(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


__all__ = ["build_program", "load_program", "parse_description"]
