"""Conversion of model shapes into JSON Schema fragments."""

from __future__ import annotations

import re
from typing import Any, Dict, FrozenSet, Optional

from .errors import EmitterError, ErrorCategory
from .models import ModelProperty
from .program import ModelNode, ProgramSource

_SCALARS: Dict[str, Dict[str, Any]] = {
    "string": {"type": "string"},
    "boolean": {"type": "boolean"},
    "bool": {"type": "boolean"},
    "integer": {"type": "integer"},
    "int8": {"type": "integer", "format": "int8"},
    "int16": {"type": "integer", "format": "int16"},
    "int32": {"type": "integer", "format": "int32"},
    "int64": {"type": "integer", "format": "int64"},
    "uint8": {"type": "integer", "format": "uint8", "minimum": 0},
    "uint16": {"type": "integer", "format": "uint16", "minimum": 0},
    "uint32": {"type": "integer", "format": "uint32", "minimum": 0},
    "uint64": {"type": "integer", "format": "uint64", "minimum": 0},
    "safeint": {"type": "integer", "format": "int64"},
    "number": {"type": "number"},
    "numeric": {"type": "number"},
    "decimal": {"type": "number"},
    "float": {"type": "number"},
    "float32": {"type": "number", "format": "float"},
    "float64": {"type": "number", "format": "double"},
    "utcDateTime": {"type": "string", "format": "date-time"},
    "offsetDateTime": {"type": "string", "format": "date-time"},
    "plainDate": {"type": "string", "format": "date"},
    "plainTime": {"type": "string", "format": "time"},
    "duration": {"type": "string", "format": "duration"},
    "bytes": {"type": "string", "format": "binary"},
    "url": {"type": "string", "format": "uri"},
    "uuid": {"type": "string", "format": "uuid"},
    "null": {"type": "null"},
    "unknown": {},
    "any": {},
}

_RECORD = re.compile(r"^Record<\s*(?P<inner>.+)\s*>$")


class SchemaConverter:
    """Turns models and type expressions into JSON Schema objects.

    Nested models are inlined. A model that refers back to one of its
    enclosing models is cut off with a titled ``object`` schema.
    """

    def __init__(self, program: ProgramSource) -> None:
        self._program = program

    def convert_model(self, model: ModelNode) -> Dict[str, Any]:
        return self._model_schema(model, frozenset())

    def convert_properties(
        self,
        properties: list[ModelProperty],
        *,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        return self._object_schema(properties, description, frozenset())

    def convert_type(self, expression: str) -> Dict[str, Any]:
        return self._type_schema(expression, frozenset())

    def _model_schema(self, model: ModelNode, seen: FrozenSet[str]) -> Dict[str, Any]:
        schema = self._object_schema(model.properties, self._program.get_doc(model), seen | {model.name})
        if model.name:
            schema["title"] = model.name
        return schema

    def _object_schema(
        self,
        properties: list[ModelProperty],
        description: Optional[str],
        seen: FrozenSet[str],
    ) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": "object", "properties": {}}
        required = []
        for prop in properties:
            prop_schema = self._type_schema(prop.type, seen)
            if prop.description:
                prop_schema = {**prop_schema, "description": prop.description}
            schema["properties"][prop.name] = prop_schema
            if not prop.optional:
                required.append(prop.name)
        if required:
            schema["required"] = required
        if description:
            schema["description"] = description
        return schema

    def _type_schema(self, expression: str, seen: FrozenSet[str]) -> Dict[str, Any]:
        expr = expression.strip()
        if "|" in expr:
            variants = [part for part in (p.strip() for p in expr.split("|")) if part]
            return {"oneOf": [self._type_schema(part, seen) for part in variants]}
        if expr.endswith("[]"):
            return {"type": "array", "items": self._type_schema(expr[:-2], seen)}
        record = _RECORD.match(expr)
        if record:
            return {
                "type": "object",
                "additionalProperties": self._type_schema(record.group("inner"), seen),
            }
        scalar = _SCALARS.get(expr)
        if scalar is not None:
            return dict(scalar)
        if expr in seen:
            return {"type": "object", "title": expr}
        model = self._program.find_model(expr)
        if model is None:
            raise EmitterError(
                ErrorCategory.TYPE,
                "TYPE_UNRESOLVED",
                f"Unable to resolve type '{expr}'",
                context={"type": expr},
            )
        return self._model_schema(model, seen)


__all__ = ["SchemaConverter"]
