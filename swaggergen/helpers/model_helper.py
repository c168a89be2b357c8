"""Model mapping: turns model descriptors and type specs into schema objects.

A type spec is one of:
- a primitive name (`"string"`, `"date"`, ...), see `type_converter.PRIMITIVE_SCHEMAS`
- `[item_spec]` for arrays (`[]` or `"array"` for arrays of anything)
- a mapping of property descriptors, i.e. an anonymous object type
- any other name, taken as a reference to a (possibly later) registered model,
  by its catalog key or its model name
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from swaggergen.helpers.type_converter import convert_text, normalize_type_name, primitive_schema
from swaggergen.helpers.type_registry import TypeRegistry
from swaggergen.schemas import ModelDescriptor, PropertyDescriptor, Text

logger = logging.getLogger(__name__)


def build_schema_from_type(type_spec: Any, registry: TypeRegistry, name_hint: str = "AnonymousModel") -> Dict[str, Any]:
    if type_spec is None:
        return {}

    if isinstance(type_spec, (list, tuple)):
        items = build_schema_from_type(type_spec[0], registry, name_hint) if type_spec else {}
        return {"type": "array", "items": items}

    if isinstance(type_spec, dict):
        definition = build_object_definition(type_spec, registry, name_hint)
        name = registry.register(name_hint, definition)
        return registry.reference(name)

    if isinstance(type_spec, type):
        type_spec = type_spec.__name__

    type_name = str(type_spec)
    if normalize_type_name(type_name) == "array":
        return {"type": "array", "items": {}}
    schema = primitive_schema(type_name)
    if schema is not None:
        return schema
    return registry.reference(type_name)


def build_property_schema(prop: PropertyDescriptor, registry: TypeRegistry, name_hint: str) -> Dict[str, Any]:
    schema = build_schema_from_type(prop.type, registry, name_hint)
    # siblings of $ref are ignored by OpenAPI 3.0 readers
    if "$ref" in schema:
        return schema
    if prop.description:
        schema["description"] = convert_text(prop.description)
    if prop.default is not None:
        schema["default"] = prop.default
    if prop.enum:
        schema["enum"] = list(prop.enum)
    return schema


def build_object_definition(
    properties: Dict[str, Any],
    registry: TypeRegistry,
    name_hint: str,
    description: Optional[Text] = None,
    hidden: Optional[List[str]] = None,
    strict: bool = False,
) -> Dict[str, Any]:
    hidden_names = set(hidden or ())
    out: Dict[str, Any] = {"type": "object"}
    if description:
        out["description"] = convert_text(description)

    props: Dict[str, Any] = {}
    required: List[str] = []
    for prop_name, raw in properties.items():
        if prop_name in hidden_names:
            continue
        prop = PropertyDescriptor.coerce(raw)
        props[prop_name] = build_property_schema(prop, registry, f"{name_hint}_{prop_name}")
        if prop.required:
            required.append(prop_name)

    out["properties"] = props
    if required:
        out["required"] = required
    if strict:
        out["additionalProperties"] = False
    return out


def generate_model_definition(model: ModelDescriptor, registry: TypeRegistry) -> Dict[str, Any]:
    return build_object_definition(
        model.properties,
        registry,
        name_hint=model.name,
        description=model.description,
        hidden=model.hidden,
        strict=model.strict,
    )


def register_model_definition(model: ModelDescriptor, registry: TypeRegistry) -> str:
    """Register `model` and return the schema name it was stored under."""
    definition = generate_model_definition(model, registry)
    name = registry.register(model.name, definition)
    logger.debug("Registered model %r as schema %r", model.name, name)
    return name


__all__ = [
    "build_schema_from_type",
    "build_property_schema",
    "build_object_definition",
    "generate_model_definition",
    "register_model_definition",
]
