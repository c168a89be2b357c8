"""Pure conversions of descriptor values into document-safe values."""
from __future__ import annotations

import copy
from typing import Any, Dict, Optional

PRIMITIVE_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "string": {"type": "string"},
    "number": {"type": "number", "format": "double"},
    "integer": {"type": "integer"},
    "boolean": {"type": "boolean"},
    "date": {"type": "string", "format": "date-time"},
    "buffer": {"type": "string", "format": "byte"},
    "file": {"type": "string", "format": "binary"},
    "object": {"type": "object"},
    "any": {},
}


def convert_text(text: Any) -> Any:
    """Join a list of lines with newlines; return anything else unchanged."""
    if isinstance(text, (list, tuple)):
        return "\n".join(str(line) for line in text)
    return text


def normalize_type_name(type_name: str) -> str:
    """Lower-case primitive names (`String` -> `string`); model names are case sensitive."""
    lowered = type_name.lower()
    if lowered in PRIMITIVE_SCHEMAS or lowered == "array":
        return lowered
    return type_name


def primitive_schema(type_name: str) -> Optional[Dict[str, Any]]:
    """Return a fresh schema for a primitive type name, or None for model names."""
    schema = PRIMITIVE_SCHEMAS.get(normalize_type_name(type_name))
    return copy.deepcopy(schema) if schema is not None else None


__all__ = ["PRIMITIVE_SCHEMAS", "convert_text", "normalize_type_name", "primitive_schema"]
