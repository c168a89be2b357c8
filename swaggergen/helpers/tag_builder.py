"""Tag objects derived from class (resource) descriptors."""
from __future__ import annotations

from typing import Any, Dict

from swaggergen.helpers.type_converter import convert_text
from swaggergen.schemas import ClassDescriptor


def build_tag_from_class(class_def: ClassDescriptor) -> Dict[str, Any]:
    tag: Dict[str, Any] = {"name": class_def.name}
    if class_def.description:
        tag["description"] = convert_text(class_def.description)
    if class_def.external_docs:
        tag["externalDocs"] = dict(class_def.external_docs)
    return tag


__all__ = ["build_tag_from_class"]
