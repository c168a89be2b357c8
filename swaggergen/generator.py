"""OpenAPI document assembly.

`create_openapi_document` turns an introspected `ApiSnapshot` into one
OpenAPI 3.0 document:

1. build the document skeleton from the resolved options
2. register every model of the catalog as a schema; references to a catalog
   key resolve to that model's schema, a bare model name to the first model
   (in key order) declaring it
3. build a tag for every named class with at least one documented method;
   of several classes sharing a name the first in canonical order is used
4. map every documented route whose class got a tag (and exposes the method);
   routes of unknown or undocumented classes are skipped and logged
5. sort paths and schemas by key, drop tags no operation uses, sort tags
6. hand the document to the listeners and return it

Registries live for one call only; repeated calls over the same snapshot give
identical documents whatever the order of routes, classes and models.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any, Dict, Iterable, List, Set, Union

from pydantic import BaseModel

from swaggergen.helpers.model_helper import register_model_definition
from swaggergen.helpers.openapi import Document, DocumentListener, emit_document
from swaggergen.helpers.operation_ids import OperationIdRegistry
from swaggergen.helpers.route_helper import HTTP_METHODS, convert_path, map_route, normalize_verb
from swaggergen.helpers.tag_builder import build_tag_from_class
from swaggergen.helpers.type_converter import convert_text
from swaggergen.helpers.type_registry import TypeRegistry
from swaggergen.schemas import ApiSnapshot, ClassDescriptor, ModelDescriptor, RouteDescriptor
from swaggergen.settings import ResolvedOptions, SpecOptions, resolve_options

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.1"


def normalize_base_path(base_path: str) -> str:
    if base_path and base_path.endswith("/"):
        return base_path[:-1]
    return base_path


def build_document_base(options: ResolvedOptions) -> Document:
    """Return the document skeleton: info, servers, security and empty sections."""
    info = options.api_info.model_dump(exclude_none=True)
    info = {key: convert_text(value) for key, value in info.items()}
    info["version"] = str(info.get("version") or options.version)

    document: Document = {
        "openapi": OPENAPI_VERSION,
        "info": info,
        "servers": [{"url": normalize_base_path(options.base_path)}],
        "paths": {},
        "tags": [],
        "components": {"schemas": {}},
    }
    if options.security_schemes is not None:
        document["components"]["securitySchemes"] = copy.deepcopy(options.security_schemes)
        document["security"] = [{name: []} for name in options.security_schemes]

    # extensions only fill keys the document does not define
    for key, value in options.extensions.items():
        document.setdefault(key, copy.deepcopy(value))
    return document


def _canonical(descriptor: BaseModel) -> str:
    return json.dumps(descriptor.model_dump(), sort_keys=True, default=str)


def _route_sort_key(route: RouteDescriptor):
    try:
        verb = normalize_verb(route.verb)
    except ValueError:
        verb = route.verb
    # full descriptor dump breaks ties between routes sharing path, verb and names
    return (convert_path(route.path), verb, route.class_name or "", route.method_name or "", _canonical(route))


def _collect_tags(classes: Iterable[ClassDescriptor]):
    candidates: Dict[str, List[ClassDescriptor]] = {}
    for class_def in classes:
        if class_def.name and class_def.has_documented_methods():
            candidates.setdefault(class_def.name, []).append(class_def)

    classes_by_name: Dict[str, ClassDescriptor] = {}
    tags: List[Dict[str, Any]] = []
    for name in sorted(candidates):
        group = sorted(candidates[name], key=_canonical)
        if len(group) > 1:
            logger.warning("Duplicate class %r: %d definitions, using the first in canonical order", name, len(group))
        classes_by_name[name] = group[0]
        tags.append(build_tag_from_class(group[0]))
    return classes_by_name, tags


def _register_models(models: Dict[str, ModelDescriptor], registry: TypeRegistry) -> None:
    registered = {key: register_model_definition(models[key], registry) for key in sorted(models)}
    # catalog keys always resolve to their own schema; a bare model name to
    # the first model (in key order) declaring it
    for key, name in registered.items():
        registry.bind(key, name)
    for key, name in registered.items():
        registry.bind(models[key].name, name, replace=False)


def create_openapi_document(
    snapshot: ApiSnapshot,
    options: Union[SpecOptions, Dict[str, Any], None] = None,
    listeners: Iterable[DocumentListener] = (),
) -> Document:
    opts = resolve_options(options, snapshot)
    document = build_document_base(opts)

    type_registry = TypeRegistry()
    operation_ids = OperationIdRegistry()

    _register_models(snapshot.models, type_registry)

    # A class is an endpoint root (/widgets, /orders); OpenAPI groups endpoints with tags.
    classes_by_name, tags = _collect_tags(snapshot.classes)

    paths: Dict[str, Dict[str, Any]] = {}
    for route in sorted(snapshot.routes, key=_route_sort_key):
        if not route.documented:
            continue

        class_def = classes_by_name.get(route.class_name)
        if class_def is None:
            logger.error("Route exists with no class: %s", route.model_dump_json(include={"method", "verb", "path"}))
            continue

        if not class_def.exposes(route.method_name):
            continue

        path, method, operation = map_route(route, class_def, type_registry, operation_ids, opts)
        path_item = paths.setdefault(path, {})
        if method in path_item:
            logger.warning("Operation %s %s replaced by %r", method.upper(), path, operation["operationId"])
        path_item[method] = operation

    type_registry.resolve_refs(paths)

    schemas = type_registry.get_schemas()
    document["components"]["schemas"] = {name: schemas[name] for name in sorted(schemas)}

    used_tags: Set[str] = set()
    for path in sorted(paths):
        item: Dict[str, Any] = {}
        for method in HTTP_METHODS:
            operation = paths[path].get(method)
            if operation is None:
                continue
            item[method] = operation
            used_tags.update(operation["tags"])
        document["paths"][path] = item

    document["tags"] = sorted((tag for tag in tags if tag["name"] in used_tags), key=lambda tag: tag["name"])

    return emit_document(document, listeners)


__all__ = ["OPENAPI_VERSION", "build_document_base", "normalize_base_path", "create_openapi_document"]
