"""Route mapping: one route descriptor -> (path template, HTTP method, operation).

Complex argument and return types are resolved through the schema registry, so
mapping a route may register anonymous schemas as a side effect. The operation
id is reserved in the operation id registry at mapping time.
"""
from __future__ import annotations

import copy
import logging
import re
from typing import Any, Dict, List, Optional, Set, Tuple

from swaggergen.errors import UnsupportedVerb
from swaggergen.helpers.model_helper import build_schema_from_type
from swaggergen.helpers.operation_ids import OperationIdRegistry
from swaggergen.helpers.type_converter import convert_text
from swaggergen.helpers.type_registry import TypeRegistry
from swaggergen.schemas import ArgDescriptor, ClassDescriptor, RouteDescriptor
from swaggergen.settings import ResolvedOptions

logger = logging.getLogger(__name__)

HTTP_METHODS: Tuple[str, ...] = ("get", "post", "put", "patch", "delete", "head", "options")
VERB_ALIASES = {"del": "delete", "all": "post"}
CONTEXT_SOURCES = {"req", "res", "context"}
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"
SUCCESS_DESCRIPTION = "Request was successful"

_EXPRESS_PARAM_RE = re.compile(r"/:(\w+)")
_TEMPLATE_PARAM_RE = re.compile(r"\{([^}/]+)\}")


def convert_path(path: str) -> str:
    """Convert `:id` style segments into OpenAPI `{id}` templates."""
    return _EXPRESS_PARAM_RE.sub(r"/{\1}", path)


def path_parameter_names(path: str) -> Set[str]:
    return set(_TEMPLATE_PARAM_RE.findall(path))


def normalize_verb(verb: str) -> str:
    method = (verb or "").lower()
    method = VERB_ALIASES.get(method, method)
    if method not in HTTP_METHODS:
        raise UnsupportedVerb(f"Unsupported HTTP verb: {verb!r}", details={"verb": verb})
    return method


def resolve_source(accept: ArgDescriptor, path_params: Set[str]) -> str:
    if accept.source:
        return accept.source
    return "path" if accept.arg in path_params else "query"


def _object_type(args: List[ArgDescriptor]) -> Dict[str, Any]:
    return {
        a.arg: {"type": a.type, "description": a.description, "required": a.required}
        for a in args
    }


def build_parameter(accept: ArgDescriptor, source: str, registry: TypeRegistry, name_hint: str) -> Dict[str, Any]:
    param: Dict[str, Any] = {"name": accept.arg, "in": source}
    if accept.description:
        param["description"] = convert_text(accept.description)
    param["required"] = True if source == "path" else accept.required
    param["schema"] = build_schema_from_type(accept.type, registry, f"{name_hint}_{accept.arg}")
    return param


def build_request_body(
    body_args: List[ArgDescriptor],
    form_args: List[ArgDescriptor],
    registry: TypeRegistry,
    consumes: List[str],
    name_hint: str,
) -> Optional[Dict[str, Any]]:
    if not body_args and not form_args:
        return None

    content: Dict[str, Any] = {}
    if body_args:
        if len(body_args) == 1:
            schema = build_schema_from_type(body_args[0].type, registry, f"{name_hint}_{body_args[0].arg}")
        else:
            schema = build_schema_from_type(_object_type(body_args), registry, f"{name_hint}_body")
        for media_type in consumes:
            content[media_type] = {"schema": copy.deepcopy(schema)}
    if form_args:
        schema = build_schema_from_type(_object_type(form_args), registry, f"{name_hint}_form")
        content[FORM_MEDIA_TYPE] = {"schema": schema}

    request_body: Dict[str, Any] = {}
    described = [a for a in body_args if a.description]
    if len(body_args) == 1 and described:
        request_body["description"] = convert_text(described[0].description)
    request_body["required"] = any(a.required for a in body_args + form_args)
    request_body["content"] = content
    return request_body


def build_responses(route: RouteDescriptor, registry: TypeRegistry, produces: List[str], name_hint: str) -> Dict[str, Any]:
    responses: Dict[str, Any] = {}
    root = next((r for r in route.returns if r.root), None)

    if root is not None:
        schema: Optional[Dict[str, Any]] = build_schema_from_type(root.type, registry, f"{name_hint}_{root.arg}")
    elif route.returns:
        properties = {
            r.arg: {"type": r.type, "description": r.description}
            for r in route.returns
        }
        schema = build_schema_from_type(properties, registry, f"{name_hint}_response")
    else:
        schema = None

    status = route.status or (200 if schema is not None else 204)
    response: Dict[str, Any] = {"description": SUCCESS_DESCRIPTION}
    if schema is not None:
        response["content"] = {media_type: {"schema": copy.deepcopy(schema)} for media_type in produces}
    responses[str(status)] = response

    for error in route.errors:
        responses.setdefault(str(error.status), {"description": error.message})
    return responses


def map_route(
    route: RouteDescriptor,
    class_def: ClassDescriptor,
    type_registry: TypeRegistry,
    operation_id_registry: OperationIdRegistry,
    options: ResolvedOptions,
) -> Tuple[str, str, Dict[str, Any]]:
    """Map one route into `(path template, method, operation)`."""
    path = convert_path(route.path)
    method = normalize_verb(route.verb)
    name_hint = f"{class_def.name}_{route.method_name}"

    candidate = route.operation_id or f"{class_def.name}.{route.method_name}"
    operation_id = operation_id_registry.reserve(candidate)

    path_params = path_parameter_names(path)
    parameters: List[Dict[str, Any]] = []
    body_args: List[ArgDescriptor] = []
    form_args: List[ArgDescriptor] = []
    for accept in route.accepts:
        source = resolve_source(accept, path_params)
        if source in CONTEXT_SOURCES:
            continue
        if source == "body":
            body_args.append(accept)
        elif source == "form":
            form_args.append(accept)
        else:
            parameters.append(build_parameter(accept, source, type_registry, name_hint))

    operation: Dict[str, Any] = {"tags": [class_def.name]}
    if route.description:
        operation["summary"] = convert_text(route.description)
    if route.notes:
        operation["description"] = convert_text(route.notes)
    operation["operationId"] = operation_id
    operation["parameters"] = parameters

    request_body = build_request_body(body_args, form_args, type_registry, options.consumes, name_hint)
    if request_body is not None:
        operation["requestBody"] = request_body

    operation["responses"] = build_responses(route, type_registry, options.produces, name_hint)
    if route.deprecated:
        operation["deprecated"] = True

    logger.debug("Mapped route %s %s to operation %r", method.upper(), path, operation_id)
    return path, method, operation


__all__ = [
    "HTTP_METHODS",
    "convert_path",
    "path_parameter_names",
    "normalize_verb",
    "resolve_source",
    "build_parameter",
    "build_request_body",
    "build_responses",
    "map_route",
]
