"""Introspection boundary: build an `ApiSnapshot` from a running application.

- snapshot_from_fastapi(app, orm_base=None): routes, classes (one per route tag)
  and the pydantic models reachable from route parameters and responses
- models_from_sqlalchemy(base): one model descriptor per mapped ORM class

Everything downstream works on the returned descriptors only.
"""

from __future__ import annotations

import datetime
import decimal
import inspect
import logging
import types
import uuid
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Set, Tuple, Union, get_args, get_origin

from fastapi import FastAPI, params
from fastapi.encoders import jsonable_encoder
from fastapi.routing import APIRoute
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from swaggergen.schemas import (
    ApiInfo,
    ApiSnapshot,
    ArgDescriptor,
    ClassDescriptor,
    MethodDescriptor,
    ModelDescriptor,
    PropertyDescriptor,
    ReturnDescriptor,
    RouteDescriptor,
)

logger = logging.getLogger(__name__)

DEFAULT_CLASS_NAME = "default"

_SEQUENCE_ORIGINS = (list, set, frozenset, tuple)


def _model_key(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _own_doc(cls: type) -> Optional[str]:
    doc = cls.__dict__.get("__doc__")
    return inspect.cleandoc(doc) if doc else None


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Annotated:
        return _unwrap_optional(get_args(annotation)[0])
    if origin in (Union, types.UnionType):
        non_none = [a for a in get_args(annotation) if a is not type(None)]
        if len(non_none) == 1:
            return _unwrap_optional(non_none[0])
    return annotation


def enum_values(annotation: Any) -> Optional[List[Any]]:
    annotation = _unwrap_optional(annotation)
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return [member.value for member in annotation]
    return None


def type_spec_for(annotation: Any, models: Optional[Dict[str, ModelDescriptor]] = None, _in_progress: Optional[Set[str]] = None) -> Any:
    """Translate a Python annotation into a type spec.

    Pydantic models are referenced by their catalog key (`module.QualName`) and
    added to `models` when given.
    """
    annotation = _unwrap_optional(annotation)
    if annotation is None or annotation is type(None) or annotation is Any:
        return "any"

    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        return "any"
    if origin in _SEQUENCE_ORIGINS:
        args = [a for a in get_args(annotation) if a is not Ellipsis]
        return [type_spec_for(args[0], models, _in_progress)] if args else []
    if origin is dict:
        return "object"
    if origin is not None:
        annotation = origin

    if not isinstance(annotation, type):
        return "any"
    if issubclass(annotation, BaseModel):
        if models is not None:
            _add_pydantic_model(annotation, models, _in_progress if _in_progress is not None else set())
        return _model_key(annotation)
    if issubclass(annotation, bool):
        return "boolean"
    if issubclass(annotation, Enum):
        return "string"
    if issubclass(annotation, int):
        return "integer"
    if issubclass(annotation, (float, decimal.Decimal)):
        return "number"
    if issubclass(annotation, (str, uuid.UUID)):
        return "string"
    if issubclass(annotation, (datetime.datetime, datetime.date)):
        return "date"
    if issubclass(annotation, (bytes, bytearray)):
        return "buffer"
    if issubclass(annotation, UploadFile):
        return "file"
    if issubclass(annotation, dict):
        return "object"
    if issubclass(annotation, _SEQUENCE_ORIGINS):
        return []
    return "any"


def _add_pydantic_model(model_cls: type, models: Dict[str, ModelDescriptor], in_progress: Set[str]) -> None:
    key = _model_key(model_cls)
    if key in models or key in in_progress:
        return
    in_progress.add(key)

    properties: Dict[str, PropertyDescriptor] = {}
    for field_name, field in model_cls.model_fields.items():
        default = None
        if not field.is_required() and field.default_factory is None:
            default = jsonable_encoder(field.default)
        properties[field.alias or field_name] = PropertyDescriptor(
            type=type_spec_for(field.annotation, models, in_progress),
            description=field.description,
            required=field.is_required(),
            default=default,
            enum=enum_values(field.annotation),
        )

    models[key] = ModelDescriptor(name=model_cls.__name__, description=_own_doc(model_cls), properties=properties)
    in_progress.discard(key)


def models_from_sqlalchemy(base: Any) -> Dict[str, ModelDescriptor]:
    """Describe every class mapped by a declarative `base` (or a mapper registry)."""
    registry = getattr(base, "registry", base)
    models: Dict[str, ModelDescriptor] = {}

    for mapper in sorted(registry.mappers, key=lambda m: _model_key(m.class_)):
        cls = mapper.class_
        properties: Dict[str, PropertyDescriptor] = {}

        for attr in mapper.column_attrs:
            column = attr.columns[0]
            try:
                python_type: Any = column.type.python_type
            except NotImplementedError:
                python_type = None
            required = (
                not column.nullable
                and column.default is None
                and column.server_default is None
                and not column.primary_key
            )
            properties[attr.key] = PropertyDescriptor(
                type=type_spec_for(python_type),
                description=column.comment or column.doc,
                required=required,
                enum=enum_values(python_type),
            )

        for rel in mapper.relationships:
            target = _model_key(rel.mapper.class_)
            properties[rel.key] = PropertyDescriptor(type=[target] if rel.uselist else target)

        table = getattr(cls, "__table__", None)
        description = _own_doc(cls) or getattr(table, "comment", None)
        models[_model_key(cls)] = ModelDescriptor(name=cls.__name__, description=description, properties=properties)

    return models


def _tag_name(tag: Any) -> str:
    return str(tag.value) if isinstance(tag, Enum) else str(tag)


_PARAM_GROUPS = (
    ("path", "path_params"),
    ("query", "query_params"),
    ("header", "header_params"),
    ("body", "body_params"),
)


def _collect_params(dependant: Any, groups: Dict[str, List[Any]], seen: Set[Tuple[str, str]]) -> None:
    for source, attr in _PARAM_GROUPS:
        for field in getattr(dependant, attr, ()):
            key = (source, field.alias or field.name)
            if key in seen:
                continue
            seen.add(key)
            groups[source].append(field)
    for sub_dependant in getattr(dependant, "dependencies", ()):
        _collect_params(sub_dependant, groups, seen)


def _accepts_for(route: APIRoute, models: Dict[str, ModelDescriptor]) -> List[ArgDescriptor]:
    """Arguments of the endpoint and of every dependency it pulls in, each name once per source."""
    groups: Dict[str, List[Any]] = {source: [] for source, _ in _PARAM_GROUPS}
    _collect_params(route.dependant, groups, set())

    accepts: List[ArgDescriptor] = []
    for source, _ in _PARAM_GROUPS:
        for field in groups[source]:
            if source == "body" and isinstance(field.field_info, params.Form):
                arg_source = "form"
            else:
                arg_source = source
            accepts.append(
                ArgDescriptor(
                    arg=field.alias or field.name,
                    type=type_spec_for(field.field_info.annotation, models),
                    description=field.field_info.description,
                    required=field.field_info.is_required(),
                    source=arg_source,
                )
            )
    return accepts


def snapshot_from_fastapi(app: FastAPI, orm_base: Any = None, default_class: str = DEFAULT_CLASS_NAME) -> ApiSnapshot:
    models: Dict[str, ModelDescriptor] = {}
    if orm_base is not None:
        models.update(models_from_sqlalchemy(orm_base))

    classes: Dict[str, ClassDescriptor] = {}
    routes: List[RouteDescriptor] = []

    for route in app.routes:
        if not isinstance(route, APIRoute):
            continue

        class_name = _tag_name(route.tags[0]) if route.tags else default_class
        class_def = classes.setdefault(class_name, ClassDescriptor(name=class_name))
        class_def.methods.append(MethodDescriptor(name=route.name, documented=route.include_in_schema))

        accepts = _accepts_for(route, models)
        if route.response_model is not None:
            returns = [ReturnDescriptor(type=type_spec_for(route.response_model, models), root=True)]
        else:
            returns = [ReturnDescriptor(type="any", root=True)]

        for verb in sorted(route.methods):
            routes.append(
                RouteDescriptor(
                    method=f"{class_name}.{route.name}",
                    class_name=class_name,
                    method_name=route.name,
                    verb=verb,
                    path=route.path_format,
                    documented=route.include_in_schema,
                    description=route.summary,
                    notes=route.description or None,
                    deprecated=bool(route.deprecated),
                    operation_id=route.operation_id,
                    status=route.status_code,
                    accepts=accepts,
                    returns=returns,
                )
            )

    logger.info("Introspected %d routes, %d classes, %d models", len(routes), len(classes), len(models))
    return ApiSnapshot(
        routes=routes,
        classes=list(classes.values()),
        models=models,
        rest_api_root=app.root_path or None,
        app_info=ApiInfo(title=app.title, description=app.description or None, version=app.version),
        extensions=dict(app.extra.get("swagger") or {}),
    )


__all__ = ["DEFAULT_CLASS_NAME", "enum_values", "type_spec_for", "models_from_sqlalchemy", "snapshot_from_fastapi"]
