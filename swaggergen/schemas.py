"""Pydantic descriptors for the introspected API surface.

These are the inputs of document assembly: routes, classes (resources),
their methods and the model catalog. Everything is validated once at the
introspection boundary so the assembly pipeline can rely on typed fields.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from swaggergen.errors import InvalidMethodIdentifier

# Localizable text: either a plain string or a list of lines
Text = Union[str, List[str]]

ArgSource = Literal["path", "query", "header", "body", "form", "req", "res", "context"]

_METHOD_ID_RE = re.compile(r"^([^.]+)\.(.*)$")
INSTANCE_METHOD_MARKER = "prototype."


def split_method_id(method_id: str) -> Tuple[str, str]:
    """Split a compound `Class.method` identifier into its two names.

    The instance-method marker is stripped, so `widget.prototype.findById`
    yields `("widget", "findById")`.
    """
    match = _METHOD_ID_RE.match(method_id or "")
    if not match or not match.group(2):
        raise InvalidMethodIdentifier(f"Invalid method identifier: {method_id!r}", details={"method": method_id})
    class_name, method_name = match.groups()
    return class_name, method_name.replace(INSTANCE_METHOD_MARKER, "", 1)


# ----------------------------- Models --------------------------------
class PropertyDescriptor(BaseModel):
    type: Any = "any"
    description: Optional[Text] = None
    required: bool = False
    default: Any = None
    enum: Optional[List[Any]] = None

    @classmethod
    def coerce(cls, value: Any) -> "PropertyDescriptor":
        """Accept a bare type spec (`"string"`, `["Order"]`) as a property.

        A mapping is read as a descriptor only when it has a `type` key and no
        key outside the descriptor fields; any other mapping is an anonymous
        object type, so `{"kind": "string", "type": "string"}` keeps both
        properties.
        """
        if isinstance(value, PropertyDescriptor):
            return value
        if isinstance(value, dict) and "type" in value and set(value) <= set(cls.model_fields):
            return cls.model_validate(value)
        return cls(type=value)


class ModelDescriptor(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[Text] = None
    properties: Dict[str, PropertyDescriptor] = Field(default_factory=dict)
    hidden: List[str] = Field(default_factory=list)
    strict: bool = False

    @field_validator("properties", mode="before")
    def coerce_properties(cls, v):
        if v is None:
            return {}
        return {name: PropertyDescriptor.coerce(prop) for name, prop in v.items()}


# ----------------------------- Routes --------------------------------
class ArgDescriptor(BaseModel):
    arg: str
    type: Any = "any"
    description: Optional[Text] = None
    required: bool = False
    source: Optional[ArgSource] = None


class ReturnDescriptor(BaseModel):
    arg: str = "data"
    type: Any = "any"
    description: Optional[Text] = None
    root: bool = False


class ErrorDescriptor(BaseModel):
    status: int
    message: str


class RouteDescriptor(BaseModel):
    method: str
    class_name: Optional[str] = None
    method_name: Optional[str] = None
    verb: str
    path: str
    documented: bool = True
    description: Optional[Text] = None
    notes: Optional[Text] = None
    deprecated: bool = False
    operation_id: Optional[str] = None
    status: Optional[int] = None
    accepts: List[ArgDescriptor] = Field(default_factory=list)
    returns: List[ReturnDescriptor] = Field(default_factory=list)
    errors: List[ErrorDescriptor] = Field(default_factory=list)

    @model_validator(mode="after")
    def populate_names(self):
        """Derive `class_name`/`method_name` from `method` when not supplied."""
        if not self.class_name or not self.method_name:
            class_name, method_name = split_method_id(self.method)
            self.class_name = self.class_name or class_name
            self.method_name = self.method_name or method_name
        return self


# ----------------------------- Classes -------------------------------
class MethodDescriptor(BaseModel):
    name: str
    documented: bool = True
    description: Optional[Text] = None


class ClassDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    description: Optional[Text] = None
    external_docs: Optional[Dict[str, str]] = None
    methods: List[MethodDescriptor] = Field(default_factory=list)
    swagger_methods: Optional[List[str]] = Field(default=None, alias="_swaggerMethods")

    @field_validator("swagger_methods", mode="before")
    def coerce_allow_list(cls, v):
        # `{"find": True}` is accepted as well as `["find"]`
        if isinstance(v, dict):
            return [name for name, enabled in v.items() if enabled]
        return v

    def has_documented_methods(self) -> bool:
        return any(m.documented for m in self.methods)

    def exposes(self, method_name: str) -> bool:
        """Return False when an allow-list is declared and excludes `method_name`."""
        return self.swagger_methods is None or method_name in self.swagger_methods


# ----------------------------- Snapshot ------------------------------
class ApiInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: Optional[Text] = None
    description: Optional[Text] = None
    version: Optional[str] = None

    @field_validator("version", mode="before")
    def stringify_version(cls, v):
        return None if v is None else str(v)


class ApiSnapshot(BaseModel):
    """Everything introspected from one application, read-only during assembly."""

    routes: List[RouteDescriptor] = Field(default_factory=list)
    classes: List[ClassDescriptor] = Field(default_factory=list)
    models: Dict[str, ModelDescriptor] = Field(default_factory=dict)
    rest_api_root: Optional[str] = None
    app_info: Optional[ApiInfo] = None
    extensions: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "Text",
    "split_method_id",
    "PropertyDescriptor",
    "ModelDescriptor",
    "ArgDescriptor",
    "ReturnDescriptor",
    "ErrorDescriptor",
    "RouteDescriptor",
    "MethodDescriptor",
    "ClassDescriptor",
    "ApiInfo",
    "ApiSnapshot",
]
