import pytest

from swaggergen.errors import UnsupportedVerb
from swaggergen.helpers.operation_ids import OperationIdRegistry
from swaggergen.helpers.route_helper import convert_path, map_route, normalize_verb
from swaggergen.helpers.type_registry import TypeRegistry
from swaggergen.schemas import ClassDescriptor, RouteDescriptor
from swaggergen.settings import resolve_options


@pytest.fixture()
def widget_class():
    return ClassDescriptor(name="widget", methods=[{"name": "upsert"}])


def _map(route, class_def, options=None):
    registry = TypeRegistry()
    path, method, operation = map_route(route, class_def, registry, OperationIdRegistry(), resolve_options(options))
    return path, method, operation, registry


def test_convert_path():
    assert convert_path("/widgets/:id/parts/:partId") == "/widgets/{id}/parts/{partId}"
    assert convert_path("/widgets/{id}") == "/widgets/{id}"


def test_normalize_verb():
    assert normalize_verb("GET") == "get"
    assert normalize_verb("del") == "delete"
    assert normalize_verb("all") == "post"
    with pytest.raises(UnsupportedVerb) as excinfo:
        normalize_verb("trace")
    assert excinfo.value.to_dict()["error"]["code"] == "unsupported_verb"


def test_parameters_and_sources(widget_class):
    route = RouteDescriptor(
        method="widget.prototype.upsert",
        verb="put",
        path="/widgets/:id",
        accepts=[
            {"arg": "id", "type": "string"},
            {"arg": "dryRun", "type": "boolean", "description": "Validate only"},
            {"arg": "X-Request-Id", "type": "string", "source": "header"},
            {"arg": "req", "type": "object", "source": "req"},
        ],
    )

    path, method, operation, _ = _map(route, widget_class)

    assert (path, method) == ("/widgets/{id}", "put")
    assert operation["operationId"] == "widget.upsert"
    assert operation["parameters"] == [
        {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
        {"name": "dryRun", "in": "query", "description": "Validate only", "required": False, "schema": {"type": "boolean"}},
        {"name": "X-Request-Id", "in": "header", "required": False, "schema": {"type": "string"}},
    ]
    assert "requestBody" not in operation
    assert operation["responses"] == {"204": {"description": "Request was successful"}}


def test_request_body_for_each_consumed_media_type(widget_class):
    route = RouteDescriptor(
        method="widget.upsert",
        verb="post",
        path="/widgets",
        accepts=[{"arg": "data", "type": "widget", "source": "body", "description": "Model instance data"}],
    )

    _, _, operation, _ = _map(route, widget_class, {"consumes": ["application/json", "application/xml"]})

    body = operation["requestBody"]
    assert body["description"] == "Model instance data"
    assert body["required"] is False
    assert set(body["content"]) == {"application/json", "application/xml"}
    assert body["content"]["application/xml"]["schema"] == {"$ref": "#/components/schemas/widget"}


def test_several_body_args_and_form_args_register_schemas(widget_class):
    route = RouteDescriptor(
        method="widget.upsert",
        verb="post",
        path="/widgets",
        accepts=[
            {"arg": "name", "type": "string", "source": "body", "required": True},
            {"arg": "size", "type": "number", "source": "body"},
            {"arg": "upload", "type": "file", "source": "form"},
        ],
    )

    _, _, operation, registry = _map(route, widget_class)

    content = operation["requestBody"]["content"]
    assert content["application/json"]["schema"] == {"$ref": "#/components/schemas/widget_upsert_body"}
    assert content["application/x-www-form-urlencoded"]["schema"] == {"$ref": "#/components/schemas/widget_upsert_form"}
    schemas = registry.get_schemas()
    assert schemas["widget_upsert_body"]["required"] == ["name"]
    assert schemas["widget_upsert_form"]["properties"]["upload"] == {"type": "string", "format": "binary"}


def test_responses(widget_class):
    route = RouteDescriptor(
        method="widget.upsert",
        verb="post",
        path="/widgets",
        status=201,
        notes=["Creates the widget", "or updates it"],
        deprecated=True,
        returns=[{"arg": "count", "type": "number"}, {"arg": "ids", "type": ["string"]}],
        errors=[{"status": 422, "message": "Invalid widget"}],
    )

    _, _, operation, registry = _map(route, widget_class, {"produces": ["application/json"]})

    assert operation["description"] == "Creates the widget\nor updates it"
    assert operation["deprecated"] is True
    assert list(operation["responses"]) == ["201", "422"]
    created = operation["responses"]["201"]
    assert created["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/widget_upsert_response"}
    assert registry.get_schemas()["widget_upsert_response"]["properties"]["ids"] == {
        "type": "array",
        "items": {"type": "string"},
    }


def test_explicit_operation_id_and_tags(widget_class):
    route = RouteDescriptor(method="widget.upsert", verb="patch", path="/widgets", operation_id="patchWidget")
    _, method, operation, _ = _map(route, widget_class)

    assert method == "patch"
    assert operation["operationId"] == "patchWidget"
    assert operation["tags"] == ["widget"]
    assert list(operation)[:2] == ["tags", "operationId"]
