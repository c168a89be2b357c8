import pytest
from pydantic import ValidationError

from swaggergen.errors import InvalidMethodIdentifier, make_error_payload
from swaggergen.schemas import ClassDescriptor, ModelDescriptor, RouteDescriptor, split_method_id


def test_split_method_id_strips_instance_marker():
    assert split_method_id("widget.prototype.findById") == ("widget", "findById")
    assert split_method_id("widget.find") == ("widget", "find")


def test_split_method_id_rejects_bare_names():
    with pytest.raises(InvalidMethodIdentifier) as excinfo:
        split_method_id("widget")
    assert excinfo.value.to_dict() == {
        "error": {
            "code": "invalid_method_identifier",
            "message": "Invalid method identifier: 'widget'",
            "details": {"method": "widget"},
        }
    }


def test_route_descriptor_populates_names_once():
    route = RouteDescriptor(method="widget.prototype.findById", verb="get", path="/widgets/:id")
    assert (route.class_name, route.method_name) == ("widget", "findById")

    explicit = RouteDescriptor(method="ignored.name", class_name="Order Line", method_name="list", verb="get", path="/x")
    assert (explicit.class_name, explicit.method_name) == ("Order Line", "list")


def test_route_descriptor_with_bad_method_id_is_invalid():
    with pytest.raises(ValidationError):
        RouteDescriptor(method="nodot", verb="get", path="/x")


def test_class_allow_list_accepts_mapping_and_list():
    from_mapping = ClassDescriptor.model_validate({"name": "widget", "_swaggerMethods": {"find": True, "create": False}})
    from_list = ClassDescriptor(name="widget", swagger_methods=["find"])

    for class_def in (from_mapping, from_list):
        assert class_def.exposes("find")
        assert not class_def.exposes("create")
    assert ClassDescriptor(name="widget").exposes("anything")


def test_documented_methods():
    assert not ClassDescriptor(name="x", methods=[{"name": "a", "documented": False}]).has_documented_methods()
    assert ClassDescriptor(name="x", methods=[{"name": "a"}]).has_documented_methods()
    assert not ClassDescriptor(name="x").has_documented_methods()


def test_model_properties_accept_bare_types():
    model = ModelDescriptor(name="Order", properties={"total": "number", "lines": ["OrderLine"], "id": {"type": "string", "required": True}})

    assert model.properties["total"].type == "number"
    assert model.properties["lines"].type == ["OrderLine"]
    assert model.properties["id"].required is True


def test_make_error_payload_omits_missing_details():
    assert make_error_payload("x", "boom") == {"error": {"code": "x", "message": "boom"}}


def test_mapping_with_extra_keys_is_an_anonymous_object():
    model = ModelDescriptor(name="Filter", properties={"match": {"kind": "string", "type": "string"}})

    assert model.properties["match"].type == {"kind": "string", "type": "string"}
    assert model.properties["match"].required is False
