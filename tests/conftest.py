"""Pytest fixtures for swaggergen tests.

Project metadata lookups are pointed at an empty temporary directory so the
static defaults apply unless a test writes its own pyproject.toml.
"""

import pytest

from swaggergen.schemas import ApiSnapshot


@pytest.fixture(autouse=True)
def isolated_project_root(tmp_path, monkeypatch):
    monkeypatch.setenv("SWAGGERGEN_PROJECT_ROOT", str(tmp_path))
    return tmp_path


def _widget_snapshot_data() -> dict:
    return {
        "models": {
            "widget": {
                "name": "widget",
                "description": ["A widget", "sold by the shop"],
                "properties": {
                    "id": {"type": "number", "required": True},
                    "name": {"type": "string", "required": True, "description": "Display name"},
                    "secret": "string",
                    "owner": "Account",
                },
                "hidden": ["secret"],
            },
            "Account": {
                "name": "Account",
                "properties": {"email": {"type": "string", "required": True}, "active": "boolean"},
            },
        },
        "classes": [
            {"name": "widget", "description": "Widgets", "methods": [
                {"name": "find"},
                {"name": "findById"},
                {"name": "internal", "documented": False},
            ]},
            {"name": "Account", "methods": [{"name": "login"}]},
            {"name": "hidden", "methods": [{"name": "noop", "documented": False}]},
            {"name": "unused", "methods": [{"name": "find"}]},
        ],
        "routes": [
            {
                "method": "widget.find",
                "verb": "get",
                "path": "/widgets",
                "description": "Find all widgets",
                "accepts": [{"arg": "filter", "type": "object"}],
                "returns": [{"arg": "data", "type": ["widget"], "root": True}],
            },
            {
                "method": "widget.prototype.findById",
                "verb": "get",
                "path": "/widgets/:id",
                "accepts": [{"arg": "id", "type": "number", "required": True}],
                "returns": [{"arg": "data", "type": "widget", "root": True}],
                "errors": [{"status": 404, "message": "Widget not found"}],
            },
            {
                "method": "widget.internal",
                "verb": "post",
                "path": "/widgets/internal",
                "documented": False,
            },
            {
                "method": "Account.login",
                "verb": "post",
                "path": "/accounts/login",
                "accepts": [{"arg": "credentials", "type": {"email": "string", "password": "string"}, "source": "body", "required": True}],
                "returns": [{"arg": "token", "type": "string"}],
            },
        ],
    }


@pytest.fixture()
def snapshot_data():
    """Raw snapshot mapping, fresh for each test so it can be modified."""
    return _widget_snapshot_data()


@pytest.fixture()
def widget_snapshot(snapshot_data):
    return ApiSnapshot.model_validate(snapshot_data)
