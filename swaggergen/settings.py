"""Generator options and their defaults.

Exports:
- SpecOptions: caller supplied options, every field optional
- ResolvedOptions: the fully merged options consumed by the generator
- resolve_options(): explicit, ordered merge of all option sources
- get_project_property(): best-effort lookup in the project's pyproject.toml

Merge order (first value present wins):
1. explicit caller options
2. the introspected application (`rest_api_root`, `app_info`, `extensions`)
3. project metadata from `pyproject.toml` in SWAGGERGEN_PROJECT_ROOT (default: cwd)
4. static defaults below
"""

from __future__ import annotations

import copy
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from swaggergen.schemas import ApiInfo, ApiSnapshot

logger = logging.getLogger(__name__)

DEFAULT_BASE_PATH = "/api"
DEFAULT_MEDIA_TYPES: List[str] = ["application/json"]
DEFAULT_VERSION = "1.0.0"
DEFAULT_TITLE = "API Application"
DEFAULT_SECURITY_SCHEMES: Dict[str, Dict[str, Any]] = {
    "accessToken": {"type": "apiKey", "in": "header", "name": "authorization"},
    "accessTokenParam": {"type": "apiKey", "in": "query", "name": "access_token"},
}


def _project_root() -> Path:
    return Path(os.getenv("SWAGGERGEN_PROJECT_ROOT") or os.getcwd())


def get_project_property(name: str, default: Any, root: Optional[Path] = None) -> Any:
    """Return `[project].<name>` from pyproject.toml, or `default` on any failure."""
    path = Path(root or _project_root()) / "pyproject.toml"
    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
        return data.get("project", {}).get(name) or default
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.debug("Project metadata %r unavailable from %s: %s", name, path, exc)
        return default


class SpecOptions(BaseModel):
    base_path: Optional[str] = None
    consumes: Optional[List[str]] = None
    produces: Optional[List[str]] = None
    # Passing None explicitly disables security declarations
    security_schemes: Optional[Dict[str, Dict[str, Any]]] = None
    version: Optional[str] = None
    api_info: Optional[ApiInfo] = None
    extensions: Dict[str, Any] = Field(default_factory=dict)


class ResolvedOptions(BaseModel):
    base_path: str
    consumes: List[str]
    produces: List[str]
    security_schemes: Optional[Dict[str, Dict[str, Any]]]
    version: str
    api_info: ApiInfo
    extensions: Dict[str, Any]


def _first(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


def resolve_options(
    options: Union[SpecOptions, Dict[str, Any], None] = None,
    snapshot: Optional[ApiSnapshot] = None,
    project_root: Optional[Path] = None,
) -> ResolvedOptions:
    """Merge caller options over application settings, project metadata and defaults."""
    if options is None:
        options = SpecOptions()
    elif isinstance(options, dict):
        options = SpecOptions.model_validate(options)
    snapshot = snapshot or ApiSnapshot()

    if "security_schemes" in options.model_fields_set:
        security_schemes = copy.deepcopy(options.security_schemes)
    else:
        security_schemes = copy.deepcopy(DEFAULT_SECURITY_SCHEMES)

    caller_info = options.api_info or ApiInfo()
    app_info = snapshot.app_info or ApiInfo()

    version = _first(caller_info.version, options.version, app_info.version)
    if not version:
        version = str(get_project_property("version", DEFAULT_VERSION, project_root))

    extra: Dict[str, Any] = {}
    extra.update(copy.deepcopy(app_info.model_extra or {}))
    extra.update(copy.deepcopy(caller_info.model_extra or {}))

    title = _first(caller_info.title, app_info.title)
    if not title:
        title = get_project_property("name", DEFAULT_TITLE, project_root)
    description = _first(caller_info.description, app_info.description)
    if not description:
        description = get_project_property("description", DEFAULT_TITLE, project_root)

    api_info = ApiInfo(title=title, description=description, version=version, **extra)

    extensions: Dict[str, Any] = copy.deepcopy(snapshot.extensions)
    extensions.update(copy.deepcopy(options.extensions))

    return ResolvedOptions(
        base_path=_first(options.base_path, snapshot.rest_api_root) or DEFAULT_BASE_PATH,
        consumes=list(options.consumes) if options.consumes is not None else list(DEFAULT_MEDIA_TYPES),
        produces=list(options.produces) if options.produces is not None else list(DEFAULT_MEDIA_TYPES),
        security_schemes=security_schemes,
        version=version,
        api_info=api_info,
        extensions=extensions,
    )


__all__ = [
    "DEFAULT_BASE_PATH",
    "DEFAULT_MEDIA_TYPES",
    "DEFAULT_SECURITY_SCHEMES",
    "DEFAULT_TITLE",
    "DEFAULT_VERSION",
    "SpecOptions",
    "ResolvedOptions",
    "resolve_options",
    "get_project_property",
]
