"""Generate an OpenAPI document and write it into docs/openapi.json.

Sources (one of):
- --app module:attr          a FastAPI application, introspected in process
- --snapshot path/to/file    an ApiSnapshot previously dumped as JSON

Options: --orm-base module:attr adds a SQLAlchemy declarative base to the model
catalog of --app; --base-path overrides the server URL; --output changes the
destination. LOG_LEVEL controls verbosity (default=INFO).
"""
from __future__ import annotations

import argparse
import importlib
import json
import logging
import os
import sys
from typing import Any, List, Optional

from pydantic import ValidationError

from swaggergen.errors import SpecGenError
from swaggergen.generator import create_openapi_document
from swaggergen.introspection import snapshot_from_fastapi
from swaggergen.schemas import ApiSnapshot
from swaggergen.settings import SpecOptions

logger = logging.getLogger(__name__)
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"), format="%(levelname)s: %(message)s")

DEFAULT_OUTPUT = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "docs", "openapi.json")


def load_object(target: str) -> Any:
    module_name, _, attr = target.partition(":")
    module = importlib.import_module(module_name)
    return getattr(module, attr or "app")


def load_snapshot(args: argparse.Namespace) -> ApiSnapshot:
    if args.snapshot:
        with open(args.snapshot, "r", encoding="utf-8") as fh:
            return ApiSnapshot.model_validate(json.load(fh))
    orm_base = load_object(args.orm_base) if args.orm_base else None
    return snapshot_from_fastapi(load_object(args.app), orm_base=orm_base)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--app", help="FastAPI application as module:attr")
    source.add_argument("--snapshot", help="ApiSnapshot JSON file")
    parser.add_argument("--orm-base", help="SQLAlchemy declarative base as module:attr")
    parser.add_argument("--base-path", help="Server base path (default=/api)")
    parser.add_argument("--output", default=DEFAULT_OUTPUT)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        snapshot = load_snapshot(args)
        options = SpecOptions(base_path=args.base_path)
        document = create_openapi_document(snapshot, options)
    except (SpecGenError, ValidationError, ImportError, AttributeError, OSError) as exc:
        logger.error("Failed to generate OpenAPI document: %s", exc)
        return 1

    os.makedirs(os.path.dirname(os.path.abspath(args.output)), exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI to %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
