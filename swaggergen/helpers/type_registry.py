"""Schema registry: binds schema names to their definitions for one generation run.

- register(name, definition) -> canonical schema name
  Identical definitions under the same name are stored once. A different
  definition under a taken name gets a numbered name (`Account_2`) instead of
  replacing the stored one.
- bind(alias, name): make references to `alias` (e.g. a catalog key such as
  `shop.items.Item`) point at the registered schema `name`.
- reference(name) -> `{"$ref": ...}` for a name or alias that may be registered
  or bound later. Aliases are resolved by `resolve_refs` and `get_schemas`.
- get_schemas() -> copy of every registered definition, references resolved.
"""
from __future__ import annotations

import copy
import logging
import re
from typing import Any, Dict, Set

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def canonical_schema_name(type_name: str) -> str:
    return _INVALID_NAME_CHARS.sub("_", str(type_name)) or "_"


class TypeRegistry:
    def __init__(self) -> None:
        self._definitions: Dict[str, Dict[str, Any]] = {}
        self._aliases: Dict[str, str] = {}
        self._referenced: Set[str] = set()

    def register(self, type_name: str, definition: Dict[str, Any]) -> str:
        base = canonical_schema_name(type_name)
        candidate = base
        counter = 1
        while candidate in self._definitions:
            if self._definitions[candidate] == definition:
                return candidate
            counter += 1
            candidate = f"{base}_{counter}"
        if candidate != base:
            logger.info("Schema name %r already bound to another shape, registered as %r", base, candidate)
        self._definitions[candidate] = copy.deepcopy(definition)
        return candidate

    def bind(self, alias: str, name: str, replace: bool = True) -> None:
        """Resolve references to `alias` to the registered schema `name`.

        With `replace=False` an existing binding of `alias` is kept.
        """
        alias = canonical_schema_name(alias)
        if alias == name:
            return
        if replace or alias not in self._aliases:
            self._aliases[alias] = name

    def resolve(self, type_name: str) -> str:
        name = canonical_schema_name(type_name)
        return self._aliases.get(name, name)

    def reference(self, type_name: str) -> Dict[str, str]:
        name = canonical_schema_name(type_name)
        self._referenced.add(name)
        return {"$ref": SCHEMA_REF_PREFIX + name}

    def resolve_refs(self, node: Any) -> Any:
        """Rewrite, in place, every `$ref` under `node` that targets a bound alias."""
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str) and ref.startswith(SCHEMA_REF_PREFIX):
                node["$ref"] = SCHEMA_REF_PREFIX + self.resolve(ref[len(SCHEMA_REF_PREFIX):])
            for value in node.values():
                self.resolve_refs(value)
        elif isinstance(node, list):
            for item in node:
                self.resolve_refs(item)
        return node

    def is_defined(self, type_name: str) -> bool:
        return self.resolve(type_name) in self._definitions

    def get_schemas(self) -> Dict[str, Dict[str, Any]]:
        unresolved = {self._aliases.get(name, name) for name in self._referenced} - set(self._definitions)
        for name in sorted(unresolved):
            logger.warning("Schema %r is referenced but was never registered", name)
        return self.resolve_refs(copy.deepcopy(self._definitions))

    def __len__(self) -> int:
        return len(self._definitions)


__all__ = ["TypeRegistry", "canonical_schema_name", "SCHEMA_REF_PREFIX"]
