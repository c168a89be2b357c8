"""Post-assembly document listeners.

A listener receives the finished document. It may mutate it in place (and
return None) or return a replacement document.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
DocumentListener = Callable[[Document], Optional[Document]]
OperationKey = Tuple[str, str]


def emit_document(document: Document, listeners: Iterable[DocumentListener]) -> Document:
    for listener in listeners:
        result = listener(document)
        if result is not None:
            document = result
    return document


def with_examples(
    request_examples: Optional[Mapping[OperationKey, Mapping[str, Any]]] = None,
    response_examples: Optional[Mapping[OperationKey, Mapping[str, Mapping[str, Any]]]] = None,
    media_type: str = "application/json",
) -> DocumentListener:
    """Return a listener adding named examples to existing operations.

    `request_examples`: {(path, method): {example_name: example_object}}
    `response_examples`: {(path, method): {status: {example_name: example_object}}}
    Operations missing from the document are skipped.
    """
    request_examples = request_examples or {}
    response_examples = response_examples or {}

    def _augment(document: Document) -> Document:
        paths = document.setdefault("paths", {})

        for (path, method), examples in request_examples.items():
            operation = paths.get(path, {}).get(method)
            if operation is None:
                logger.debug("No operation %s %s, skipping request examples", method.upper(), path)
                continue
            rb = operation.setdefault("requestBody", {})
            content = rb.setdefault("content", {})
            media = content.setdefault(media_type, {})
            media.setdefault("examples", {}).update(examples)

        for (path, method), by_status in response_examples.items():
            operation = paths.get(path, {}).get(method)
            if operation is None:
                logger.debug("No operation %s %s, skipping response examples", method.upper(), path)
                continue
            responses = operation.setdefault("responses", {})
            for status, examples in by_status.items():
                response = responses.setdefault(str(status), {"description": ""})
                content = response.setdefault("content", {})
                media = content.setdefault(media_type, {})
                media.setdefault("examples", {}).update(examples)

        return document

    return _augment


__all__ = ["Document", "DocumentListener", "emit_document", "with_examples"]
