"""Centralized error types and the standard error payload for swaggergen.

Provides:
- SpecGenError(...) -> base exception carrying a machine readable `code`
- make_error_payload(...) -> dict payload: {"error": {"code": str, "message": str, "details": ...}}

Only caller contract violations raise. Orphan routes and unreadable project
metadata are reported through logging and never surface as exceptions.
"""
from __future__ import annotations

from typing import Any, Optional


def make_error_payload(code: str, message: str, details: Optional[Any] = None) -> dict:
    payload: dict = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class SpecGenError(Exception):
    code = "spec_generation_error"

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return make_error_payload(self.code, self.message, self.details)


class InvalidMethodIdentifier(SpecGenError, ValueError):
    """Raised when a compound `Class.method` identifier cannot be split."""

    code = "invalid_method_identifier"


class UnsupportedVerb(SpecGenError, ValueError):
    code = "unsupported_verb"


__all__ = ["SpecGenError", "InvalidMethodIdentifier", "UnsupportedVerb", "make_error_payload"]
