"""Error types raised by the persistence layer and standardized error payloads."""
from __future__ import annotations

from typing import Any


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class EventLogError(Exception):
    """Base class for errors surfaced when committing resources."""

    code = "EVENTLOG_ERROR"
    status_code = 400

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return error_response(self.code, self.message, self.details or None)


class PermissionDenied(EventLogError):
    """The acting user may not perform this mutation."""

    code = "PERMISSION_DENIED"
    status_code = 403


class MissingRequiredField(EventLogError):
    code = "MISSING_REQUIRED_FIELD"
    status_code = 422


class InvalidReference(EventLogError):
    """A uuid column points at an entity that does not exist."""

    code = "INVALID_UUID_REFERENCE"
    status_code = 422


__all__ = [
    "error_response",
    "EventLogError",
    "PermissionDenied",
    "MissingRequiredField",
    "InvalidReference",
]
