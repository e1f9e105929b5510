"""
Error hierarchy.

Every failure the services raise on purpose is an `EventBookError` carrying:
- `code`: stable machine-readable identifier (e.g. `NOT_FOUND`)
- `message`: short human-readable text, safe to show to API clients
- `http_status`: the status the API layer renders it with

The API registers one exception handler for the base class, so services never
import FastAPI.
"""

from __future__ import annotations

from typing import Any


class EventBookError(Exception):
    code = "EVENTBOOK_ERROR"
    http_status = 500

    def __init__(self, message: str, *, details: Any | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> dict[str, Any]:
        detail: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            detail["details"] = self.details
        return {"detail": detail}


class ValidationError(EventBookError):
    code = "VALIDATION_ERROR"
    http_status = 400


class AuthenticationError(EventBookError):
    code = "AUTHENTICATION_FAILED"
    http_status = 401


class PermissionDeniedError(EventBookError):
    code = "NOT_AUTHORIZED"
    http_status = 403


class NotFoundError(EventBookError):
    code = "NOT_FOUND"
    http_status = 404


class ConflictError(EventBookError):
    code = "CONFLICT"
    http_status = 409


class ConfigurationError(EventBookError):
    code = "CONFIGURATION_ERROR"
    http_status = 500
