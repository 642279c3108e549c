# vitalguard/errors.py
from __future__ import annotations


class EngineError(Exception):
    """Base error raised by the stores and the monitoring service."""

    code = "engine_error"
    http_status = 500

    def __init__(self, message: str, field: str | None = None, details=None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_payload(self) -> dict:
        payload = {"code": self.code, "message": self.message}
        details = dict(self.details or {})
        if self.field is not None:
            details["field"] = self.field
        if details:
            payload["details"] = details
        return payload


class ValidationError(EngineError):
    """Malformed input. Raised before any state is written."""

    code = "validation_error"
    http_status = 400


class NotFoundError(EngineError):
    code = "not_found"
    http_status = 404


class ConflictError(EngineError):
    """
    Dedup-key collision on insert.

    The alert store absorbs this and resolves it to the existing row, so it
    never reaches an API caller.
    """

    code = "conflict"
    http_status = 409
