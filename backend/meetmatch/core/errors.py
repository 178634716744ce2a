"""
Centralized error handling for the matching engine.
Domain exceptions plus one mapping table so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from typing import Any


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------


class EngineError(Exception):
    """Base for every error the engine raises on purpose. `code` is stable for API clients."""

    code = "engine_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details


class MalformedInput(EngineError):
    code = "malformed_input"


class PastWindow(EngineError):
    code = "past_window"


class ConflictingWindow(EngineError):
    """Window overlaps another non-withdrawn slot of the same owner (or another window in the batch)."""

    code = "conflicting_window"


class SlotNoLongerAvailable(EngineError):
    """Lost a race at commit time. Caller should re-run matching; the engine never retries."""

    code = "slot_no_longer_available"


class InvalidState(EngineError):
    code = "invalid_state"


class InvalidTransition(EngineError):
    code = "invalid_transition"


class Unauthorized(EngineError):
    code = "unauthorized"


class NotFound(EngineError):
    code = "not_found"


class OracleUnavailable(EngineError):
    """Scoring failed for every candidate of a window. Logged and surfaced as "no match", never raised to callers."""

    code = "oracle_unavailable"


# ---------------------------------------------------------------------------
# Constants: status codes
# ---------------------------------------------------------------------------

STATUS_UNPROCESSABLE = 422
STATUS_CONFLICT = 409
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_SERVICE_UNAVAILABLE = 503
STATUS_INTERNAL_ERROR = 500


# ---------------------------------------------------------------------------
# Error rules: (exception type, status_code). First match wins.
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

ENGINE_ERROR_RULES: list[tuple[type[EngineError], int]] = [
    (MalformedInput, STATUS_UNPROCESSABLE),
    (PastWindow, STATUS_UNPROCESSABLE),
    (ConflictingWindow, STATUS_CONFLICT),
    (SlotNoLongerAvailable, STATUS_CONFLICT),
    (InvalidState, STATUS_CONFLICT),
    (InvalidTransition, STATUS_CONFLICT),
    (Unauthorized, STATUS_FORBIDDEN),
    (NotFound, STATUS_NOT_FOUND),
    (OracleUnavailable, STATUS_SERVICE_UNAVAILABLE),
]


def status_for(exc: Exception) -> int:
    for exc_type, status_code in ENGINE_ERROR_RULES:
        if isinstance(exc, exc_type):
            return status_code
    return STATUS_INTERNAL_ERROR


def error_body(exc: Exception) -> dict[str, Any]:
    """JSON body for an error response: {error, detail, ...details}."""
    if isinstance(exc, EngineError):
        return {"error": exc.code, "detail": exc.message, **exc.details}
    return {"error": "internal_error", "detail": str(exc)}
