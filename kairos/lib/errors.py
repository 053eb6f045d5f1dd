"""
Centralized Error Response Builder for Kairos.

Provides consistent error codes and messages for the API layer. The builder
returns structured error dicts compatible with the API response envelope.
"""

from __future__ import annotations

from typing import Any

from kairos.lib.exceptions import (
    KairosException,
    LimitReachedError,
    NotFoundError,
    StateError,
    UnknownTaskTypeError,
    ValidationError,
)

# =============================================================================
# Error Code Constants
# =============================================================================

AUTH_REQUIRED = "AUTH_REQUIRED"
NOT_FOUND = "NOT_FOUND"
VALIDATION_ERROR = "VALIDATION_ERROR"
CONFLICT = "CONFLICT"
LIMIT_REACHED = "LIMIT_REACHED"
INTERNAL_ERROR = "INTERNAL_ERROR"

_ERROR_MESSAGES: dict[str, str] = {
    AUTH_REQUIRED: "Authentication is required.",
    NOT_FOUND: "The requested resource was not found.",
    VALIDATION_ERROR: "Invalid input. Please check your request.",
    CONFLICT: "The request conflicts with the current state of the resource.",
    LIMIT_REACHED: "You have reached the limit for your plan.",
    INTERNAL_ERROR: "An internal error occurred. Please try again.",
}

# Exception type -> (error code, HTTP status), first match wins
_EXCEPTION_CODES: list[tuple[type[KairosException], str, int]] = [
    (UnknownTaskTypeError, INTERNAL_ERROR, 500),
    (NotFoundError, NOT_FOUND, 404),
    (ValidationError, VALIDATION_ERROR, 422),
    (StateError, CONFLICT, 409),
    (LimitReachedError, LIMIT_REACHED, 403),
]


def get_error_message(code: str) -> str:
    """Default message for an error code, generic if the code is unknown."""
    return _ERROR_MESSAGES.get(code, "An error occurred.")


def build_error_response(
    code: str,
    message: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a structured error response dict.

    Args:
        code: Error code constant (e.g. NOT_FOUND)
        message: Optional override message
        details: Optional additional error details

    Returns:
        Structured error dict: {"code": str, "message": str, "details": dict | None}
    """
    error: dict[str, Any] = {
        "code": code,
        "message": message if message is not None else get_error_message(code),
    }
    if details is not None:
        error["details"] = details
    return error


def classify_exception(exc: KairosException) -> tuple[str, int]:
    """Map a domain exception to its (error code, HTTP status)."""
    for exc_type, code, status in _EXCEPTION_CODES:
        if isinstance(exc, exc_type):
            return code, status
    return INTERNAL_ERROR, 500


__all__ = [
    "AUTH_REQUIRED",
    "NOT_FOUND",
    "VALIDATION_ERROR",
    "CONFLICT",
    "LIMIT_REACHED",
    "INTERNAL_ERROR",
    "get_error_message",
    "build_error_response",
    "classify_exception",
]
