"""
Structured HTTP errors for the scheduling API.

Every business failure is reported as an HTTPException whose detail carries a
machine-readable code next to the human-readable message, e.g.
{"error": "slot_conflict", "message": "..."}.
"""

from fastapi import HTTPException, status

from core.constants import (
    ERROR_INVALID_INPUT, ERROR_INVALID_FORMAT, ERROR_INVALID_RANGE, ERROR_NOT_FOUND,
    ERROR_PET_ARCHIVED, ERROR_VET_UNAVAILABLE, ERROR_OUTSIDE_AVAILABILITY,
    ERROR_SLOT_CONFLICT, ERROR_INVALID_STATE, ERROR_PAYMENT_REQUIRED,
    ERROR_UNSUPPORTED_TRANSITION, ERROR_FORBIDDEN,
)

# HTTP status for each error code
ERROR_STATUS_CODES = {
    ERROR_INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ERROR_INVALID_FORMAT: status.HTTP_400_BAD_REQUEST,
    ERROR_INVALID_RANGE: status.HTTP_400_BAD_REQUEST,
    ERROR_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ERROR_PET_ARCHIVED: status.HTTP_400_BAD_REQUEST,
    ERROR_VET_UNAVAILABLE: status.HTTP_400_BAD_REQUEST,
    ERROR_OUTSIDE_AVAILABILITY: status.HTTP_409_CONFLICT,
    ERROR_SLOT_CONFLICT: status.HTTP_409_CONFLICT,
    ERROR_INVALID_STATE: status.HTTP_400_BAD_REQUEST,
    ERROR_PAYMENT_REQUIRED: status.HTTP_400_BAD_REQUEST,
    ERROR_UNSUPPORTED_TRANSITION: status.HTTP_400_BAD_REQUEST,
    ERROR_FORBIDDEN: status.HTTP_403_FORBIDDEN,
}


def api_error(code: str, message: str) -> HTTPException:
    """
    Build the HTTPException for an error code.

    Usage:
        raise api_error(ERROR_NOT_FOUND, "Appointment not found")
    """
    return HTTPException(
        status_code=ERROR_STATUS_CODES[code],
        detail={"error": code, "message": message},
    )


def error_code(exc: HTTPException) -> str | None:
    """Extract the error code from a structured HTTPException, if any."""
    if isinstance(exc.detail, dict):
        return exc.detail.get("error")
    return None
