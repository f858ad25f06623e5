"""
Custom exceptions for the application.

Each kind maps to a different user-facing outcome, so services raise the
most specific one and controllers translate it to an HTTP status.
"""

from typing import Optional


class SchedulingError(Exception):
    """Base class for every error raised by the scheduling core."""

    error_code = "scheduling_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(SchedulingError, ValueError):
    """Malformed input: bad time ordering, out-of-range duration, past date."""

    error_code = "validation_error"


class InvalidStateError(SchedulingError):
    """Operation attempted on an appointment not in the required source state."""

    error_code = "invalid_state"


class ConflictError(SchedulingError):
    """The requested interval overlaps a live appointment."""

    error_code = "conflict"


class NotFoundError(SchedulingError):
    """A referenced id is absent from the store."""

    error_code = "not_found"

    @classmethod
    def for_resource(cls, resource: str, resource_id: str) -> "NotFoundError":
        return cls(f"{resource} {resource_id} not found")


class AuthorizationError(SchedulingError):
    """Caller is authenticated but does not own the resource."""

    error_code = "forbidden"


class StoreError(Exception):
    """
    The document store failed to read or write.

    Raised by the store implementation so callers can tell infrastructure
    failures apart from business rule violations.
    """

    pass
