"""
Application error kinds.

Each kind carries the HTTP status the API layer reports for it; the
domain and service layers raise them without knowing about transport.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for every error surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(AppError):
    """Malformed input, bad enum value or an illegal transition."""

    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    """Role or ownership check failed."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class InternalError(AppError):
    """Downstream failure not attributable to the caller."""

    status_code = 500


class PersistenceError(InternalError):
    """Raised when the database layer fails."""


class InvalidStateTransition(ValidationError):
    """Raised when a booking status change violates the state machine."""


class ConflictError(PersistenceError):
    """A write collided with a uniqueness constraint."""
