"""Typed service errors.

Services raise these; the HTTP layer maps them to status codes in one
exception handler and the realtime layer turns them into error events.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(AppError):
    """Missing or malformed required input."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(AppError):
    """Role or ownership does not allow the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class UnauthorizedError(AppError):
    """Missing, invalid or expired credential, or inactive account."""

    status_code = status.HTTP_401_UNAUTHORIZED
