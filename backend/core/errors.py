# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Application error taxonomy.

Routers and services raise these; ``main.py`` registers a single handler
that turns any :class:`AppError` into the standard JSON envelope with the
matching status code.  The message is always safe to show to a client.
"""

from typing import Optional

from fastapi import status


class AppError(Exception):
    """Base class – carries a client-safe message and an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, data: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.data = data


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(AppError):
    """422 – *errors* maps a field name to its list of messages."""

    status_code = 422

    def __init__(self, errors: dict[str, list[str]], message: str = "The given data was invalid"):
        super().__init__(message, data=errors)
        self.errors = errors


class TooManyRequestsError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
