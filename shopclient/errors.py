"""Client-side error taxonomy.

Every failed gateway call raises one of these. Nothing here is retried
automatically; callers roll back their optimistic state and re-raise.
"""

from typing import Any, Optional


class ApiError(Exception):
    """Base class; status is None when no response was received."""

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body


class ValidationError(ApiError):
    """400: malformed input, fix it before sending again."""


class AuthError(ApiError):
    """401: missing, invalid or expired credential; force re-login."""


class Unauthenticated(AuthError):
    """No session is held locally, so the call was never sent."""

    def __init__(self, message: str = "Not signed in"):
        super().__init__(message, status=None)


class NotFoundError(ApiError):
    """404."""


class ConflictError(ApiError):
    """409: resource already exists."""


class PersistenceError(ApiError):
    """5xx: the server committed nothing; safe to retry."""


class NetworkError(ApiError):
    """The request never got a response."""
