"""
Error taxonomy for the todo application.

Services raise these exceptions; the API blueprint's error handlers turn
them into ``{"error": "..."}`` JSON responses with the matching status
code.  Keeping the HTTP status on the exception lets the service layer
stay free of Flask imports while the route layer stays free of
per-endpoint error branching.
"""

from __future__ import annotations


class TodoAppError(Exception):
    """Base class for every error surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message}


class ValidationError(TodoAppError):
    """A required field is missing or a value is out of range."""

    status_code = 400
    default_message = "Invalid request"


class Conflict(TodoAppError):
    """Registration attempted with a username or email already in use."""

    status_code = 400
    default_message = "User already exists"


class InvalidCredentials(TodoAppError):
    """
    Login failed.

    Raised for both an unknown email and a wrong password so callers
    cannot tell which check failed.
    """

    status_code = 400
    default_message = "Invalid credentials"


class Unauthenticated(TodoAppError):
    """No bearer token was supplied."""

    status_code = 401
    default_message = "Access token required"


class InvalidToken(TodoAppError):
    """The bearer token is malformed, has a bad signature, or has expired."""

    status_code = 403
    default_message = "Invalid token"


class NotFound(TodoAppError):
    """The todo does not exist or is owned by someone else."""

    status_code = 404
    default_message = "Todo not found"


class ServerError(TodoAppError):
    """Unexpected persistence failure."""

    status_code = 500
    default_message = "Server error"
