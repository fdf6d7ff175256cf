"""
Client-side data types.

The category and priority enums mirror the server's contract.  They are
duplicated rather than imported from ``app.models`` so the client can be
shipped without the server's Flask and SQLAlchemy dependencies.

``Session`` replaces any ambient "current user" state: it is created at
sign-in and passed explicitly to the view model.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class TodoCategory(str, Enum):
    """Todo categories (mirrors the server contract)."""

    PERSONAL = "personal"
    WORK = "work"
    LEARNING = "learning"
    HEALTH = "health"
    FINANCE = "finance"


class TodoPriority(str, Enum):
    """Todo priority levels (mirrors the server contract)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


PRIORITY_RANK = {
    TodoPriority.HIGH.value: 3,
    TodoPriority.MEDIUM.value: 2,
    TodoPriority.LOW.value: 1,
}


@dataclass(frozen=True)
class Session:
    """The signed-in user's identity and bearer token."""

    user_id: str
    username: str
    email: str
    token: str

    @classmethod
    def from_auth_response(cls, payload: dict[str, Any]) -> Session:
        """Build a session from a ``/api/login`` or ``/api/register`` body."""
        user = payload["user"]
        return cls(
            user_id=user["id"],
            username=user["username"],
            email=user["email"],
            token=payload["token"],
        )


def _parse_iso_datetime(iso_string: str | None) -> datetime | None:
    """
    Parse an ISO-8601 datetime string returned by the API.

    Handles the ``Z`` suffix by replacing it with ``+00:00``.
    """
    if not iso_string:
        return None
    try:
        return datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    except ValueError:
        return None


def deserialize_todo(data: dict[str, Any]) -> dict[str, Any]:
    """
    Convert an API todo payload into the view model's representation.

    Returns a shallow copy with ``created_at``/``updated_at`` parsed into
    datetimes and a missing description normalised to ``""``.
    """
    todo = dict(data)
    todo["description"] = todo.get("description") or ""
    todo["created_at"] = _parse_iso_datetime(todo.get("created_at"))
    todo["updated_at"] = _parse_iso_datetime(todo.get("updated_at"))
    return todo
