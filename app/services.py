"""
Auth and todo services.

Plain Python classes holding the application's rules.  They are built
once by the application factory with injected stores and settings, and
raise the exceptions from :mod:`app.errors` on failure.  Nothing here
imports Flask, so the services can be unit-tested against the in-memory
stores.

Key Concepts Demonstrated:
- Constructor injection of persistence interfaces
- Generic login failure message (no user enumeration)
- Owner-scoped mutations with no existence leak
- Partial updates that only touch supplied fields
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from app.errors import (
    Conflict,
    InvalidCredentials,
    InvalidToken,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from app.models import TodoCategory, TodoPriority, new_id, public_user, utcnow
from app.security import TokenStatus, check_password, create_token, hash_password, verify_token
from app.store import TodoStore, UserStore

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 80
MAX_EMAIL_LENGTH = 120
MAX_TITLE_LENGTH = 200


@dataclass(frozen=True)
class Identity:
    """Owner identity carried by a valid token."""

    user_id: str
    username: str


def _require_text(data: dict[str, Any], field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field}' is required")
    return value


def _validate_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("'title' is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be {MAX_TITLE_LENGTH} characters or less")
    return title


def _validate_description(description: Any) -> str | None:
    if description is not None and not isinstance(description, str):
        raise ValidationError("'description' must be a string")
    return description


def _validate_choice(value: Any, enum_cls, field: str) -> str:
    valid = [member.value for member in enum_cls]
    if value not in valid:
        raise ValidationError(f"Invalid {field}. Must be one of: {valid}")
    return value


class AuthService:
    """Registration, login and token authorization."""

    def __init__(
        self,
        users: UserStore,
        secret_key: str,
        expiry_hours: int = 24,
        clock_skew_seconds: int = 30,
    ) -> None:
        self.users = users
        self.secret_key = secret_key
        self.expiry_hours = expiry_hours
        self.clock_skew_seconds = clock_skew_seconds

    def _issue(self, user: dict[str, Any]) -> dict[str, Any]:
        token = create_token(
            user_id=user["id"],
            username=user["username"],
            secret_key=self.secret_key,
            expiry_hours=self.expiry_hours,
        )
        return {"token": token, "user": public_user(user)}

    def register(self, username: Any, email: Any, password: Any) -> dict[str, Any]:
        """
        Create a user account and sign it in.

        Returns:
            ``{"token": ..., "user": {"id", "username", "email"}}``.

        Raises:
            ValidationError: If a field is blank or too long.
            Conflict: If the username or email is already registered.
        """
        data = {"username": username, "email": email, "password": password}
        username = _require_text(data, "username").strip()
        email = _require_text(data, "email").strip()
        password = _require_text(data, "password")

        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError(f"username must be {MAX_USERNAME_LENGTH} characters or less")
        if len(email) > MAX_EMAIL_LENGTH:
            raise ValidationError(f"email must be {MAX_EMAIL_LENGTH} characters or less")

        if self.users.exists(username, email):
            logger.warning("Registration rejected: username or email already in use")
            raise Conflict()

        user = self.users.insert(
            {
                "id": new_id(),
                "username": username,
                "email": email,
                "password_hash": hash_password(password),
                "created_at": utcnow(),
            }
        )
        logger.info("Registered user %s", user["id"])
        return self._issue(user)

    def login(self, email: Any, password: Any) -> dict[str, Any]:
        """
        Authenticate by email and password.

        Raises:
            InvalidCredentials: For an unknown email or a wrong password,
                with the same message either way.
        """
        if not isinstance(email, str) or not isinstance(password, str):
            raise InvalidCredentials()

        user = self.users.find_by_email(email.strip())
        if user is None or not check_password(user["password_hash"], password):
            logger.warning("Failed login attempt")
            raise InvalidCredentials()
        return self._issue(user)

    def authorize(self, token: str | None) -> Identity:
        """
        Resolve a bearer token to the owner identity it encodes.

        Raises:
            Unauthenticated: If no token was supplied.
            InvalidToken: If the token is malformed or expired.
        """
        if not token:
            raise Unauthenticated()

        check = verify_token(token, self.secret_key, leeway=self.clock_skew_seconds)
        if check.status is TokenStatus.EXPIRED:
            logger.warning("Rejected expired token")
            raise InvalidToken("Token expired")
        if not check.ok:
            logger.warning("Rejected malformed token")
            raise InvalidToken()
        return Identity(user_id=check.claims["user_id"], username=check.claims["username"])


class TodoService:
    """Owner-scoped CRUD over todos."""

    def __init__(self, todos: TodoStore) -> None:
        self.todos = todos

    def list(self, owner_id: str) -> list[dict[str, Any]]:
        """Return the owner's todos, newest first."""
        return self.todos.find_by_owner(owner_id)

    def create(
        self,
        owner_id: str,
        title: Any,
        description: Any = None,
        category: Any = None,
        priority: Any = None,
    ) -> dict[str, Any]:
        """
        Create a todo for *owner_id*.

        ``category`` defaults to personal and ``priority`` to medium.

        Raises:
            ValidationError: If the title is blank or too long, or a
                category/priority is not recognised.
        """
        now = utcnow()
        todo = self.todos.insert(
            {
                "id": new_id(),
                "owner_id": owner_id,
                "title": _validate_title(title),
                "description": _validate_description(description),
                "completed": False,
                "category": _validate_choice(
                    category or TodoCategory.PERSONAL.value, TodoCategory, "category"
                ),
                "priority": _validate_choice(
                    priority or TodoPriority.MEDIUM.value, TodoPriority, "priority"
                ),
                "created_at": now,
                "updated_at": now,
            }
        )
        logger.info("Created todo %s for owner %s", todo["id"], owner_id)
        return todo

    def update(self, owner_id: str, todo_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Apply a partial update to one of the owner's todos.

        Only ``title``, ``description`` and ``completed`` are considered;
        omitted fields keep their value and any other key is ignored.

        Raises:
            ValidationError: If a supplied value is invalid.
            NotFound: If the todo is missing or owned by someone else.
        """
        changes: dict[str, Any] = {}
        if "title" in fields:
            changes["title"] = _validate_title(fields["title"])
        if "description" in fields:
            changes["description"] = _validate_description(fields["description"])
        if "completed" in fields:
            if not isinstance(fields["completed"], bool):
                raise ValidationError("'completed' must be a boolean")
            changes["completed"] = fields["completed"]
        changes["updated_at"] = utcnow()

        todo = self.todos.update_by_id(owner_id, todo_id, changes)
        if todo is None:
            logger.warning("Todo %s not found for owner %s", todo_id, owner_id)
            raise NotFound()
        logger.info("Updated todo %s", todo_id)
        return todo

    def delete(self, owner_id: str, todo_id: str) -> dict[str, str]:
        """
        Delete one of the owner's todos.

        Raises:
            NotFound: If the todo is missing or owned by someone else.
        """
        if not self.todos.delete_by_id(owner_id, todo_id):
            logger.warning("Todo %s not found for owner %s", todo_id, owner_id)
            raise NotFound()
        logger.info("Deleted todo %s", todo_id)
        return {"message": "Todo deleted successfully"}
