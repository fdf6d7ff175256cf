"""
Persistence interfaces and their implementations.

The services in :mod:`app.services` never touch the database directly;
they are handed a ``UserStore`` and a ``TodoStore``.  Two implementations
of each are provided:

* ``SqlAlchemyUserStore`` / ``SqlAlchemyTodoStore`` -- backed by the
  Flask-SQLAlchemy session, used by the running application.
* ``InMemoryUserStore`` / ``InMemoryTodoStore`` -- dictionaries held in
  process, used by unit tests and handy for demos.

Every todo operation takes the owner id and applies it inside the query
itself, so a todo owned by someone else is indistinguishable from one
that does not exist.

Key Concepts Demonstrated:
- Protocol-based dependency injection
- Tenant isolation enforced at the data-access layer
- Converting SQLAlchemy failures into a single domain error
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app import db
from app.errors import Conflict, ServerError
from app.models import Todo, User, to_utc_iso

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    """Storage for user records."""

    def find_by_email(self, email: str) -> dict[str, Any] | None: ...

    def exists(self, username: str, email: str) -> bool: ...

    def insert(self, user: dict[str, Any]) -> dict[str, Any]: ...


class TodoStore(Protocol):
    """Owner-scoped storage for todo documents."""

    def find_by_owner(self, owner_id: str) -> list[dict[str, Any]]: ...

    def insert(self, todo: dict[str, Any]) -> dict[str, Any]: ...

    def update_by_id(
        self, owner_id: str, todo_id: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None: ...

    def delete_by_id(self, owner_id: str, todo_id: str) -> bool: ...


# =====================================================================
# SQLAlchemy implementations
# =====================================================================


@contextmanager
def _guarded(action: str) -> Iterator[None]:
    """Roll back the session and raise ServerError if *action* fails."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Database %s failed: %s", action, exc)
        raise ServerError() from exc


class SqlAlchemyUserStore:
    """User storage on top of the shared Flask-SQLAlchemy session."""

    def find_by_email(self, email: str) -> dict[str, Any] | None:
        with _guarded("user lookup"):
            user = db.session.scalar(select(User).where(User.email == email))
            return user.to_record() if user else None

    def exists(self, username: str, email: str) -> bool:
        stmt = select(User.id).where(or_(User.username == username, User.email == email))
        with _guarded("user lookup"):
            return db.session.scalar(stmt) is not None

    def insert(self, user: dict[str, Any]) -> dict[str, Any]:
        """
        Persist a user.

        Raises:
            Conflict: If the unique username or email constraint fails,
                e.g. when a concurrent registration committed first.
        """
        row = User(**user)
        with _guarded("user insert"):
            db.session.add(row)
            try:
                db.session.commit()
            except IntegrityError as exc:
                db.session.rollback()
                logger.warning("Registration hit the unique username/email constraint")
                raise Conflict() from exc
            return row.to_record()


class SqlAlchemyTodoStore:
    """Todo storage on top of the shared Flask-SQLAlchemy session."""

    @staticmethod
    def _owned(owner_id: str):
        # Tenant isolation: every statement starts from this filter.
        return select(Todo).where(Todo.owner_id == owner_id)

    def find_by_owner(self, owner_id: str) -> list[dict[str, Any]]:
        stmt = self._owned(owner_id).order_by(Todo.created_at.desc())
        with _guarded("todo query"):
            return [todo.to_dict() for todo in db.session.scalars(stmt).all()]

    def insert(self, todo: dict[str, Any]) -> dict[str, Any]:
        row = Todo(**todo)
        with _guarded("todo insert"):
            db.session.add(row)
            db.session.commit()
            return row.to_dict()

    def update_by_id(
        self, owner_id: str, todo_id: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None:
        with _guarded("todo update"):
            row = db.session.scalar(self._owned(owner_id).where(Todo.id == todo_id))
            if row is None:
                return None
            for name, value in fields.items():
                setattr(row, name, value)
            db.session.commit()
            return row.to_dict()

    def delete_by_id(self, owner_id: str, todo_id: str) -> bool:
        stmt = delete(Todo).where(Todo.owner_id == owner_id, Todo.id == todo_id)
        with _guarded("todo delete"):
            result = db.session.execute(stmt)
            db.session.commit()
            return result.rowcount > 0


# =====================================================================
# In-memory implementations
# =====================================================================


def _serialize(document: dict[str, Any]) -> dict[str, Any]:
    """Copy a stored document, rendering datetimes as ISO-8601 UTC strings."""
    return {
        key: to_utc_iso(value) if isinstance(value, datetime) else copy.deepcopy(value)
        for key, value in document.items()
    }


class InMemoryUserStore:
    """User storage kept in a dict keyed by user id."""

    def __init__(self) -> None:
        self._users: dict[str, dict[str, Any]] = {}

    def find_by_email(self, email: str) -> dict[str, Any] | None:
        for user in self._users.values():
            if user["email"] == email:
                return _serialize(user)
        return None

    def exists(self, username: str, email: str) -> bool:
        return any(
            user["username"] == username or user["email"] == email
            for user in self._users.values()
        )

    def insert(self, user: dict[str, Any]) -> dict[str, Any]:
        self._users[user["id"]] = dict(user)
        return _serialize(user)


class InMemoryTodoStore:
    """
    Todo storage kept in a dict keyed by todo id.

    Insertion order is kept, so todos sharing a ``created_at`` come back
    newest-inserted first.
    """

    def __init__(self) -> None:
        self._todos: dict[str, dict[str, Any]] = {}

    def _owned(self, owner_id: str, todo_id: str) -> dict[str, Any] | None:
        todo = self._todos.get(todo_id)
        if todo is None or todo["owner_id"] != owner_id:
            return None
        return todo

    def find_by_owner(self, owner_id: str) -> list[dict[str, Any]]:
        owned = [t for t in reversed(self._todos.values()) if t["owner_id"] == owner_id]
        owned.sort(key=lambda t: t["created_at"], reverse=True)
        return [_serialize(t) for t in owned]

    def insert(self, todo: dict[str, Any]) -> dict[str, Any]:
        self._todos[todo["id"]] = dict(todo)
        return _serialize(todo)

    def update_by_id(
        self, owner_id: str, todo_id: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None:
        todo = self._owned(owner_id, todo_id)
        if todo is None:
            return None
        todo.update(fields)
        return _serialize(todo)

    def delete_by_id(self, owner_id: str, todo_id: str) -> bool:
        if self._owned(owner_id, todo_id) is None:
            return False
        del self._todos[todo_id]
        return True
