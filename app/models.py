"""
Database models for the todo application.

Defines the SQLAlchemy models for users and their todos, along with the
enumerations used for todo category and priority.  Each todo is scoped to
exactly one user via ``owner_id``; the stores in :mod:`app.store` filter
every query on that column.

Records leave the persistence layer as plain dictionaries ("documents")
with timestamps rendered as ISO-8601 UTC strings, so the in-memory and
SQLAlchemy stores are interchangeable.

Key Concepts Demonstrated:
- SQLAlchemy declarative models with explicit table constraints
- ``str, Enum`` inheritance for JSON-friendly enumeration values
- Opaque string identifiers
- Timezone-aware datetime handling for SQLite compatibility
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from app import db


class TodoCategory(str, Enum):
    """Fixed set of todo categories."""

    PERSONAL = "personal"
    WORK = "work"
    LEARNING = "learning"
    HEALTH = "health"
    FINANCE = "finance"


class TodoPriority(str, Enum):
    """
    Todo priority levels.

    ``rank`` orders them for sorting: a higher rank sorts first.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return {"low": 1, "medium": 2, "high": 3}[self.value]


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc_iso(value: datetime | None) -> str | None:
    """
    Convert a datetime to an ISO-8601 UTC string.

    SQLite returns naive datetime values even when timezone-aware columns
    are declared, so naive values are assumed to be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


def public_user(record: dict[str, Any]) -> dict[str, Any]:
    """Strip a user record down to the fields safe to return to clients."""
    return {
        "id": record["id"],
        "username": record["username"],
        "email": record["email"],
    }


class User(db.Model):
    """
    Registered user.

    Attributes:
        id: Opaque string primary key.
        username: Unique display name (max 80 chars).
        email: Unique email address (max 120 chars), used to log in.
        password_hash: Salted one-way digest of the password.
        created_at: Timestamp of account creation, stored as UTC.
    """

    __tablename__ = "users"

    __table_args__ = (
        db.CheckConstraint("length(username) <= 80", name="ck_users_username_len"),
        db.CheckConstraint("length(email) <= 120", name="ck_users_email_len"),
    )

    id: str = db.Column(db.String(32), primary_key=True, default=new_id)
    username: str = db.Column(db.String(80), unique=True, nullable=False, index=True)
    # Indexed because every login looks a user up by email
    email: str = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def to_record(self) -> dict[str, Any]:
        """
        Return the full stored record, digest included.

        Only the auth service should see this; API responses go through
        :func:`public_user`.
        """
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "password_hash": self.password_hash,
            "created_at": to_utc_iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.username}>"


class Todo(db.Model):
    """
    Todo item owned by a single user.

    Attributes:
        id: Opaque string primary key.
        owner_id: Id of the owning user.  Immutable after creation.
        title: Short summary (max 200 characters).
        description: Optional longer text.
        completed: Whether the todo is done.
        category: One of ``TodoCategory``.
        priority: One of ``TodoPriority``.
        created_at: Creation timestamp (UTC), never changed.
        updated_at: Timestamp of last modification (UTC).
    """

    __tablename__ = "todos"

    id: str = db.Column(db.String(32), primary_key=True, default=new_id)
    owner_id: str = db.Column(
        db.String(32), db.ForeignKey("users.id"), nullable=False, index=True
    )
    title: str = db.Column(db.String(200), nullable=False)
    description: str | None = db.Column(db.Text, nullable=True)
    completed: bool = db.Column(db.Boolean, nullable=False, default=False)
    category: str = db.Column(
        db.String(20),
        nullable=False,
        default=TodoCategory.PERSONAL.value,
    )
    priority: str = db.Column(
        db.String(20),
        nullable=False,
        default=TodoPriority.MEDIUM.value,
    )
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the todo to a JSON-safe dictionary."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "category": self.category,
            "priority": self.priority,
            "created_at": to_utc_iso(self.created_at),
            "updated_at": to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Todo {self.id}: {self.title}>"
