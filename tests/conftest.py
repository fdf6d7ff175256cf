"""
Shared pytest fixtures for the todo test suite.

Provides the Flask app, HTTP client, a clean database per test, data
factories backed by the real models, and in-memory services for unit
tests that should not touch SQLAlchemy at all.

Key Concepts Demonstrated:
- Fixture scopes (function, session)
- Factory fixtures for test data
- Database setup/teardown
- Swapping persistence for in-memory fakes
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import datetime

import pytest
from faker import Faker

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"

from app import create_app, db
from app.models import Todo, TodoCategory, TodoPriority, User, new_id, utcnow
from app.security import create_token, hash_password
from app.services import AuthService, TodoService
from app.store import InMemoryTodoStore, InMemoryUserStore
from tests.helpers import TEST_JWT_SECRET_KEY, auth_headers

fake = Faker()

DEFAULT_PASSWORD = "StrongPass123!"


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def app():
    """
    Create the application once for the test session.

    Uses the 'testing' config, i.e. the SQLAlchemy stores over a
    separate SQLite database.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a Flask test client for a single test."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test.

    Creates all tables before the test and drops them afterwards.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


# -----------------------------------------------------------------------------
# Data Factories
# -----------------------------------------------------------------------------


@pytest.fixture
def user_factory(db_session) -> Callable[..., User]:
    """Factory that persists ``User`` rows with a known password."""

    def _create_user(
        username: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        user = User(
            id=new_id(),
            username=username or fake.unique.user_name(),
            email=email or fake.unique.email(),
            password_hash=hash_password(password),
        )
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user


@pytest.fixture
def todo_factory(db_session) -> Callable[..., Todo]:
    """Factory that persists ``Todo`` rows for a given owner."""

    def _create_todo(
        owner: User,
        *,
        title: str | None = None,
        description: str | None = None,
        completed: bool = False,
        category: str = TodoCategory.PERSONAL.value,
        priority: str = TodoPriority.MEDIUM.value,
        created_at: datetime | None = None,
    ) -> Todo:
        created = created_at or utcnow()
        todo = Todo(
            id=new_id(),
            owner_id=owner.id,
            title=title or fake.sentence(nb_words=4),
            description=description if description is not None else fake.paragraph(),
            completed=completed,
            category=category,
            priority=priority,
            created_at=created,
            updated_at=created,
        )
        db_session.session.add(todo)
        db_session.session.commit()
        return todo

    return _create_todo


@pytest.fixture
def owner(user_factory) -> User:
    """The primary test user."""
    return user_factory(username="owner", email="owner@example.com")


@pytest.fixture
def other_user(user_factory) -> User:
    """A second user, for tenant-isolation checks."""
    return user_factory(username="intruder", email="intruder@example.com")


@pytest.fixture
def headers_for(app) -> Callable[[User], dict[str, str]]:
    """Return a function that builds bearer headers for a user."""

    def _headers(user: User) -> dict[str, str]:
        token = create_token(
            user_id=user.id,
            username=user.username,
            secret_key=app.config["JWT_SECRET_KEY"],
            expiry_hours=1,
        )
        return auth_headers(token)

    return _headers


@pytest.fixture
def api_headers(owner, headers_for) -> dict[str, str]:
    """Bearer headers for ``owner``."""
    return headers_for(owner)


@pytest.fixture
def other_headers(other_user, headers_for) -> dict[str, str]:
    """Bearer headers for ``other_user``."""
    return headers_for(other_user)


# -----------------------------------------------------------------------------
# In-memory Services
# -----------------------------------------------------------------------------


@pytest.fixture
def auth_service() -> AuthService:
    """Auth service over an empty in-memory user store."""
    return AuthService(InMemoryUserStore(), secret_key=TEST_JWT_SECRET_KEY, expiry_hours=24)


@pytest.fixture
def todo_service() -> TodoService:
    """Todo service over an empty in-memory todo store."""
    return TodoService(InMemoryTodoStore())
