"""
Flask application factory module.

Creates and configures the todo API using the factory pattern so that
different configurations (development, testing, production) and
different stores can be injected at runtime.

The application registers one blueprint, ``api_bp``, mounted at ``/api``.
The auth and todo services are built here and stored on
``app.extensions`` for the route functions to use.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from config import check_production_secrets, get_config

if TYPE_CHECKING:
    from app.store import TodoStore, UserStore

# Initialize SQLAlchemy without binding to app
db = SQLAlchemy()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if sqlite_path == ":memory:":
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def create_app(
    config_name: str | None = None,
    *,
    user_store: UserStore | None = None,
    todo_store: TodoStore | None = None,
) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     If None, uses FLASK_ENV environment variable.
        user_store: Optional user store.  Defaults to the SQLAlchemy store.
        todo_store: Optional todo store.  Defaults to the SQLAlchemy store.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    config_class = get_config(config_name)
    check_production_secrets(config_class)
    app.config.from_object(config_class)

    logger.info("Creating app with config: %s", config_class.__name__)

    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    # Initialize extensions
    db.init_app(app)

    # Imported here: these modules import ``db`` from this package
    from app.routes.api import api_bp
    from app.services import AuthService, TodoService
    from app.store import SqlAlchemyTodoStore, SqlAlchemyUserStore

    app.extensions["auth_service"] = AuthService(
        user_store or SqlAlchemyUserStore(),
        secret_key=app.config["JWT_SECRET_KEY"],
        expiry_hours=app.config["JWT_EXPIRY_HOURS"],
        clock_skew_seconds=app.config["JWT_CLOCK_SKEW_SECONDS"],
    )
    app.extensions["todo_service"] = TodoService(todo_store or SqlAlchemyTodoStore())

    # Register blueprints
    app.register_blueprint(api_bp, url_prefix="/api")

    # Create database tables
    with app.app_context():
        db.create_all()
        logger.info("Database tables created")

    return app
