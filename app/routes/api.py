"""
REST API endpoints for the todo application.

Every todo endpoint is protected by ``require_auth``, and the owner id it
resolves from the bearer token is passed to the todo service, which
scopes all store access to that owner.

Endpoints:
    GET    /api/health        - Health check (public)
    POST   /api/register      - Create an account and receive a token
    POST   /api/login         - Authenticate and receive a token
    GET    /api/todos         - List the caller's todos, newest first
    POST   /api/todos         - Create a todo
    PUT    /api/todos/<id>    - Partially update a todo
    DELETE /api/todos/<id>    - Delete a todo

Errors are raised as :mod:`app.errors` exceptions and rendered by the
handlers at the bottom of this module as ``{"error": "..."}``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import Blueprint, Response, current_app, g, jsonify, request

from app.errors import TodoAppError
from app.services import AuthService, TodoService

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------


def auth_service() -> AuthService:
    return current_app.extensions["auth_service"]


def todo_service() -> TodoService:
    return current_app.extensions["todo_service"]


def _json_body() -> dict[str, Any]:
    """Return the JSON request body, or an empty dict if absent or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _extract_bearer_token() -> str | None:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header.

    Returns:
        The raw JWT string, or ``None`` if the header is absent,
        uses another scheme, or is empty.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


def require_auth(view_func: Callable[..., tuple[Response, int]]):
    """
    Decorator that enforces bearer-token authentication.

    On success the caller's identity is stored on ``flask.g.identity``;
    otherwise ``Unauthenticated`` or ``InvalidToken`` propagates to the
    blueprint error handler.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        g.identity = auth_service().authorize(_extract_bearer_token())
        return view_func(*args, **kwargs)

    return wrapper


# -----------------------------------------------------------------------------
# API Endpoints
# -----------------------------------------------------------------------------


@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Health check endpoint for deployment verification."""
    return jsonify({"message": "Server is running!"}), 200


@api_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """
    Register a new user.

    Request Body (JSON):
        username, email, password (all required)

    Returns:
        201 with ``message``, ``token`` and ``user``.
        400 if a field is missing or the username/email is taken.
    """
    data = _json_body()
    result = auth_service().register(
        data.get("username"), data.get("email"), data.get("password")
    )
    return jsonify({"message": "User created successfully", **result}), 201


@api_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """
    Authenticate with email and password.

    Returns:
        200 with ``message``, ``token`` and ``user``.
        400 with a generic message if the credentials are wrong.
    """
    data = _json_body()
    result = auth_service().login(data.get("email"), data.get("password"))
    return jsonify({"message": "Login successful", **result}), 200


@api_bp.route("/todos", methods=["GET"])
@require_auth
def get_todos() -> tuple[Response, int]:
    """Return the caller's todos as a JSON array, newest first."""
    logger.info("GET /api/todos - Fetching todos for owner %s", g.identity.user_id)
    return jsonify(todo_service().list(g.identity.user_id)), 200


@api_bp.route("/todos", methods=["POST"])
@require_auth
def create_todo() -> tuple[Response, int]:
    """
    Create a todo for the caller.

    Request Body (JSON):
        title: required
        description, category, priority: optional

    Any other field (``id``, ``owner_id``, ``completed``...) is ignored.
    A blank title or unknown category/priority is a 400, not a 500;
    500 is reserved for store failures.
    """
    data = _json_body()
    todo = todo_service().create(
        g.identity.user_id,
        title=data.get("title"),
        description=data.get("description"),
        category=data.get("category"),
        priority=data.get("priority"),
    )
    return jsonify(todo), 201


@api_bp.route("/todos/<todo_id>", methods=["PUT"])
@require_auth
def update_todo(todo_id: str) -> tuple[Response, int]:
    """
    Update a todo's title, description and/or completed flag.

    Fields left out of the body keep their current value.
    """
    todo = todo_service().update(g.identity.user_id, todo_id, _json_body())
    return jsonify(todo), 200


@api_bp.route("/todos/<todo_id>", methods=["DELETE"])
@require_auth
def delete_todo(todo_id: str) -> tuple[Response, int]:
    """Delete a todo owned by the caller."""
    return jsonify(todo_service().delete(g.identity.user_id, todo_id)), 200


# -----------------------------------------------------------------------------
# Error Handlers
# -----------------------------------------------------------------------------


@api_bp.errorhandler(TodoAppError)
def handle_app_error(error: TodoAppError) -> tuple[Response, int]:
    """Render a domain error as its JSON envelope and status code."""
    if error.status_code >= 500:
        logger.error("Request failed: %s", error.message)
    return jsonify(error.to_dict()), error.status_code


@api_bp.app_errorhandler(404)
def not_found(_: Exception) -> tuple[Response, int]:
    """Handle 404 Not Found errors."""
    return jsonify({"error": "Resource not found"}), 404


@api_bp.app_errorhandler(405)
def method_not_allowed(_: Exception) -> tuple[Response, int]:
    """Handle 405 Method Not Allowed errors."""
    return jsonify({"error": "Method not allowed"}), 405


@api_bp.app_errorhandler(500)
def internal_error(error: Exception) -> tuple[Response, int]:
    """Handle 500 Internal Server errors."""
    logger.error("Internal server error: %s", error)
    return jsonify({"error": "Server error"}), 500
