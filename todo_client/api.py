"""
HTTP client for the todo REST API.

Wraps :mod:`requests` so every call gets the configured base URL and
timeout.  The client keeps no sign-in state: todo calls take the bearer
token as an argument and send it as ``Authorization: Bearer <token>``.
Non-2xx responses and transport failures are raised as ``ApiError``
carrying a human-readable message the UI can show as-is.

Key Concepts Demonstrated:
- Centralised request helper with per-call timeout
- Injectable ``requests.Session`` for testing
- Extracting the server's ``error`` message from JSON bodies
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from .config import get_config

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    A failed API call.

    ``status_code`` is the HTTP status, or ``0`` when the server could
    not be reached at all.
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


def _response_error_message(response: requests.Response, default: str) -> str:
    """
    Extract an error message from a JSON API response if possible.

    Falls back to *default* when the body is not JSON or carries no
    usable ``error``/``message`` field.
    """
    try:
        payload = response.json()
    except ValueError:
        return default
    if not isinstance(payload, dict):
        return default
    for key in ("error", "message"):
        message = payload.get(key)
        if isinstance(message, str) and message.strip():
            return message
    return default


class TodoClient:
    """Thin client for ``/api/*`` endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    @classmethod
    def from_config(cls, env: str | None = None, **kwargs) -> TodoClient:
        """Build a client from the ``todo_client.config`` profile for *env*."""
        config_class = get_config(env)
        return cls(
            config_class.TODO_API_URL, timeout=config_class.TODO_API_TIMEOUT, **kwargs
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, token: str | None = None, **kwargs) -> Any:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the base URL (e.g. ``"/api/todos"``).
            token: Bearer token to attach, if any.
            **kwargs: Forwarded to :meth:`requests.Session.request`.

        Raises:
            ApiError: On a non-2xx status, a timeout or a connection error.
        """
        headers = dict(kwargs.pop("headers", {}))
        headers.setdefault("Accept", "application/json")
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.http.request(
                method,
                self._url(path),
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            logger.warning("%s %s timed out", method, path)
            raise ApiError(0, "Todo service timed out. Please try again.") from exc
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(0, "Todo service unavailable. Please try again later.") from exc

        if not response.ok:
            message = _response_error_message(
                response, f"Request failed with status {response.status_code}"
            )
            raise ApiError(response.status_code, message)

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(response.status_code, "Invalid response received.") from exc

    # -- auth ---------------------------------------------------------------

    def register(self, username: str, email: str, password: str) -> dict[str, Any]:
        """Create an account.  Returns ``{"message", "token", "user"}``."""
        return self._request(
            "POST",
            "/api/register",
            json={"username": username, "email": email, "password": password},
        )

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Sign in.  Returns ``{"message", "token", "user"}``."""
        return self._request(
            "POST", "/api/login", json={"email": email, "password": password}
        )

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/api/health")

    # -- todos --------------------------------------------------------------

    def list_todos(self, token: str) -> list[dict[str, Any]]:
        return self._request("GET", "/api/todos", token=token)

    def create_todo(
        self,
        token: str,
        title: str,
        description: str | None = None,
        category: str | None = None,
        priority: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": title, "description": description}
        if category:
            payload["category"] = category
        if priority:
            payload["priority"] = priority
        return self._request("POST", "/api/todos", token=token, json=payload)

    def update_todo(self, token: str, todo_id: str, **fields: Any) -> dict[str, Any]:
        return self._request("PUT", f"/api/todos/{todo_id}", token=token, json=fields)

    def delete_todo(self, token: str, todo_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"/api/todos/{todo_id}", token=token)
