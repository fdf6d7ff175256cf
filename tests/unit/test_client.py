"""
Unit tests for the HTTP client in ``todo_client.api``.

The ``requests.Session`` is replaced by a ``MagicMock`` so no network is
used; assertions check both what the client sends and how it maps
responses and failures.

Key Concepts Demonstrated:
- unittest.mock (MagicMock, side effects)
- Mocking HTTP responses
- Verifying mock calls
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from todo_client.api import ApiError, TodoClient

pytestmark = pytest.mark.unit

BASE_URL = "http://todo-api"


def _response(status_code: int = 200, body=None, json_error: bool = False) -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def http() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(http) -> TodoClient:
    return TodoClient(BASE_URL + "/", timeout=2, session=http)


def test_login_posts_credentials_without_auth_header(client, http):
    # Arrange
    http.request.return_value = _response(200, {"token": "t", "user": {"id": "1"}})

    # Act
    body = client.login("a@x.com", "pw1")

    # Assert
    assert body["token"] == "t"
    http.request.assert_called_once_with(
        "POST",
        "http://todo-api/api/login",
        headers={"Accept": "application/json"},
        timeout=2,
        json={"email": "a@x.com", "password": "pw1"},
    )


def test_todo_calls_send_bearer_token(client, http):
    http.request.return_value = _response(200, [])

    client.list_todos("abc.def.ghi")

    _, kwargs = http.request.call_args
    assert kwargs["headers"]["Authorization"] == "Bearer abc.def.ghi"


def test_create_todo_payload(client, http):
    http.request.return_value = _response(201, {"id": "1", "title": "Buy milk"})

    client.create_todo("tok", "Buy milk", "2 litres", category="health", priority="high")

    args, kwargs = http.request.call_args
    assert args == ("POST", "http://todo-api/api/todos")
    assert kwargs["json"] == {
        "title": "Buy milk",
        "description": "2 litres",
        "category": "health",
        "priority": "high",
    }


def test_update_and_delete_paths(client, http):
    http.request.return_value = _response(200, {"id": "42"})

    client.update_todo("tok", "42", completed=True)
    update_args, update_kwargs = http.request.call_args
    client.delete_todo("tok", "42")
    delete_args, _ = http.request.call_args

    assert update_args == ("PUT", "http://todo-api/api/todos/42")
    assert update_kwargs["json"] == {"completed": True}
    assert delete_args == ("DELETE", "http://todo-api/api/todos/42")


def test_error_response_raises_api_error_with_server_message(client, http):
    """Test that a 404 body's ``error`` field becomes the ApiError message."""
    # Arrange
    http.request.return_value = _response(404, {"error": "Todo not found"})

    # Act
    with pytest.raises(ApiError) as exc_info:
        client.update_todo("tok", "missing", completed=True)

    # Assert
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Todo not found"


def test_error_response_without_json_uses_default_message(client, http):
    http.request.return_value = _response(502, json_error=True)

    with pytest.raises(ApiError) as exc_info:
        client.health()

    assert exc_info.value.status_code == 502
    assert "502" in exc_info.value.message


def test_timeout_raises_api_error_with_status_zero(client, http):
    http.request.side_effect = requests.Timeout("slow")

    with pytest.raises(ApiError) as exc_info:
        client.list_todos("tok")

    assert exc_info.value.status_code == 0
    assert "timed out" in exc_info.value.message


def test_connection_error_raises_api_error(client, http):
    http.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(ApiError) as exc_info:
        client.list_todos("tok")

    assert exc_info.value.status_code == 0
    assert "unavailable" in exc_info.value.message


def test_from_config_uses_testing_profile():
    client = TodoClient.from_config("testing", session=MagicMock(spec=requests.Session))

    assert client.base_url == "http://todo-api"
    assert client.timeout == 1
