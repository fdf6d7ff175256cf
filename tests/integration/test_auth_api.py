"""
API tests for registration, login and token checks.

Key SDET Concepts Demonstrated:
- Full request/response cycle through the Flask test client
- Negative testing of the authentication layer (401 vs 403)
- Verifying that issued tokens are accepted by protected endpoints
"""

import pytest

from tests.conftest import DEFAULT_PASSWORD
from tests.helpers import TEST_JWT_SECRET_KEY, auth_headers, create_test_token

pytestmark = pytest.mark.integration


def _register(client, username="alice", email="a@x.com", password="pw1"):
    return client.post(
        "/api/register",
        json={"username": username, "email": email, "password": password},
    )


class TestRegister:
    """Tests for POST /api/register."""

    @pytest.mark.api
    def test_register_returns_token_and_public_user(self, client, db_session):
        # Act
        response = _register(client)

        # Assert
        assert response.status_code == 201
        data = response.get_json()
        assert data["message"] == "User created successfully"
        assert data["token"]
        assert data["user"]["username"] == "alice"
        assert data["user"]["email"] == "a@x.com"
        assert set(data["user"]) == {"id", "username", "email"}

    @pytest.mark.api
    def test_registered_user_starts_with_no_todos(self, client, db_session):
        """Test that a freshly issued token works and the new account is empty."""
        # Arrange
        token = _register(client).get_json()["token"]

        # Act
        response = client.get("/api/todos", headers=auth_headers(token))

        # Assert
        assert response.status_code == 200
        assert response.get_json() == []

    @pytest.mark.api
    @pytest.mark.parametrize(
        "username,email",
        [("alice", "other@x.com"), ("someone", "a@x.com")],
    )
    def test_duplicate_username_or_email_returns_400(self, client, db_session, username, email):
        _register(client)

        response = _register(client, username=username, email=email)

        assert response.status_code == 400
        assert response.get_json() == {"error": "User already exists"}

    @pytest.mark.api
    @pytest.mark.parametrize("missing", ["username", "email", "password"])
    def test_missing_field_returns_400(self, client, db_session, missing):
        payload = {"username": "bob", "email": "b@x.com", "password": "pw"}
        payload[missing] = ""

        response = client.post("/api/register", json=payload)

        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_password_is_never_returned(self, client, db_session):
        body = _register(client, password="hunter2").get_json()

        assert "hunter2" not in str(body)
        assert "password_hash" not in body["user"]


class TestLogin:
    """Tests for POST /api/login."""

    @pytest.mark.api
    def test_login_with_valid_credentials(self, client, db_session, owner):
        # Act
        response = client.post(
            "/api/login", json={"email": owner.email, "password": DEFAULT_PASSWORD}
        )

        # Assert
        assert response.status_code == 200
        data = response.get_json()
        assert data["message"] == "Login successful"
        assert data["user"] == {"id": owner.id, "username": "owner", "email": owner.email}
        assert data["token"]

    @pytest.mark.api
    @pytest.mark.parametrize(
        "email,password",
        [
            ("owner@example.com", "wrong-password"),
            ("nobody@example.com", DEFAULT_PASSWORD),
            ("", ""),
        ],
    )
    def test_bad_credentials_return_generic_400(self, client, db_session, owner, email, password):
        """Test that unknown email and wrong password are indistinguishable."""
        response = client.post("/api/login", json={"email": email, "password": password})

        assert response.status_code == 400
        assert response.get_json() == {"error": "Invalid credentials"}


class TestTokenChecks:
    """Tests for the bearer-token guard on /api/todos."""

    def test_missing_token_returns_401(self, client, db_session):
        response = client.get("/api/todos")

        assert response.status_code == 401
        assert response.get_json() == {"error": "Access token required"}

    @pytest.mark.parametrize(
        "header",
        ["Token abc", "Bearer", "Bearer   ", "basic dXNlcjpwdw=="],
    )
    def test_malformed_authorization_header_returns_401(self, client, db_session, header):
        response = client.get("/api/todos", headers={"Authorization": header})

        assert response.status_code == 401

    def test_garbage_token_returns_403(self, client, db_session):
        response = client.get("/api/todos", headers=auth_headers("not.a.jwt"))

        assert response.status_code == 403
        assert response.get_json() == {"error": "Invalid token"}

    def test_token_signed_with_other_secret_returns_403(self, client, db_session):
        token = create_test_token(secret="a-completely-different-secret-value-0000")

        response = client.get("/api/todos", headers=auth_headers(token))

        assert response.status_code == 403

    def test_expired_token_returns_403(self, client, db_session):
        token = create_test_token(secret=TEST_JWT_SECRET_KEY, expired=True)

        response = client.get("/api/todos", headers=auth_headers(token))

        assert response.status_code == 403
        assert response.get_json() == {"error": "Token expired"}


def test_alice_flow(client, db_session):
    """Register, add a todo, complete it, and see it listed as completed."""
    # Arrange
    token = _register(client).get_json()["token"]
    headers = auth_headers(token)

    # Act
    created = client.post("/api/todos", json={"title": "Buy milk"}, headers=headers).get_json()
    client.put(f"/api/todos/{created['id']}", json={"completed": True}, headers=headers)
    listed = client.get("/api/todos", headers=headers).get_json()

    # Assert
    assert len(listed) == 1
    assert listed[0]["title"] == "Buy milk"
    assert listed[0]["completed"] is True
