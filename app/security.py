"""
Password hashing and JWT helpers.

Tokens are JSON Web Tokens signed with HS256 using the server-held
``JWT_SECRET_KEY``.  They carry:

    - ``user_id``  -- opaque id of the authenticated user.
    - ``username`` -- carried so clients can display it without a lookup.
    - ``iat``      -- issued-at timestamp (UTC epoch seconds).
    - ``exp``      -- expiration timestamp (UTC epoch seconds).

``verify_token`` never raises for a bad token.  It returns a
``TokenCheck`` whose ``status`` is one of ``VALID``, ``EXPIRED`` or
``MALFORMED`` so callers can branch on the outcome.

Key Concepts Demonstrated:
- HS256 signing and verification with PyJWT
- Canonical JWT claims (iat, exp) and custom claims
- Clock-skew tolerance (``leeway``)
- Werkzeug password hashing (scrypt/PBKDF2 with a random salt)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

ALGORITHM = "HS256"
# decode() rejects tokens missing any of these before looking at the values
REQUIRED_TOKEN_CLAIMS = ["user_id", "username", "iat", "exp"]


class TokenStatus(str, Enum):
    """Outcome of a token verification."""

    VALID = "valid"
    EXPIRED = "expired"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class TokenCheck:
    """Result of :func:`verify_token`."""

    status: TokenStatus
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is TokenStatus.VALID


def hash_password(password: str) -> str:
    """Return a salted one-way digest of *password*."""
    return generate_password_hash(password)


def check_password(password_hash: str, password: str) -> bool:
    """Return True if *password* matches the stored digest."""
    return check_password_hash(password_hash, password)


def create_token(
    user_id: str,
    username: str,
    secret_key: str,
    expiry_hours: int,
) -> str:
    """
    Create an HS256-signed JWT containing the auth claims.

    Args:
        user_id: Opaque id of the authenticated user.  Must be non-empty.
        username: Display name of the user.  Must be non-empty.
        secret_key: Server-held signing secret.
        expiry_hours: Number of hours from now until the token expires.

    Returns:
        A compact JWS string suitable for an ``Authorization: Bearer``
        header.

    Raises:
        ValueError: If *user_id* or *username* is blank.
    """
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValueError("user_id must be a non-empty string")
    if not isinstance(username, str) or not username.strip():
        raise ValueError("username must be a non-empty string")

    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(hours=int(expiry_hours))

    payload: dict[str, Any] = {
        "user_id": user_id,
        "username": username,
        # RFC 7519 NumericDate: seconds since the epoch
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def verify_token(token: str, secret_key: str, leeway: int = 30) -> TokenCheck:
    """
    Decode and validate a JWT issued by :func:`create_token`.

    Checks the signature, expiry and required claims, then that
    ``user_id`` and ``username`` are non-blank strings.

    Args:
        token: The raw compact-JWS token string.
        secret_key: Server-held signing secret.
        leeway: Seconds of clock-skew tolerance applied to ``exp``.

    Returns:
        A ``TokenCheck``; ``claims`` is populated only when valid.
    """
    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[ALGORITHM],
            options={"require": REQUIRED_TOKEN_CLAIMS},
            leeway=leeway,
        )
    except jwt.ExpiredSignatureError:
        return TokenCheck(TokenStatus.EXPIRED)
    except jwt.InvalidTokenError:
        return TokenCheck(TokenStatus.MALFORMED)

    user_id = payload.get("user_id")
    username = payload.get("username")
    if not isinstance(user_id, str) or not user_id.strip():
        return TokenCheck(TokenStatus.MALFORMED)
    if not isinstance(username, str) or not username.strip():
        return TokenCheck(TokenStatus.MALFORMED)
    return TokenCheck(TokenStatus.VALID, payload)
