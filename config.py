"""
Settings for the todo API.

One class per deployment profile, all deriving from ``Config``.  Every
value can be overridden through the environment; the defaults only suit
a developer machine, and ``check_production_secrets`` stops a
production app from booting with the built-in JWT secret.

Key Concepts Demonstrated:
- Profile classes sharing a common base
- Environment overrides for secrets and database location
- An isolated SQLite file for the test suite
- JWT settings (shared secret, expiry, clock skew)
"""

from __future__ import annotations

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

DEV_JWT_SECRET_KEY = "dev-jwt-secret-change-in-production"


class Config:
    """Base configuration with default settings."""

    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Default database location
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'todos.db'}",
    )

    # Tokens are HS256-signed with this server-held secret
    JWT_SECRET_KEY: str = os.environ.get("JWT_SECRET_KEY", DEV_JWT_SECRET_KEY)
    # How many hours a newly issued token remains valid before expiring
    JWT_EXPIRY_HOURS: int = int(os.environ.get("JWT_EXPIRY_HOURS", "24"))
    # Seconds of tolerance for clock differences between issuer and verifier
    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "30"))


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Testing environment configuration.

    Uses a separate SQLite database so that test runs never touch
    development data, and a fixed JWT secret so tests can mint tokens.
    """

    DEBUG: bool = True
    TESTING: bool = True

    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "TEST_DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'test_todos.db'}?check_same_thread=False",
    )
    SQLALCHEMY_ENGINE_OPTIONS: dict = {"pool_pre_ping": True}
    JWT_SECRET_KEY: str = os.environ.get(
        "TEST_JWT_SECRET_KEY", "test-jwt-secret-key-for-local-tests-123456"
    )


class ProductionConfig(Config):
    """
    Production environment configuration.

    All secrets must be supplied through environment variables.
    """

    DEBUG: bool = False
    TESTING: bool = False


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Resolve a profile name to its configuration class.

    Args:
        env: ``development``, ``testing`` or ``production``.  Falls back
             to ``FLASK_ENV`` when omitted; unknown names get the
             development profile.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])


def check_production_secrets(config_class: type[Config]) -> None:
    """
    Refuse to start a production app with the development JWT secret.

    Raises:
        RuntimeError: If ``config_class`` is a production profile and
            ``JWT_SECRET_KEY`` was not overridden.
    """
    if not issubclass(config_class, ProductionConfig):
        return
    if config_class.JWT_SECRET_KEY == DEV_JWT_SECRET_KEY:
        raise RuntimeError(
            "Missing JWT configuration: set JWT_SECRET_KEY for production."
        )
