"""
Configuration for the todo API client.

Mirrors the server's class-based configuration: a ``Config`` base holds
defaults read from the environment and ``get_config`` picks the profile
from ``FLASK_ENV``.
"""

from __future__ import annotations

import os


class Config:
    """Base client configuration."""

    TODO_API_URL: str = os.environ.get("TODO_API_URL", "http://localhost:5000")
    TODO_API_TIMEOUT: float = float(os.environ.get("TODO_API_TIMEOUT", "5"))


class DevelopmentConfig(Config):
    """Configuration for local development."""


class TestingConfig(Config):
    """Configuration for automated tests."""

    TODO_API_URL: str = os.environ.get("TEST_TODO_API_URL", "http://todo-api")
    TODO_API_TIMEOUT: float = float(os.environ.get("TEST_TODO_API_TIMEOUT", "1"))


class ProductionConfig(Config):
    """Configuration for production deployments."""


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Look up and return the configuration class for the given environment.

    Args:
        env: Environment name. When None, falls back to FLASK_ENV.

    Returns:
        The selected configuration class.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
