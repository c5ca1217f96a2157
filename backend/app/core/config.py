"""Environment-selected Flask configuration classes.

``APP_ENV`` picks one of :data:`CONFIG_MAP`; individual values come from the
process environment (``.env`` is loaded in development through python-dotenv).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # development | testing | production

# Shipped defaults; refused by validate_config outside debug/testing
PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset(
    {"CHANGE_ME", "CHANGE_ME_ACCESS", "CHANGE_ME_REFRESH"}
)

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment.

    Parameters
    ----------
    name: str
        Variable name.
    default: bool, optional
        Returned when the variable is unset.

    Returns
    -------
    bool
        ``True`` for ``1/true/yes/y/on`` (any case), ``False`` for anything else.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw and raw.strip() else default


class BaseConfig:
    """Settings shared by every environment.

    Attributes
    ----------
    JWT_ACCESS_SECRET, JWT_REFRESH_SECRET: str
        Independent HMAC keys for the two token classes (env ``JWT_SECRET``
        and ``JWT_REFRESH_SECRET``). They must differ.
    JWT_ACCESS_EXPIRES_SECONDS, JWT_REFRESH_EXPIRES_SECONDS: int
        Token lifetimes; 15 minutes and 7 days by default.
    COMPANION_BOOTSTRAP_POLICY: str
        ``"best_effort"`` logs and continues when the self-companion bootstrap
        fails after register/login; ``"required"`` fails the call instead.
    AUTH_ENFORCE_PASSWORD_VERSION: bool
        Refuse refresh tokens whose ``password_version`` claim no longer
        matches the user row. Off by default. Access tokens are always
        checked against the user row.
    PASSWORD_HASH_METHOD: str | None
        Werkzeug method string (e.g. ``"scrypt"``); ``None`` keeps the
        library default.
    CORS_ORIGINS: str
        Comma-separated browser origins allowed on ``/api/*``.
    """

    API_BASE_PREFIX = "/api"
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Tokens
    JWT_ACCESS_SECRET = os.getenv("JWT_SECRET", "CHANGE_ME_ACCESS")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "CHANGE_ME_REFRESH")
    JWT_ACCESS_EXPIRES_SECONDS = env_int("JWT_ACCESS_EXPIRES_SECONDS", 15 * 60)
    JWT_REFRESH_EXPIRES_SECONDS = env_int("JWT_REFRESH_EXPIRES_SECONDS", 7 * 24 * 60 * 60)

    # Auth policies
    COMPANION_BOOTSTRAP_POLICY = os.getenv("COMPANION_BOOTSTRAP_POLICY", "best_effort")
    AUTH_ENFORCE_PASSWORD_VERSION = env_bool("AUTH_ENFORCE_PASSWORD_VERSION", False)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD") or None

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local development: debug on, placeholder secrets tolerated."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600


class TestingConfig(BaseConfig):
    """Automated tests: in-memory SQLite, fixed distinct secrets, cheap hashing."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_ACCESS_SECRET = "test-jwt-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"


class ProductionConfig(BaseConfig):
    """Deployed service. Token secrets are checked by :func:`validate_config`."""

    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Config class for ``APP_ENV``; unknown or unset values mean development."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, Any]) -> None:
    """Refuse to boot a non-debug, non-testing app with placeholder token secrets.

    :param config: Loaded Flask config mapping.
    :raises RuntimeError: When a secret is missing or still a placeholder.
    """
    if config.get("DEBUG") or config.get("TESTING"):
        return
    for key, env_name in (
        ("JWT_ACCESS_SECRET", "JWT_SECRET"),
        ("JWT_REFRESH_SECRET", "JWT_REFRESH_SECRET"),
    ):
        value = config.get(key)
        if not value or value in PLACEHOLDER_SECRETS:
            raise RuntimeError(f"{key} must be set for production deployments (env {env_name}).")
