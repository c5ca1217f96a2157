"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between
repositories, token adapters, and application services.

Every error carries a stable machine-readable ``code`` and a client-safe
message (``str(exc)``). Authentication failures deliberately share one message
per kind so that callers cannot tell *why* a credential or token was refused.

The translation to HTTP responses (RFC 7807) is handled by
``app/core/errors.py`` via :func:`app.services._shared.base.translate_service_error`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL includes the constraint name in the error message. SQLite only
    reports the offending columns (``UNIQUE constraint failed: users.email``),
    so the ``uq_<table>_<column>`` convention is also matched as
    ``<table>.<column>``.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    if name.startswith("uq_"):
        table, _, column = name[3:].partition("_")
        return bool(column) and f"{table}.{column}" in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, adapters or domain logic.
    - The API layer later translates them to ``APIError``.
    """

    code: ClassVar[str] = "bad_request"


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    code: ClassVar[str] = "not_found"

    def __str__(self) -> str:
        return f"{self.entity} not found"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    code: ClassVar[str] = "conflict"

    def __str__(self) -> str:
        return self.detail


class AuthenticationError(ServiceError):
    """Base for refused credentials or tokens. Each subclass has one fixed message."""

    code: ClassVar[str] = "unauthorized"
    message: ClassVar[str] = "Unauthorized"

    def __init__(self) -> None:
        super().__init__(self.message)


# --------------------------------------------------------------------------- #
# Authentication taxonomy
# --------------------------------------------------------------------------- #


class DuplicateEmailError(ConflictError):
    """Registration conflict on ``email``. Takes priority over username."""

    code: ClassVar[str] = "duplicate_email"

    def __init__(self) -> None:
        super().__init__("User", "Email already registered")


class DuplicateUsernameError(ConflictError):
    """Registration conflict on ``username``."""

    code: ClassVar[str] = "duplicate_username"

    def __init__(self) -> None:
        super().__init__("User", "Username already taken")


class InvalidCredentialsError(AuthenticationError):
    """Login refused; identical for unknown email and wrong password."""

    code: ClassVar[str] = "invalid_credentials"
    message: ClassVar[str] = "Invalid email or password"


class InvalidRefreshTokenError(AuthenticationError):
    """Refresh refused; identical for malformed, expired, forged or orphaned tokens."""

    code: ClassVar[str] = "invalid_refresh_token"
    message: ClassVar[str] = "Invalid refresh token"


class InvalidAccessTokenError(AuthenticationError):
    """Bearer access token refused (missing, malformed, expired or forged)."""

    code: ClassVar[str] = "invalid_token"
    message: ClassVar[str] = "Invalid or expired token"


class TokenInvalidatedError(AuthenticationError):
    """Well-formed access token whose user is gone or whose password has changed since."""

    code: ClassVar[str] = "token_invalidated"
    message: ClassVar[str] = "Token invalidated. Please log in again."


class InvalidTokenError(ServiceError):
    """
    Raised by the token codec for any verification failure.

    Never surfaced to clients directly: services re-raise it as
    :class:`InvalidRefreshTokenError` or :class:`InvalidAccessTokenError`.
    """

    code: ClassVar[str] = "invalid_token"

    def __init__(self) -> None:
        super().__init__("Invalid token")


class UserNotFoundError(NotFoundError):
    """Current-user lookup for an id with no backing record."""

    code: ClassVar[str] = "user_not_found"

    def __init__(self, user_id: int) -> None:
        super().__init__("User", user_id)


class UnexpectedError(ServiceError):
    """Unclassified store or collaborator failure; details stay in the logs."""

    code: ClassVar[str] = "unexpected_error"

    def __init__(self) -> None:
        super().__init__("Unexpected error")
