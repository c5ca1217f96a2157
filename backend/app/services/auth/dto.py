# app/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param username: Public handle (unique).
    :type username: str
    :param email: Login email, stored as given apart from trimming.
    :type email: str
    :param password: Raw password (hashed by the service).
    :type password: str
    """

    username: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class PublicUserOut:
    """
    Client-safe user projection embedded in :class:`AuthResultOut`.

    :param id: User id.
    :param username: Public handle.
    :param email: Login email.
    :param avatar_url: Optional avatar URL.
    """

    id: int
    username: str
    email: str
    avatar_url: str | None = None


@dataclass(frozen=True, slots=True)
class CurrentUserOut:
    """Projection returned by ``get_current_user``; exactly five fields."""

    id: int
    username: str
    email: str
    avatar_url: str | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Output DTO for register/login/refresh.

    :param user: Public user payload.
    :type user: :class:`PublicUserOut`
    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    user: PublicUserOut
    access_token: str
    refresh_token: str


# ------------------------------ Policy ------------------------------------ #


class CompanionPolicy(str, Enum):
    """What a failed companion bootstrap does to register/login."""

    BEST_EFFORT = "best_effort"
    REQUIRED = "required"


@dataclass(frozen=True, slots=True)
class AuthPolicy:
    """
    Behavioural switches for :class:`~app.services.auth.service.AuthService`.

    :param companion: Companion bootstrap policy.
    :type companion: :class:`CompanionPolicy`
    :param enforce_password_version: Compare the refresh token's
        ``password_version`` with the stored one. Bearer authentication
        always compares.
    :type enforce_password_version: bool
    """

    companion: CompanionPolicy = CompanionPolicy.BEST_EFFORT
    enforce_password_version: bool = False

    @classmethod
    def from_mapping(cls, config) -> AuthPolicy:
        """Build from a Flask config mapping.

        :raises ValueError: On an unknown ``COMPANION_BOOTSTRAP_POLICY``.
        """
        raw = str(config.get("COMPANION_BOOTSTRAP_POLICY") or CompanionPolicy.BEST_EFFORT.value)
        return cls(
            companion=CompanionPolicy(raw.strip().lower()),
            enforce_password_version=bool(config.get("AUTH_ENFORCE_PASSWORD_VERSION", False)),
        )
