# app/infra/jwt/pyjwt_token_provider.py
from __future__ import annotations

import secrets
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import jwt

from app.services._shared.errors import InvalidTokenError
from app.services._shared.ports import TokenClass, TokenPayload, TokenProvider

ALGORITHM = "HS256"
# ``password_version`` and ``jti`` are optional; a token without a version reads as 0
REQUIRED_CLAIMS = ("id", "user_id", "email", "iat", "exp", "type")


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class TokenCodecConfig:
    """
    Immutable signing configuration for both token classes.

    :param access_secret: HMAC key for access tokens.
    :type access_secret: str
    :param refresh_secret: HMAC key for refresh tokens. Must differ from ``access_secret``.
    :type refresh_secret: str
    :param access_lifetime_seconds: Access token lifetime in whole seconds.
    :type access_lifetime_seconds: int
    :param refresh_lifetime_seconds: Refresh token lifetime in whole seconds.
    :type refresh_lifetime_seconds: int
    :raises ValueError: On empty or shared secrets, or non-positive lifetimes.
    """

    access_secret: str
    refresh_secret: str
    access_lifetime_seconds: int = 15 * 60
    refresh_lifetime_seconds: int = 7 * 24 * 60 * 60

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Token secrets must be non-empty.")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh secrets must differ.")
        for name in ("access_lifetime_seconds", "refresh_lifetime_seconds"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive integer.")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> TokenCodecConfig:
        """Build from a Flask config mapping (``JWT_*`` keys)."""
        return cls(
            access_secret=config.get("JWT_ACCESS_SECRET") or "",
            refresh_secret=config.get("JWT_REFRESH_SECRET") or "",
            access_lifetime_seconds=int(config.get("JWT_ACCESS_EXPIRES_SECONDS", 15 * 60)),
            refresh_lifetime_seconds=int(
                config.get("JWT_REFRESH_EXPIRES_SECONDS", 7 * 24 * 60 * 60)
            ),
        )

    def secret_for(self, token_class: TokenClass) -> str:
        if token_class is TokenClass.ACCESS:
            return self.access_secret
        return self.refresh_secret

    def lifetime_for(self, token_class: TokenClass) -> int:
        if token_class is TokenClass.ACCESS:
            return self.access_lifetime_seconds
        return self.refresh_lifetime_seconds


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Stateless HS256 codec built on PyJWT.

    Expiry is checked here against the injected ``clock`` instead of by
    PyJWT, so a token is valid up to and including its ``exp`` second.
    Every verification failure raises the same :class:`InvalidTokenError`.
    """

    config: TokenCodecConfig
    clock: Callable[[], datetime] = field(default=_utcnow)

    def issue(self, token_class: TokenClass, payload: TokenPayload) -> str:
        """
        Sign ``payload`` as a ``token_class`` token.

        :param token_class: Access or refresh.
        :param payload: Identity claims.
        :returns: Compact JWS string (three dot-separated segments).
        """
        iat = int(self.clock().timestamp())
        claims: dict[str, Any] = {
            **payload.to_claims(),
            "iat": iat,
            "exp": iat + self.config.lifetime_for(token_class),
            "type": token_class.value,
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(claims, self.config.secret_for(token_class), algorithm=ALGORITHM)

    def verify(self, token_class: TokenClass, token: str) -> TokenPayload:
        """
        Verify signature, claim shape, class and expiry.

        :raises InvalidTokenError: For any failure (malformed, forged, expired, wrong class).
        """
        claims = self._decode(token_class, token)
        if self.clock().timestamp() > claims["exp"]:
            raise InvalidTokenError()
        return TokenPayload(
            id=claims["id"],
            user_id=claims["user_id"],
            email=claims["email"],
            password_version=claims.get("password_version", 0),
        )

    def decode_times(self, token_class: TokenClass, token: str) -> tuple[datetime, datetime]:
        """Return ``(iat, exp)`` of a correctly signed token, ignoring expiry."""
        claims = self._decode(token_class, token)
        return (
            datetime.fromtimestamp(claims["iat"], tz=UTC),
            datetime.fromtimestamp(claims["exp"], tz=UTC),
        )

    # ----------------------------- Internals ----------------------------------

    def _decode(self, token_class: TokenClass, token: str) -> dict[str, Any]:
        if not isinstance(token, str) or not token:
            raise InvalidTokenError()
        try:
            claims = jwt.decode(
                token,
                self.config.secret_for(token_class),
                algorithms=[ALGORITHM],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": list(REQUIRED_CLAIMS),
                },
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError() from exc

        if claims.get("type") != token_class.value:
            raise InvalidTokenError()
        if not all(_is_int(claims[k]) for k in ("id", "user_id", "iat", "exp")):
            raise InvalidTokenError()
        if not _is_int(claims.get("password_version", 0)):
            raise InvalidTokenError()
        if not isinstance(claims["email"], str) or claims["id"] != claims["user_id"]:
            raise InvalidTokenError()
        return claims
