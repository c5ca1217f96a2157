from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Protocol


class TokenClass(str, Enum):
    """Signing context of a bearer token. Each class has its own secret."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """
    Identity carried inside every token.

    :param id: User id.
    :param user_id: Same value as ``id``; both keys are kept for client compatibility.
    :param email: User email at issuance time.
    :param password_version: Credential generation at issuance time.
    """

    id: int
    user_id: int
    email: str
    password_version: int = 0

    @classmethod
    def for_user(cls, user: Any) -> TokenPayload:
        """Build a fresh payload from a user record (``id == user_id``)."""
        return cls(
            id=int(user.id),
            user_id=int(user.id),
            email=user.email,
            password_version=int(user.password_version or 0),
        )

    def to_claims(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "email": self.email,
            "password_version": self.password_version,
        }


class TokenProvider(Protocol):
    """Port for issuing and verifying signed bearer tokens."""

    def issue(self, token_class: TokenClass, payload: TokenPayload) -> str: ...

    def verify(self, token_class: TokenClass, token: str) -> TokenPayload: ...

    def decode_times(self, token_class: TokenClass, token: str) -> tuple[datetime, datetime]: ...
