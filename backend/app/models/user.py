"""User model definition for the travel journal app."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .companion import TravelCompanion


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    email : str
        Login email. Stored trimmed, case preserved (lookups are exact).
    username : str
        Public handle. Unique per system.
    password_hash : str
        One-way hash produced by the password hasher. Never serialized.
    password_version : int
        Incremented by credential-altering events; embedded in tokens.
    avatar_url : str | None
        Optional avatar location.
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).
    """

    __tablename__ = "users"
    __repr_fields__ = ("username",)

    # Columns
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    password_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Constraints (names are matched by the auth service on IntegrityError)
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
    )

    companions: Mapped[list[TravelCompanion]] = relationship(
        "TravelCompanion",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """Trim and sanity-check the email; case is preserved (lookups are exact).

        Format checks belong to the API schema; this only refuses values with
        no local part or no domain, so anything the schema accepts (including
        ``user@localhost``) persists.

        :raises ValueError: If the email is missing or has no domain part.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip()
        local, at, domain = v.rpartition("@")
        if not (local and at and domain):
            raise ValueError("Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """Trim the username and reject blank values."""
        if not isinstance(value, str):
            raise ValueError("Username is required.")
        v = value.strip()
        if not v:
            raise ValueError("Username is required.")
        return v

    @validates("password_hash")
    def _require_hash(self, key: str, value: str) -> str:
        """Reject empty hashes; plaintext never reaches this model."""
        if not isinstance(value, str) or not value:
            raise ValueError("Password hash must be a non-empty string.")
        return value
