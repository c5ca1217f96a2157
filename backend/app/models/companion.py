"""Travel companion model, including each user's "Myself" companion."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User


class TravelCompanion(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A person a user travels with.

    Every account owns exactly one companion flagged ``is_myself`` that
    represents the user themself on trips. It is created on registration and
    back-filled on login for accounts that predate it.

    Fields
    ------
    user_id : int
        Owning user (cascade delete).
    name : str
        Display name; seeded from the username for the self companion.
    email : str | None
        Optional contact email.
    is_myself : bool
        ``True`` only for the owner's own companion record.
    """

    __tablename__ = "travel_companions"
    __repr_fields__ = ("name", "is_myself")

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    is_myself: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    # At most one self companion per user
    __table_args__ = (
        Index(
            "uq_travel_companions_myself",
            "user_id",
            unique=True,
            sqlite_where=text("is_myself = 1"),
            postgresql_where=text("is_myself"),
        ),
    )

    user: Mapped[User] = relationship("User", back_populates="companions")

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        """Trim the display name and reject blanks."""
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Companion name is required.")
        return value.strip()
