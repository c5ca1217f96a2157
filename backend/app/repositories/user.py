"""User repository: persistence-only lookups used by authentication."""

from __future__ import annotations

from typing import cast

from sqlalchemy import or_, select

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER hashes passwords or issues tokens; callers hand it a ready
    ``password_hash``. Email and username matching is exact (case-sensitive).
    """

    model = User

    def _filterable_fields(self):
        """Whitelist fields safe for equality filters."""
        return {
            "email": User.email,
            "username": User.username,
        }

    # ---------------------------- Lookup helpers ----------------------------

    def find_by_email(self, email: str) -> User | None:
        """Fetch a user by exact email.

        :param email: Email address as stored.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = self._default_eagerload(select(User).where(User.email == email))
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def find_by_email_or_username(self, email: str, username: str) -> User | None:
        """Fetch the first user whose email OR username matches (single query).

        When two different rows match (one per predicate) the email match is
        returned so callers can report the email conflict first.

        :param email: Candidate email.
        :type email: str
        :param username: Candidate username.
        :type username: str
        :returns: Matching user or ``None``.
        :rtype: User | None
        """
        stmt = self._default_eagerload(
            select(User).where(or_(User.email == email, User.username == username))
        )
        matches = list(self.session.execute(stmt).scalars().all())
        for user in matches:
            if user.email == email:
                return user
        return matches[0] if matches else None

    # ---------------------------- Writes ----------------------------

    def create(self, *, username: str, email: str, password_hash: str) -> User:
        """Insert a user and flush to obtain its id.

        :param username: Public handle.
        :param email: Login email.
        :param password_hash: Output of the password hasher.
        :returns: Persisted (flushed) user.
        :rtype: User
        :raises sqlalchemy.exc.IntegrityError: On uniqueness violations.
        """
        user = User(username=username, email=email, password_hash=password_hash)
        return self.add(user)
