"""Travel companion repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from app.models.companion import TravelCompanion
from app.repositories.base import BaseRepository


class CompanionRepository(BaseRepository[TravelCompanion]):
    """Persistence-only repository for :class:`TravelCompanion`."""

    model = TravelCompanion

    def _filterable_fields(self):
        """Whitelist fields safe for equality filters."""
        return {
            "user_id": TravelCompanion.user_id,
            "is_myself": TravelCompanion.is_myself,
        }

    def get_myself(self, user_id: int) -> TravelCompanion | None:
        """Return the user's self companion, if any.

        :param user_id: Owning user id.
        :type user_id: int
        :returns: Self companion or ``None``.
        :rtype: TravelCompanion | None
        """
        stmt = select(TravelCompanion).where(
            TravelCompanion.user_id == user_id,
            TravelCompanion.is_myself.is_(True),
        )
        result = self.session.execute(stmt).scalars().first()
        return cast(TravelCompanion | None, result)

    def create_myself(self, *, user_id: int, name: str) -> TravelCompanion:
        """Insert the self companion and flush to obtain its id.

        :raises sqlalchemy.exc.IntegrityError: If one already exists.
        """
        companion = TravelCompanion(user_id=user_id, name=name, is_myself=True)
        return self.add(companion)
