"""
CompanionService
================

Bootstraps the "myself" travel companion that every account owns. Called
after register and on every login so that accounts created before the
companion feature existed are repaired lazily.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from app.models.companion import TravelCompanion
from app.services._shared.base import BaseService
from app.services.companions.dto import CompanionOut

logger = logging.getLogger(__name__)


class CompanionService(BaseService):
    """Idempotent creation of the user's own companion profile."""

    def ensure_self_companion(self, user_id: int, display_name_seed: str) -> CompanionOut:
        """
        Return the user's self companion, creating it when missing.

        :param user_id: Owning user id.
        :type user_id: int
        :param display_name_seed: Name used if the companion has to be created
            (the username at registration).
        :type display_name_seed: str
        :returns: Existing or newly created companion.
        :rtype: :class:`CompanionOut`
        :raises sqlalchemy.exc.SQLAlchemyError: On store failures other than a
            lost insert race.
        """
        try:
            with self.rw_uow() as uow:
                existing = uow.companions.get_myself(user_id)
                if existing is not None:
                    return self._to_out(existing)
                companion = uow.companions.create_myself(user_id=user_id, name=display_name_seed)
                out = self._to_out(companion, created=True)
        except IntegrityError:
            # A concurrent call inserted it first; the unique index kept one row.
            with self.ro_uow() as uow_ro:
                winner = uow_ro.companions.get_myself(user_id)
                if winner is None:
                    raise
                return self._to_out(winner)

        logger.info(
            "Self companion created",
            extra={"event": "companion.bootstrap", "user_id": user_id},
        )
        return out

    @staticmethod
    def _to_out(companion: TravelCompanion, *, created: bool = False) -> CompanionOut:
        return CompanionOut(
            id=companion.id,
            user_id=companion.user_id,
            name=companion.name,
            is_myself=bool(companion.is_myself),
            created=created,
        )
