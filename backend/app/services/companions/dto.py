"""DTOs for CompanionService."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CompanionOut:
    """
    Public view of a travel companion.

    :param id: Companion identifier.
    :type id: int
    :param user_id: Owning user.
    :type user_id: int
    :param name: Display name.
    :type name: str
    :param is_myself: ``True`` for the owner's own profile.
    :type is_myself: bool
    :param created: ``True`` when this call inserted the row.
    :type created: bool
    """

    id: int
    user_id: int
    name: str
    is_myself: bool
    created: bool = False
