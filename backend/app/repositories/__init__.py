"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from app.repositories.base import BaseRepository
from app.repositories.companion import CompanionRepository
from app.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    # Domain
    "CompanionRepository",
    "UserRepository",
]
