from __future__ import annotations

from typing import Any, Protocol


class CompanionBootstrap(Protocol):
    """Port for ensuring the user's own ("myself") travel companion exists."""

    def ensure_self_companion(self, user_id: int, display_name_seed: str) -> Any: ...
