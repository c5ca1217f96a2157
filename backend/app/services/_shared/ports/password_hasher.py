from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    Port for one-way password hashing.

    Implementations are pure: no I/O, no shared state. ``verify`` must compare
    in time independent of where a mismatch occurs and must return ``False``
    (never raise) for a malformed stored hash.
    """

    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, hashed: str) -> bool: ...

    def burn(self, plaintext: str) -> None:
        """Spend one verification's worth of work against a throwaway hash."""
        ...
