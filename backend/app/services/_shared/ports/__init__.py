"""
app.services._shared.ports
==========================

Collection of *ports* (hexagonal interfaces) that define the contracts
for credential hashing, token management and post-auth bootstrap.

These ports decouple the domain/service layer from concrete implementations
(werkzeug hashing, PyJWT signing, the companion service).

Modules
-------
- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`: one-way hash + constant-time verify.

- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, :class:`~.TokenClass` and
    :class:`~.TokenPayload`: issuing and verifying signed bearer tokens.

- :mod:`companion_bootstrap`:
    Defines :class:`~.CompanionBootstrap`: idempotent creation of the
    user's own travel companion record.

Design Notes
------------
Concrete adapters live under ``app.infra`` (werkzeug hashing, PyJWT) or
``app.services`` (companion bootstrap).
"""

from __future__ import annotations

from .companion_bootstrap import CompanionBootstrap
from .password_hasher import PasswordHasher
from .token_provider import TokenClass, TokenPayload, TokenProvider

__all__ = [
    "CompanionBootstrap",
    "PasswordHasher",
    "TokenClass",
    "TokenPayload",
    "TokenProvider",
]
