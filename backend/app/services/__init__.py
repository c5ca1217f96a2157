"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`app.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``app.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Auth service (from ``app.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`PublicUserOut`,
      :class:`CurrentUserOut`, :class:`AuthResultOut`
    * Policy: :class:`AuthPolicy`, :class:`CompanionPolicy`

- Companion bootstrap (from ``app.services.companions``)
    * :class:`CompanionService`, :class:`CompanionOut`
"""

from __future__ import annotations

# Base primitives (service base + request-scoped context)
from ._shared.base import BaseService, ServiceContext

# Auth service + DTOs
from .auth import (
    AuthPolicy,
    AuthResultOut,
    AuthService,
    CompanionPolicy,
    CurrentUserOut,
    LoginIn,
    PublicUserOut,
    RegisterIn,
)

# Companion bootstrap
from .companions import CompanionOut, CompanionService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Auth
    "AuthService",
    "AuthPolicy",
    "CompanionPolicy",
    "RegisterIn",
    "LoginIn",
    "PublicUserOut",
    "CurrentUserOut",
    "AuthResultOut",
    # Companions
    "CompanionService",
    "CompanionOut",
]
