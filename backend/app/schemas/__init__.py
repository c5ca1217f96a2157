"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AuthResultSchema,
    CurrentUserSchema,
    LoginSchema,
    PublicUserSchema,
    RefreshTokenSchema,
    RegisterSchema,
)

__all__ = [
    "AuthResultSchema",
    "CurrentUserSchema",
    "LoginSchema",
    "PublicUserSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
]
