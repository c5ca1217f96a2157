from .dto import (
    AuthPolicy,
    AuthResultOut,
    CompanionPolicy,
    CurrentUserOut,
    LoginIn,
    PublicUserOut,
    RegisterIn,
)
from .service import AuthService

__all__ = [
    "AuthPolicy",
    "AuthResultOut",
    "AuthService",
    "CompanionPolicy",
    "CurrentUserOut",
    "LoginIn",
    "PublicUserOut",
    "RegisterIn",
]
