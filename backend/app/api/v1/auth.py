"""Authentication endpoints using the service layer."""

from __future__ import annotations

from dataclasses import asdict

from flask import Blueprint, g, request

from app.api.deps import get_auth_service, require_auth, success, timing
from app.schemas import (
    AuthResultSchema,
    CurrentUserSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
)
from app.services.auth import LoginIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
auth_result_schema = AuthResultSchema()
current_user_schema = CurrentUserSchema()


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
def register():
    """Create an account and return the user with a fresh token pair."""

    data = register_schema.load(_json_body())
    result = get_auth_service().register(RegisterIn(**data))
    return success(auth_result_schema.dump(asdict(result)), status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(_json_body())
    result = get_auth_service().login(LoginIn(**data))
    return success(auth_result_schema.dump(asdict(result)))


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a brand-new token pair."""

    data = refresh_schema.load(_json_body())
    result = get_auth_service().refresh_token(data["refresh_token"])
    return success(auth_result_schema.dump(asdict(result)))


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user's profile."""

    user = get_auth_service().get_current_user(g.auth.user_id)
    return success(current_user_schema.dump(asdict(user)))


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Stateless logout: nothing is revoked server-side, clients drop their tokens."""

    return success(message="Logged out successfully")
