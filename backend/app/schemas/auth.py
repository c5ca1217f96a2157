"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


def validate_password_strength(value: str) -> None:
    """Require at least one letter and one digit."""
    if not any(ch.isalpha() for ch in value):
        raise ValidationError("Password must contain at least one letter.")
    if not any(ch.isdigit() for ch in value):
        raise ValidationError("Password must contain at least one digit.")


class _InputSchema(Schema):
    """Ignore unknown keys and trim identity fields before validation."""

    _TRIMMED: tuple[str, ...] = ("email", "username")

    class Meta:
        unknown = EXCLUDE

    @pre_load
    def strip_identity_fields(self, data: Any, **_: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for key in self._TRIMMED:
            if isinstance(cleaned.get(key), str):
                cleaned[key] = cleaned[key].strip()
        return cleaned


class RegisterSchema(_InputSchema):
    """Input payload for account registration."""

    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(
        required=True,
        load_only=True,
        validate=[
            validate.Length(min=PASSWORD_MIN_LENGTH, max=PASSWORD_MAX_LENGTH),
            validate_password_strength,
        ],
    )


class LoginSchema(_InputSchema):
    """Input payload for authenticating a user. No strength rules on login."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class RefreshTokenSchema(_InputSchema):
    """Input payload for the refresh endpoint."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class PublicUserSchema(Schema):
    """Client-safe user fields embedded in auth responses."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.String(required=True)
    avatar_url = fields.String(allow_none=True)


class AuthResultSchema(Schema):
    """Response payload for register/login/refresh."""

    user = fields.Nested(PublicUserSchema, required=True)
    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)


class CurrentUserSchema(PublicUserSchema):
    """Response payload for ``GET /auth/me``."""

    created_at = fields.DateTime(required=True)
