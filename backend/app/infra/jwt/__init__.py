"""PyJWT-backed token codec and its Flask wiring."""

from __future__ import annotations

from flask import Flask

from .pyjwt_token_provider import JWTTokenProvider, TokenCodecConfig

EXTENSION_KEY = "token_provider"


def init_app(app: Flask) -> None:
    """Build the codec from app config and store it in ``app.extensions``.

    :raises ValueError: When the configured secrets or lifetimes are invalid.
    """
    config = TokenCodecConfig.from_mapping(app.config)
    app.extensions[EXTENSION_KEY] = JWTTokenProvider(config)


__all__ = ["EXTENSION_KEY", "JWTTokenProvider", "TokenCodecConfig", "init_app"]
