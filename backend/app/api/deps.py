"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from app.core.errors import Unauthorized
from app.infra.jwt import EXTENSION_KEY as TOKEN_PROVIDER_KEY
from app.infra.security import WerkzeugPasswordHasher
from app.services._shared.base import ServiceContext
from app.services._shared.ports import TokenProvider
from app.services.auth import AuthPolicy, AuthService
from app.services.companions import CompanionService

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


def service_context() -> ServiceContext:
    """Build a request-scoped :class:`ServiceContext`."""

    return ServiceContext(request_id=getattr(g, "request_id", None))


def get_auth_service() -> AuthService:
    """Wire an :class:`AuthService` from the current application's config."""

    ctx = service_context()
    provider = cast(TokenProvider, current_app.extensions[TOKEN_PROVIDER_KEY])
    return AuthService(
        token_provider=provider,
        hasher=WerkzeugPasswordHasher(method=current_app.config.get("PASSWORD_HASH_METHOD")),
        companions=CompanionService(ctx=ctx),
        policy=AuthPolicy.from_mapping(current_app.config),
        ctx=ctx,
    )


def bearer_token() -> str | None:
    """Return the token from ``Authorization: Bearer <token>``, if present."""

    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX) :].strip()
    return token or None


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token.

    The verified claims are stored on ``g.auth`` (:class:`TokenPayload`).
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = bearer_token()
        if token is None:
            raise Unauthorized("No token provided", code="missing_token")
        g.auth = get_auth_service().authenticate_access_token(token)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def success(data: Any = None, *, status: int = 200, message: str | None = None) -> Response:
    """Wrap ``data`` in the ``{"status": "success", ...}`` envelope."""

    body: dict[str, Any] = {"status": "success"}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return json_response(body, status=status)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
