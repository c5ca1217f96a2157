"""RFC 7807 ``application/problem+json`` error responses for the API.

Every error leaving the app carries ``status``, a stable snake_case ``code``,
a client-safe ``detail`` and the request correlation id. Service-layer
failures are translated by :func:`app.services._shared.base.translate_service_error`;
database and unexpected exceptions never leak their internals.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from app.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Codes for bare werkzeug HTTP errors (unknown route, wrong method, ...)
HTTP_STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    500: "internal_server_error",
    503: "service_unavailable",
}


def problem_response(
    status: int,
    code: str,
    detail: str,
    details: dict[str, Any] | None = None,
) -> tuple[Response, int]:
    """Build a problem+json response tuple.

    :param status: HTTP status code.
    :param code: Machine-readable error code.
    :param detail: Human-readable message, safe to show to clients.
    :param details: Optional structured payload (validation messages).
    :returns: ``(response, status)`` ready to return from a handler.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path if has_request_context() else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    resp = jsonify(body)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, status


class APIError(Exception):
    """
    HTTP-facing error raised by views or produced from service errors.

    Parameters
    ----------
    message : str
        Client-safe description, rendered as ``detail``.
    status_code : int, optional
        HTTP status. Defaults to ``400``.
    code : str, optional
        Stable machine-readable identifier. Defaults to ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Extra structured payload.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}


class NotFound(APIError):
    def __init__(self, message: str = "Resource not found", *, code: str = "not_found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code=code)


class Conflict(APIError):
    def __init__(self, message: str = "Conflict", *, code: str = "conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code=code)


class Unauthorized(APIError):
    """401 for missing or refused credentials and tokens."""

    def __init__(self, message: str = "Unauthorized", *, code: str = "unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code=code)


def _render_api_error(err: APIError) -> tuple[Response, int]:
    if err.status_code >= 500:
        log.error("API error %s (%s)", err.code, err.status_code)
    else:
        log.warning("API error %s (%s): %s", err.code, err.status_code, err.message)
    return problem_response(err.status_code, err.code, err.message, err.details or None)


def init_app(app: Flask) -> None:
    """
    Register the problem+json handlers.

    4xx outcomes are logged as warnings without tracebacks; 5xx outcomes are
    logged as errors with ``exc_info`` when an exception is involved.
    """
    from app.services._shared.base import translate_service_error
    from app.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return _render_api_error(err)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = translate_service_error(err)
        if isinstance(translated, APIError):
            return _render_api_error(translated)
        raise translated

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = HTTP_STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or HTTPStatus(status).phrase).strip()
        log.warning("HTTP %s on %s", status, request.path)
        return problem_response(status, code, detail)

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        log.warning("Request validation failed on %s", request.path)
        return problem_response(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            {"errors": err.normalized_messages()},
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        log.error("Unhandled integrity error", exc_info=err)
        return problem_response(HTTPStatus.CONFLICT, "conflict", "Resource conflict")

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error("Database unavailable", exc_info=err)
        return problem_response(
            HTTPStatus.SERVICE_UNAVAILABLE,
            "service_unavailable",
            "Service temporarily unavailable",
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        log.error("Unhandled exception", exc_info=err)
        return problem_response(
            HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"
        )
