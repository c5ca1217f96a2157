# app/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass

from app.core import errors as api_errors
from app.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    UnexpectedError,
)
from app.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Request-scoped data handed to services.

    :param request_id: Correlation id of the current request.
    """

    request_id: str | None = None


def translate_service_error(exc: Exception) -> Exception:
    """
    Map a :class:`ServiceError` onto the matching HTTP :class:`~app.core.errors.APIError`.

    The service error's ``code`` and message are kept as-is: 404 for missing
    entities, 409 for conflicts, 401 for refused credentials or tokens, 500
    for unexpected failures and 400 for anything else. Non-service exceptions
    are returned unchanged.

    :param exc: Exception raised by a service.
    :returns: Exception to raise or render.
    """
    if isinstance(exc, NotFoundError):
        return api_errors.NotFound(str(exc), code=exc.code)
    if isinstance(exc, ConflictError):
        return api_errors.Conflict(str(exc), code=exc.code)
    if isinstance(exc, AuthenticationError):
        return api_errors.Unauthorized(str(exc), code=exc.code)
    if isinstance(exc, UnexpectedError):
        return api_errors.APIError(message=str(exc), status_code=500, code=exc.code)
    if isinstance(exc, ServiceError):
        return api_errors.APIError(message=str(exc), status_code=400, code=exc.code)
    return exc


class BaseService:
    """
    Base class for application services.

    Services orchestrate repositories through a Unit of Work and never touch
    the Flask session directly, nor anything HTTP-specific.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Read-write Unit of Work (commits on clean exit)."""
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Read-only Unit of Work.

        :param isolation: Isolation level; defaults to :attr:`DEFAULT_READ_ISOLATION`.
        :type isolation: str | None
        :param enforce_db_readonly: Send ``SET TRANSACTION READ ONLY`` where supported.
        :type enforce_db_readonly: bool
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    def translate_exceptions(self, exc: Exception) -> Exception:
        """Service-bound alias of :func:`translate_service_error`."""
        return translate_service_error(exc)
