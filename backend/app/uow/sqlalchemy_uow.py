"""Units of Work over the Flask-scoped SQLAlchemy session."""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from app.core.extensions import db
from app.repositories import CompanionRepository, UserRepository
from app.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Repositories bound to one session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.companions = CompanionRepository(session=session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """Read-write scope: commit on clean exit, roll back on any exception."""

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only scope that can never write.

    Pending ORM changes make any flush raise, :meth:`commit` always raises,
    and a transaction opened here is always rolled back on exit. On
    PostgreSQL/MySQL the transaction is also marked ``READ ONLY`` with the
    requested isolation level.

    Parameters
    ----------
    isolation_level:
        Isolation applied when this scope opens the transaction.
    enforce_db_readonly:
        Issue ``SET TRANSACTION READ ONLY`` where supported.

    Notes
    -----
    If the session is already inside a transaction (a test SAVEPOINT, or an
    enclosing read-write scope) the UoW joins it: the flush guard applies,
    but no ``SET TRANSACTION`` is sent and nothing is rolled back on exit.
    """

    _DIRECTIVE_DIALECTS = ("postgresql", "mysql", "mariadb")

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._own_txn: SessionTransaction | None = None
        self._guarded = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        try:
            self._own_txn = self.session.begin()
        except InvalidRequestError:
            # Already in a transaction; join it.
            self._own_txn = None

        event.listen(self.session, "before_flush", self._block_writes)
        self._guarded = True

        if self._own_txn is not None:
            self._apply_directives()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._own_txn is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                self._own_txn = None
        finally:
            if self._guarded:
                with suppress(InvalidRequestError):
                    event.remove(self.session, "before_flush", self._block_writes)
                self._guarded = False

    def commit(self) -> None:
        """
        :raises RuntimeError: Always; this scope never writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    def _apply_directives(self) -> None:
        if self.session.connection().dialect.name not in self._DIRECTIVE_DIALECTS:
            return
        try:
            if self.isolation_level:
                level = self.isolation_level.strip().upper()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning("Read-only directives rejected (%s); guard only.", exc)

    def _block_writes(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError(
                "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
            )
