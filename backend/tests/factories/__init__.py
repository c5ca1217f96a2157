"""Factory Boy base classes bound to the per-test SQLAlchemy session."""

from __future__ import annotations

from factory.alchemy import SQLAlchemyModelFactory


class SQLAlchemySession:
    """Holder for the session the ``session`` fixture hands out each test."""

    _session = None

    @classmethod
    def set(cls, session) -> None:
        cls._session = session

    @classmethod
    def get(cls):
        """Return the active test session.

        :raises RuntimeError: When a factory runs outside the ``session`` fixture.
        """
        if cls._session is None:
            raise RuntimeError("No test session registered for factories.")
        return cls._session


class BaseFactory(SQLAlchemyModelFactory):
    """Persist with ``flush`` so rows get ids but stay inside the test SAVEPOINT."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"
