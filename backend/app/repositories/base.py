"""Generic SQLAlchemy 2.x repository base.

Repositories are persistence-only: they read and stage rows on the session
they were given and never commit or roll back; the Unit of Work owns the
transaction.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from app.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Lookups and inserts for one mapped class.

    Subclasses set ``model`` and may override ``_filterable_fields`` (the
    keys accepted by :meth:`find_one` / :meth:`exists`) and
    ``_default_eagerload``.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """Injected session, or the Flask-scoped one when none was given."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Hooks ------------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _where(self, stmt: Select[Any], filters: Mapping[str, Any]) -> Select[Any]:
        """Add ``column == value`` clauses for whitelisted keys.

        :raises KeyError: For a key outside :meth:`_filterable_fields`.
        """
        allowed = self._filterable_fields()
        for key, value in filters.items():
            stmt = stmt.where(allowed[key] == value)
        return stmt

    # ------------------------------ Reads ------------------------------

    def get(self, entity_id: Any) -> E | None:
        """Fetch by primary key (``model.id``).

        :param entity_id: Primary-key value.
        :returns: Entity or ``None``.
        """
        stmt = self._default_eagerload(select(self.model).where(self.model.id == entity_id))  # type: ignore[attr-defined]
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def find_one(self, **filters: Any) -> E | None:
        """First entity matching all equality ``filters``, or ``None``."""
        stmt = self._default_eagerload(self._where(select(self.model), filters))
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def exists(self, **filters: Any) -> bool:
        stmt = self._where(select(func.count()).select_from(self.model), filters)
        return bool(self.session.execute(stmt).scalar())

    # ------------------------------ Writes ------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is populated.

        :raises sqlalchemy.exc.IntegrityError: On constraint violations.
        """
        self.session.add(instance)
        self.flush()
        return instance

    def flush(self) -> None:
        self.session.flush()
