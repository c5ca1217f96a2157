"""Shared fixtures: app, SAVEPOINT-isolated session, HTTP client, auth wiring.

The database is in-memory SQLite created once per run; every test works
inside its own SAVEPOINT on one long-lived connection, so committed units of
work are still discarded at teardown.
"""

from __future__ import annotations

import os

import pytest
from app.core.extensions import db as _db
from app.factory import create_app
from app.infra.jwt import JWTTokenProvider, TokenCodecConfig
from app.services.auth import AuthPolicy, AuthService
from app.services.companions import CompanionService
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker
from tests.helpers.utils import FAST_HASHER


class TestConfig:
    """App config for the suite: distinct fixed secrets, cheap hashing, quiet logs."""

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_ACCESS_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    JWT_ACCESS_EXPIRES_SECONDS = 900
    JWT_REFRESH_EXPIRES_SECONDS = 604800
    COMPANION_BOOTSTRAP_POLICY = "best_effort"
    AUTH_ENFORCE_PASSWORD_VERSION = False
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    PROPAGATE_EXCEPTIONS = False
    USE_PROXYFIX = False
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create the schema once and keep an app context pushed for the run."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Single connection; ``:memory:`` SQLite lives as long as it does."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Per-test scoped session joined to a SAVEPOINT on :func:`connection`.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Installed as ``db.session`` for the duration of the test.

    Notes
    -----
    ``commit()``/``rollback()`` issued by units of work only release or roll
    back the session's SAVEPOINT; the outer transaction is rolled back at
    teardown.
    """
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, future=True))
    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _reopen_savepoint(sess, trans):  # pragma: no cover
        nonlocal nested
        if trans.nested and not trans._parent.nested:
            nested = connection.begin_nested()

    previous = db.session
    db.session.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = previous
        outer.rollback()


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional ``session``."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Auth wiring ---------------------------------------------------------------
@pytest.fixture()
def token_config() -> TokenCodecConfig:
    """Production lifetimes with throwaway secrets."""
    return TokenCodecConfig(access_secret="unit-access", refresh_secret="unit-refresh")


@pytest.fixture()
def token_provider(token_config) -> JWTTokenProvider:
    return JWTTokenProvider(token_config)


@pytest.fixture()
def auth_service(session, token_provider) -> AuthService:
    """AuthService backed by the transactional session and a real codec."""
    return AuthService(
        token_provider=token_provider,
        hasher=FAST_HASHER,
        companions=CompanionService(),
        policy=AuthPolicy(),
    )


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
