"""Tiny helpers shared across test modules."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import UTC, datetime

from app.infra.security import WerkzeugPasswordHasher

# Cheap hashing for tests; production uses the werkzeug default.
FAST_HASHER = WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


@contextmanager
def not_raises(exception: type[BaseException]):
    """Context manager asserting that an exception is *not* raised.

    Parameters
    ----------
    exception: type[BaseException]
        Exception type that should not be raised within the context.

    Yields
    ------
    None
        Control enters the managed block when the exception is absent.
    """
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Did raise {exception}: {exc}") from exc


class FrozenClock:
    """Callable clock returning a settable instant (UTC)."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def set_timestamp(self, ts: float) -> None:
        self.now = datetime.fromtimestamp(ts, tz=UTC)


def assert_problem(resp, *, status: int, code: str) -> dict:
    """Assert an RFC 7807 response and return its body."""
    assert resp.status_code == status
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["status"] == status
    assert body["code"] == code
    assert body["request_id"]
    return body
