"""Liveness/readiness endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import success, timing
from app.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report process liveness and database reachability.

    Always answers ``200`` so load balancers can tell a reachable process
    from a dead one; ``data.database`` carries the store status.
    """

    database = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        database = "unavailable"
    return success(
        {
            "service": "travel-life-auth",
            "database": database,
            "version": current_app.config.get("APP_VERSION", "dev"),
        }
    )
