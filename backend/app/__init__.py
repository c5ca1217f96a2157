"""Expose the application factory at package level.

Provide convenient access to :func:`app.factory.create_app` so callers can
``from app import create_app`` (e.g. ``gunicorn 'app:create_app()'``).
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
