"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from app.core.config import BaseConfig, get_config, validate_config
from app.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config class/object or import string; ``None`` picks one from ``APP_ENV``.
    :param instance_relative_config: Load ``instance/<instance_config_filename>`` overrides.
    :param instance_config_filename: File name of the optional instance override.
    :returns: Configured application.
    :raises RuntimeError: Placeholder token secrets outside debug/testing.
    :raises ValueError: Invalid token secrets or lifetimes.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    validate_config(app.config)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from app.core import proxy

    proxy.init_app(app)

    # DB, migrations and the token codec
    from app.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from app.core import cors

    cors.init_app(app)

    from app.api import init_app as init_api

    init_api(app)

    from app.core import errors

    errors.init_app(app)

    return app
