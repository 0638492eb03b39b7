# backend/boxoffice/__init__.py
from __future__ import annotations

import logging

from flask import Flask

from .config import Config
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        # before init_app: the engine is bound to the URI at init time
        app.config.update(test_config)

    logging.getLogger("boxoffice").setLevel(app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.reservations import reservations_bp

    app.register_blueprint(reservations_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
