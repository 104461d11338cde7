"""Flask application package."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from flask import Flask


def create_app(overrides: Mapping[str, Any] | None = None) -> Flask:
    """Application factory.

    Args:
        overrides: Config values applied after the environment config
            (tests use this to point DATABASE_URL at a temporary file).

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from super3.config import get_config
    from super3.db import init_db
    from super3.error_handlers import register_error_handlers
    from super3.logging_config import configure_logging
    from super3.migrations import missing_optional_columns
    from super3.routes.game import game_bp
    from super3.routes.health import health_bp
    from super3.routes.history import history_bp
    from super3.routes.stats import stats_bp
    from super3.routes.tickets import tickets_bp
    from super3.services.game_coordinator import build_coordinator
    from super3.services.store import EntityStore

    app = Flask(__name__)
    app.config.from_object(get_config())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    init_db(app)

    store = EntityStore(
        app.extensions["session_factory"],
        missing_optional_columns(app.extensions["engine"]),
    )
    coordinator = build_coordinator(store, app.config)
    coordinator.load_data()
    app.extensions["store"] = store
    app.extensions["coordinator"] = coordinator

    register_error_handlers(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(tickets_bp, url_prefix="/api")
    app.register_blueprint(game_bp, url_prefix="/api")
    app.register_blueprint(history_bp, url_prefix="/api")
    app.register_blueprint(stats_bp, url_prefix="/api")

    return app
