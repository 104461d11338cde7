"""Logging configuration."""

from __future__ import annotations

import logging

from flask import Flask


def configure_logging(app: Flask) -> None:
    """Configure stdlib logging from LOG_LEVEL.

    Store and migration modules log under the `super3.*` namespace.
    """

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger("super3").setLevel(level)

    # SQL echo is noise unless explicitly debugging queries.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    if app.config.get("TESTING"):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)
