"""Logging setup for the app and its services."""

from __future__ import annotations

import logging

from flask import Flask

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(app: Flask) -> None:
    """Apply ``LOG_LEVEL`` to the root and ``raffledesk`` loggers.

    Services log through ``logging.getLogger(__name__)`` so everything under
    ``raffledesk.*`` follows the configured level.
    """

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("raffledesk").setLevel(level)

    # SQL echo is far too chatty below WARNING.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    if app.config.get("TESTING"):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    app.logger.debug("Logging configured level=%s", level_name)
