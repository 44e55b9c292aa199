"""RaffleDesk: ticket sales, selling sessions and raffle draws for clubs."""

from __future__ import annotations

from dotenv import load_dotenv
from flask import Flask


def create_app(config_object: object | None = None) -> Flask:
    """Application factory.

    Args:
        config_object: Optional config class or object overriding the one
            selected by ``APP_ENV``.

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from raffledesk.config import get_config
    from raffledesk.db import init_db
    from raffledesk.error_handlers import register_error_handlers
    from raffledesk.logging_config import configure_logging
    from raffledesk.routes.entities import entities_bp
    from raffledesk.routes.exports import exports_bp
    from raffledesk.routes.health import health_bp
    from raffledesk.routes.raffles import raffles_bp
    from raffledesk.routes.sessions import sessions_bp
    from raffledesk.routes.tickets import tickets_bp

    app = Flask(__name__)
    app.config.from_object(config_object if config_object is not None else get_config())
    app.json.ensure_ascii = False  # type: ignore[attr-defined]

    configure_logging(app)
    init_db(app)
    register_error_handlers(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(entities_bp, url_prefix="/api/entities")
    app.register_blueprint(sessions_bp, url_prefix="/api/sessions")
    app.register_blueprint(tickets_bp, url_prefix="/api/tickets")
    app.register_blueprint(raffles_bp, url_prefix="/api/raffles")
    app.register_blueprint(exports_bp, url_prefix="/api/export")

    return app
