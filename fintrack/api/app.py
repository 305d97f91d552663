"""Flask application factory."""

from datetime import datetime
from typing import Callable, Optional

import structlog
from flask import Flask, g, jsonify
from sqlalchemy.engine import Engine
from werkzeug.exceptions import HTTPException

from fintrack.config import get_settings
from fintrack.models.finance import utcnow
from fintrack.orchestrator import create_app_components
from fintrack.services.storage import Database

from fintrack.api.routes import api


logger = structlog.get_logger(__name__)


def create_app(
    database_url: Optional[str] = None,
    *,
    engine_override: Optional[Engine] = None,
    clock: Callable[[], datetime] = utcnow,
) -> Flask:
    """
    Build the app on `database_url` (or the configured URL).

    Tests pass `engine_override` to share an in-memory SQLite engine,
    and `clock` to pin transaction dates.
    """
    settings = get_settings()

    app = Flask(__name__)
    app.secret_key = settings.auth.secret_key
    app.config["SESSION_COOKIE_NAME"] = settings.auth.session_cookie_name
    app.config["FINTRACK_USER_ID_KEY"] = settings.auth.user_id_key

    if engine_override is not None:
        database = Database(engine=engine_override)
    else:
        database = Database(
            database_url or settings.database.url,
            echo=settings.database.echo,
        )
    database.connect()

    components = create_app_components(database, clock=clock)
    app.extensions["fintrack"] = components
    app.register_blueprint(api)

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        if isinstance(error, HTTPException):
            return error
        logger.exception("unhandled_error", error=str(error))
        components.audit_logger.log_error(
            error_type=type(error).__name__,
            error_message=str(error),
            correlation_id=g.get("correlation_id"),
        )
        return jsonify({"message": "Internal server error", "error": str(error)}), 500

    logger.info("app_created", database=database.engine.url.render_as_string(hide_password=True))
    return app
