"""Flask application factory and bootstrap.

This module provides the create_app() factory for serving the command
dispatcher over JSON/HTTP, next to the MCP stdio transport.
"""
from __future__ import annotations
import logging
import os
import sys
from typing import Optional

from flask import Flask

from keycloak_mcp.config import AppConfig, ConfigurationError, configure_logging, load_settings
from keycloak_mcp.core.dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None, dispatcher: Optional[CommandDispatcher] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Configuration (loaded from the environment when omitted)
        dispatcher: Pre-built dispatcher, mainly for tests
    """
    if dispatcher is None:
        cfg = cfg or load_settings()
        dispatcher = CommandDispatcher.from_config(cfg)

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.config["DISPATCHER"] = dispatcher
    app.json.sort_keys = False

    # Register blueprints
    from keycloak_mcp.api import commands, errors, health

    app.register_blueprint(health.bp)
    app.register_blueprint(commands.bp, url_prefix="/api/commands")

    # Register error handlers
    errors.register_error_handlers(app)

    logger.info("[flask_app] Command API registered at /api/commands")
    return app


def main() -> None:
    """Development server entry point (use a WSGI server in production)."""
    configure_logging()
    try:
        cfg = load_settings()
    except ConfigurationError as e:
        logger.error("[flask_app] %s", e)
        sys.exit(1)
    configure_logging(cfg.log_level)
    app = create_app(cfg)
    app.run(
        host=os.environ.get("HTTP_HOST", "127.0.0.1"),
        port=int(os.environ.get("HTTP_PORT", "5000")),
    )


if __name__ == "__main__":
    main()
