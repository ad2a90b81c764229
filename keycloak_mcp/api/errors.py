"""Error handlers for the HTTP surface.

All errors are rendered as JSON envelopes so HTTP callers parse one shape.
"""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


def _error(status: int, error: str, message: str):
    return jsonify({"succeeded": False, "isError": True, "error": error, "message": message}), status


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return _error(400, "Bad Request", getattr(error, "description", None) or str(error))

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return _error(404, "Not Found", "Resource not found")

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error(405, "Method Not Allowed", "Method not allowed for this endpoint")

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        if isinstance(error, HTTPException):
            return _error(error.code or 500, error.name, error.description or "")

        logger.error("Unhandled exception: %s", error, exc_info=True)
        return _error(500, "Internal Server Error", "An unexpected error occurred")
