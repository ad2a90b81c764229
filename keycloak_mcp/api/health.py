"""Health check endpoints."""
from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    """Basic liveness endpoint."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Readiness endpoint; reports whether an admin session is currently held.

    No credential exchange is triggered here.
    """
    dispatcher = current_app.config["DISPATCHER"]
    return jsonify({
        "status": "ready",
        "keycloak_url": dispatcher.session_manager.session.base_url,
        "authenticated": dispatcher.session_manager.is_valid(),
    })
