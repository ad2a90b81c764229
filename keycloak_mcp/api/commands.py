"""JSON-over-HTTP command endpoints.

Routes:
    GET  /api/commands         - command descriptors with their input schemas
    POST /api/commands/<name>  - dispatch one command, body is the argument object

Every dispatched call answers 200 with the envelope; callers inspect
``isError``. Only a body that is not a JSON object is rejected with 400.
"""
from __future__ import annotations
import logging

from flask import Blueprint, abort, current_app, jsonify, request

from keycloak_mcp.core import commands

logger = logging.getLogger(__name__)

bp = Blueprint("commands", __name__)


@bp.get("")
def list_commands():
    return jsonify({
        "commands": [
            {
                "name": descriptor.name,
                "description": descriptor.description,
                "inputSchema": commands.input_schema(descriptor),
            }
            for descriptor in commands.COMMANDS
        ]
    })


@bp.post("/<name>")
def run_command(name: str):
    # Chunked uploads carry no Content-Length; decide on the bytes actually sent
    if request.get_data().strip():
        args = request.get_json(silent=True)
        if not isinstance(args, dict):
            abort(400, description="Request body must be a JSON object")
    else:
        args = {}

    dispatcher = current_app.config["DISPATCHER"]
    envelope = dispatcher.dispatch(name, args)
    logger.debug("[http] %s from %s -> isError=%s", name, request.remote_addr, envelope.is_error)
    return jsonify(envelope.to_dict())
