"""Keycloak MCP server package.

To run the MCP stdio server:
    from keycloak_mcp.mcp_server import main

To use the dispatcher directly:
    from keycloak_mcp.core.dispatcher import CommandDispatcher

To use the Flask app:
    from keycloak_mcp.flask_app import create_app
"""
# Transports are not imported here; the core imports without the MCP SDK
# or Flask installed

__version__ = "1.0.6"
SERVER_NAME = "keycloak-mcp"
