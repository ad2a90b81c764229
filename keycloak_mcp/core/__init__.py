"""Core Business Logic Module

This module provides the command logic shared by every transport,
independent of MCP and Flask.

Module Structure:
    - keycloak/      : Low-level Keycloak Admin API client
    - session.py     : Admin session with lazy renewal
    - validators.py  : Argument validation against command descriptors
    - commands.py    : Command descriptors and discovery schemas
    - resolver.py    : clientId / internal id resolution
    - reconciler.py  : Client role add/remove reconciliation
    - dispatcher.py  : CommandDispatcher and ResponseEnvelope

Usage Pattern:
    from keycloak_mcp.config import load_settings
    from keycloak_mcp.core.dispatcher import CommandDispatcher

    dispatcher = CommandDispatcher.from_config(load_settings())
    envelope = dispatcher.dispatch("list-realms", {})
"""
