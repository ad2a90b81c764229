"""Keycloak MCP server: Keycloak administration tools over stdio.

Each supported command is advertised as one MCP tool whose input schema is
generated from its descriptor. Tool calls are handed to the
``CommandDispatcher`` on a worker thread, and the resulting envelope becomes
the ``CallToolResult``.

Transport: stdio (stdout carries protocol frames; logs go to stderr)
"""
from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from keycloak_mcp import SERVER_NAME, __version__
from keycloak_mcp.config import ConfigurationError, configure_logging, load_settings
from keycloak_mcp.core import commands
from keycloak_mcp.core.dispatcher import CommandDispatcher, ResponseEnvelope

logger = logging.getLogger(__name__)


def build_tools() -> list[Tool]:
    return [
        Tool(
            name=descriptor.name,
            description=descriptor.description,
            inputSchema=commands.input_schema(descriptor),
        )
        for descriptor in commands.COMMANDS
    ]


def envelope_to_result(envelope: ResponseEnvelope) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=envelope.message)],
        isError=envelope.is_error,
    )


async def run_tool(dispatcher: CommandDispatcher, name: str, arguments: dict[str, Any] | None) -> CallToolResult:
    # The dispatcher is blocking (requests); keep the event loop responsive
    envelope = await asyncio.to_thread(dispatcher.dispatch, name, arguments)
    return envelope_to_result(envelope)


def create_server(dispatcher: CommandDispatcher) -> Server:
    """Build the MCP server around an injected dispatcher."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return build_tools()

    # The dispatcher reports every violation itself; skip the SDK's schema check
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> CallToolResult:
        return await run_tool(dispatcher, name, arguments)

    return server


async def serve(dispatcher: CommandDispatcher) -> None:
    server = create_server(dispatcher)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("[START] %s server v%s running on stdio", SERVER_NAME, __version__)
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Console entry point: validate configuration, then serve on stdio."""
    configure_logging()
    try:
        cfg = load_settings()
    except ConfigurationError as e:
        logger.error("[START] %s", e)
        sys.exit(1)
    configure_logging(cfg.log_level)

    dispatcher = CommandDispatcher.from_config(cfg)
    try:
        asyncio.run(serve(dispatcher))
    except KeyboardInterrupt:
        logger.info("[STOP] Interrupted, shutting down")


if __name__ == "__main__":
    main()
