"""Command-line wrapper around the command dispatcher.

Runs a single command against the configured Keycloak without an MCP client:

    kcadmin list
    kcadmin run list-users --args '{"realm": "demo"}'
"""
from __future__ import annotations
import argparse
import json
import os
import sys
from typing import Optional

from keycloak_mcp.config import ConfigurationError, configure_logging, load_settings
from keycloak_mcp.core import commands
from keycloak_mcp.core.dispatcher import CommandDispatcher


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kcadmin", description="Keycloak administration commands")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (default: WARNING for the CLI)")

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("list", help="List available commands and their fields")

    run = sub.add_parser("run", help="Dispatch one command")
    run.add_argument("command", choices=commands.command_names())
    run.add_argument("--args", default="{}", help="JSON object with the command arguments")

    return parser


def _print_commands() -> None:
    for descriptor in commands.COMMANDS:
        required = ", ".join(descriptor.required_fields) or "-"
        optional = ", ".join(descriptor.optional_fields) or "-"
        print(f"{descriptor.name}: {descriptor.description}")
        print(f"    required: {required}")
        print(f"    optional: {optional}")


def main(argv: Optional[list[str]] = None, dispatcher: Optional[CommandDispatcher] = None) -> int:
    """Command-line entry point; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    if args.cmd == "list":
        _print_commands()
        return 0

    try:
        raw_args = json.loads(args.args)
    except json.JSONDecodeError as e:
        parser.error(f"--args is not valid JSON: {e}")

    configure_logging(args.log_level or os.environ.get("LOG_LEVEL") or "WARNING")
    if dispatcher is None:
        try:
            dispatcher = CommandDispatcher.from_config(load_settings())
        except ConfigurationError as e:
            print(f"[kcadmin] {e}", file=sys.stderr)
            return 1

    envelope = dispatcher.dispatch(args.command, raw_args)
    stream = sys.stderr if envelope.is_error else sys.stdout
    print(envelope.message, file=stream)
    return 1 if envelope.is_error else 0


if __name__ == "__main__":
    sys.exit(main())
