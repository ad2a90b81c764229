"""Declarations of the supported commands.

The descriptors drive both argument validation and the JSON schemas
advertised to callers for discovery.
"""
from __future__ import annotations
from typing import Any, Optional

from .validators import CommandDescriptor, FieldKind, FieldSpec

CREATE_USER = "create-user"
DELETE_USER = "delete-user"
LIST_REALMS = "list-realms"
LIST_USERS = "list-users"
LIST_ROLES = "list-roles"
UPDATE_USER_ROLES = "update-user-roles"
RESET_USER_PASSWORD = "reset-user-password"


def _realm() -> FieldSpec:
    return FieldSpec("realm", FieldKind.IDENTIFIER, "Realm name", required=True)


COMMANDS: tuple[CommandDescriptor, ...] = (
    CommandDescriptor(
        name=CREATE_USER,
        description="Create a new user in a specific realm",
        fields=(
            _realm(),
            FieldSpec("username", FieldKind.STRING, "Username for the new user", required=True),
            FieldSpec("email", FieldKind.EMAIL, "Email address for the new user", required=True),
            FieldSpec("firstName", FieldKind.STRING, "First name of the user", required=True),
            FieldSpec("lastName", FieldKind.STRING, "Last name of the user", required=True),
            FieldSpec("enabled", FieldKind.BOOLEAN, "Whether the user is enabled", default=True),
            FieldSpec("emailVerified", FieldKind.BOOLEAN, "Whether the email is verified"),
            FieldSpec("credentials", FieldKind.CREDENTIALS, "User credentials"),
        ),
    ),
    CommandDescriptor(
        name=DELETE_USER,
        description="Delete a user from a specific realm",
        fields=(
            _realm(),
            FieldSpec("userId", FieldKind.IDENTIFIER, "User ID to delete", required=True),
        ),
    ),
    CommandDescriptor(
        name=LIST_REALMS,
        description="List all available realms",
    ),
    CommandDescriptor(
        name=LIST_USERS,
        description="List users in a specific realm",
        fields=(_realm(),),
    ),
    CommandDescriptor(
        name=LIST_ROLES,
        description="List all roles of a specific client in a specific realm",
        fields=(
            _realm(),
            FieldSpec("clientId", FieldKind.IDENTIFIER, "Client ID (clientId handle or internal id)", required=True),
        ),
    ),
    CommandDescriptor(
        name=UPDATE_USER_ROLES,
        description="Add and/or remove client roles for a user in a specific realm and client",
        fields=(
            _realm(),
            FieldSpec("userId", FieldKind.IDENTIFIER, "User ID", required=True),
            FieldSpec("clientId", FieldKind.IDENTIFIER, "Client ID (clientId handle or internal id)", required=True),
            FieldSpec("rolesToAdd", FieldKind.STRING_LIST, "Roles to add"),
            FieldSpec("rolesToRemove", FieldKind.STRING_LIST, "Roles to remove"),
        ),
        require_any=("rolesToAdd", "rolesToRemove"),
    ),
    CommandDescriptor(
        name=RESET_USER_PASSWORD,
        description="Reset or set a new password for a user in a specific realm",
        fields=(
            _realm(),
            FieldSpec("userId", FieldKind.IDENTIFIER, "User ID", required=True),
            FieldSpec("password", FieldKind.STRING, "New password", required=True),
            FieldSpec("temporary", FieldKind.BOOLEAN, "Whether the password is temporary", default=False),
        ),
    ),
)

_BY_NAME = {descriptor.name: descriptor for descriptor in COMMANDS}


def get_descriptor(name: str) -> Optional[CommandDescriptor]:
    return _BY_NAME.get(name)


def command_names() -> list[str]:
    return [descriptor.name for descriptor in COMMANDS]


def _property_schema(spec: FieldSpec) -> dict[str, Any]:
    if spec.kind is FieldKind.EMAIL:
        schema: dict[str, Any] = {"type": "string", "format": "email"}
    elif spec.kind in (FieldKind.STRING, FieldKind.IDENTIFIER):
        schema = {"type": "string"}
    elif spec.kind is FieldKind.BOOLEAN:
        schema = {"type": "boolean"}
    elif spec.kind is FieldKind.STRING_LIST:
        schema = {"type": "array", "items": {"type": "string"}}
    else:
        schema = {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {"type": "string", "description": "Credential type (e.g., 'password')"},
                    "value": {"type": "string", "description": "Credential value"},
                    "temporary": {"type": "boolean", "description": "Whether the credential is temporary"},
                },
                "required": ["type", "value"],
            },
        }
    schema["description"] = spec.description
    if spec.default is not None:
        schema["default"] = spec.default
    return schema


def input_schema(descriptor: CommandDescriptor) -> dict[str, Any]:
    """Build the JSON schema advertised for a command."""
    return {
        "type": "object",
        "properties": {spec.name: _property_schema(spec) for spec in descriptor.fields},
        "required": descriptor.required_fields,
    }
