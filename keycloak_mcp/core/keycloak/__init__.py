"""Keycloak Admin API client library.

This package provides a small, testable interface to the Keycloak Admin API
operations the command dispatcher needs.

Architecture:
- client.py: HTTP client with bearer authentication and the admin token exchange
- realm.py: Realm listing and client lookup
- users.py: User lifecycle operations (create, delete, list, password reset)
- roles.py: Client role catalog and user role mappings
- exceptions.py: Typed exceptions for error handling

Usage:
    from keycloak_mcp.core.keycloak import KeycloakClient, UserService

    client = KeycloakClient("http://keycloak:8080")
    client.set_token(client.exchange_admin_token("admin", "password"))

    user_service = UserService(client)
    users = user_service.list_users("demo")
"""
from .client import KeycloakClient, REQUEST_TIMEOUT
from .exceptions import (
    KeycloakError,
    KeycloakAPIError,
    AuthenticationError,
    NotFoundError,
    UserNotFoundError,
    ClientNotFoundError,
    AmbiguousClientError,
)
from .realm import RealmService
from .users import UserService
from .roles import RoleService

__all__ = [
    # Client
    "KeycloakClient",
    "REQUEST_TIMEOUT",

    # Exceptions
    "KeycloakError",
    "KeycloakAPIError",
    "AuthenticationError",
    "NotFoundError",
    "UserNotFoundError",
    "ClientNotFoundError",
    "AmbiguousClientError",

    # Services
    "RealmService",
    "UserService",
    "RoleService",
]
