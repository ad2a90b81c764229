"""Command dispatcher: validation, session, execution, response envelope.

Every invocation walks RECEIVED -> VALIDATED -> AUTHENTICATED -> EXECUTED ->
RESPONDED and ends in exactly one ``ResponseEnvelope``. Exceptions never
leave ``dispatch``.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from keycloak_mcp.config.settings import AppConfig
from keycloak_mcp.core import commands
from keycloak_mcp.core.keycloak import (
    AmbiguousClientError,
    AuthenticationError,
    KeycloakAPIError,
    KeycloakClient,
    NotFoundError,
    RealmService,
    RoleService,
    UserService,
)
from keycloak_mcp.core.reconciler import RoleReconciler
from keycloak_mcp.core.resolver import ClientResolver
from keycloak_mcp.core.session import SessionManager
from keycloak_mcp.core.validators import ValidationError, validate

logger = logging.getLogger(__name__)


class CommandState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    AUTHENTICATED = "authenticated"
    EXECUTED = "executed"
    RESPONDED = "responded"


@dataclass(frozen=True)
class ResponseEnvelope:
    succeeded: bool
    message: str
    is_error: bool = False

    @classmethod
    def ok(cls, message: str) -> "ResponseEnvelope":
        return cls(succeeded=True, message=message, is_error=False)

    @classmethod
    def error(cls, message: str) -> "ResponseEnvelope":
        return cls(succeeded=False, message=message, is_error=True)

    def to_dict(self) -> dict[str, Any]:
        return {"succeeded": self.succeeded, "message": self.message, "isError": self.is_error}


def _bullets(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items) if items else "- (none)"


class CommandDispatcher:
    """Run named commands against Keycloak on behalf of a remote caller."""

    def __init__(
        self,
        session_manager: SessionManager,
        realms: RealmService,
        users: UserService,
        roles: RoleService,
        resolver: Optional[ClientResolver] = None,
        reconciler: Optional[RoleReconciler] = None,
    ):
        self.session_manager = session_manager
        self.realms = realms
        self.users = users
        self.roles = roles
        self.resolver = resolver or ClientResolver(realms)
        self.reconciler = reconciler or RoleReconciler(roles)
        self._handlers: dict[str, Callable[[dict[str, Any]], str]] = {
            commands.CREATE_USER: self._create_user,
            commands.DELETE_USER: self._delete_user,
            commands.LIST_REALMS: self._list_realms,
            commands.LIST_USERS: self._list_users,
            commands.LIST_ROLES: self._list_roles,
            commands.UPDATE_USER_ROLES: self._update_user_roles,
            commands.RESET_USER_PASSWORD: self._reset_user_password,
        }

    @classmethod
    def from_config(cls, cfg: AppConfig) -> "CommandDispatcher":
        client = KeycloakClient(cfg.keycloak_url, timeout=cfg.request_timeout)
        return cls(
            SessionManager.from_config(cfg, client),
            RealmService(client),
            UserService(client),
            RoleService(client),
        )

    def dispatch(self, name: str, raw_args: Any = None) -> ResponseEnvelope:
        """Execute one command and return its envelope."""
        descriptor = commands.get_descriptor(name)
        handler = self._handlers.get(name)
        if descriptor is None or handler is None:
            return self._respond(name, ResponseEnvelope.error(f"Unknown command: {name}"))

        state = CommandState.RECEIVED
        try:
            args = validate(descriptor, raw_args)
            state = CommandState.VALIDATED

            self.session_manager.ensure_session()
            state = CommandState.AUTHENTICATED

            message = handler(args)
            state = CommandState.EXECUTED
            envelope = ResponseEnvelope.ok(message)
        except ValidationError as e:
            envelope = ResponseEnvelope.error(f"Invalid arguments: {e}")
        except AuthenticationError as e:
            envelope = ResponseEnvelope.error(str(e))
        except (NotFoundError, AmbiguousClientError) as e:
            envelope = ResponseEnvelope.error(str(e))
        except Exception as e:
            if isinstance(e, KeycloakAPIError) and e.status_code == 401:
                # Token revoked before our window ran out
                self.session_manager.invalidate()
            logger.error("[dispatch] %s failed after state=%s: %s", name, state.value, e, exc_info=True)
            envelope = ResponseEnvelope.error(f"Error: {e}")

        return self._respond(name, envelope)

    def _respond(self, name: str, envelope: ResponseEnvelope) -> ResponseEnvelope:
        logger.info(
            "[dispatch] %s -> %s (state=%s)",
            name,
            "error" if envelope.is_error else "ok",
            CommandState.RESPONDED.value,
        )
        return envelope

    # ─────────────────────────────────────────────────────────────────────
    # Command handlers
    # ─────────────────────────────────────────────────────────────────────
    def _create_user(self, args: dict[str, Any]) -> str:
        user_id = self.users.create_user(
            args["realm"],
            args["username"],
            args["email"],
            args["firstName"],
            args["lastName"],
            enabled=args["enabled"],
            email_verified=args.get("emailVerified"),
            credentials=args.get("credentials"),
        )
        return f"User created successfully. User ID: {user_id}"

    def _delete_user(self, args: dict[str, Any]) -> str:
        self.users.delete_user(args["realm"], args["userId"])
        return f"User {args['userId']} deleted successfully from realm {args['realm']}"

    def _list_realms(self, args: dict[str, Any]) -> str:
        names = [rep.get("realm", "") for rep in self.realms.list_realms()]
        return f"Available realms:\n{_bullets(names)}"

    def _list_users(self, args: dict[str, Any]) -> str:
        realm = args["realm"]
        users = [f"{u.get('username')} ({u.get('id')})" for u in self.users.list_users(realm)]
        return f"Users in realm {realm}:\n{_bullets(users)}"

    def _list_roles(self, args: dict[str, Any]) -> str:
        realm = args["realm"]
        client = self.resolver.resolve(realm, args["clientId"])
        names = [role.name for role in self.reconciler.fetch_catalog(realm, client)]
        return f"Roles for client '{client.handle}' in realm '{realm}':\n{_bullets(names)}"

    def _update_user_roles(self, args: dict[str, Any]) -> str:
        realm, user_id = args["realm"], args["userId"]
        client = self.resolver.resolve(realm, args["clientId"])
        result = self.reconciler.reconcile(
            realm,
            user_id,
            client,
            args.get("rolesToAdd", []),
            args.get("rolesToRemove", []),
        )
        lines = [
            f"Client roles updated for user {user_id} in realm {realm} (client: {client.handle}).",
            f"Added: {', '.join(result.added) or 'none'}",
            f"Removed: {', '.join(result.removed) or 'none'}",
        ]
        if result.warnings:
            lines.append(f"Warnings: {'; '.join(result.warnings)}")
        return "\n".join(lines)

    def _reset_user_password(self, args: dict[str, Any]) -> str:
        realm, user_id, temporary = args["realm"], args["userId"], args["temporary"]
        self.users.reset_password(realm, user_id, args["password"], temporary=temporary)
        if temporary:
            return (
                f"Password temporarily reset successfully for user {user_id} in realm {realm}. "
                "User will be required to change password on next login."
            )
        return f"Password reset successfully for user {user_id} in realm {realm}."
