"""Keycloak client role catalog and role mapping operations."""
from __future__ import annotations
import logging

from .client import KeycloakClient, admin_path

logger = logging.getLogger(__name__)


class RoleService:
    """Service for reading client roles and managing user client-role mappings."""

    def __init__(self, client: KeycloakClient):
        """Initialize role service.

        Args:
            client: Authenticated Keycloak client
        """
        self.client = client

    def list_client_roles(self, realm: str, client_uuid: str) -> list[dict]:
        """Return the role catalog of a client.

        Args:
            realm: Realm name
            client_uuid: Canonical (internal) client id
        """
        path = admin_path("/admin/realms/{realm}/clients/{client_uuid}/roles", realm=realm, client_uuid=client_uuid)
        return self.client.get(path).json()

    def grant_client_roles(self, realm: str, user_id: str, client_uuid: str, roles: list[dict]) -> None:
        """Assign client roles to a user in one batched call.

        Args:
            realm: Realm name
            user_id: User id
            client_uuid: Canonical (internal) client id
            roles: Role representations, each with "id" and "name"
        """
        self.client.post(
            admin_path(
                "/admin/realms/{realm}/users/{user_id}/role-mappings/clients/{client_uuid}",
                realm=realm, user_id=user_id, client_uuid=client_uuid,
            ),
            json=roles,
        )
        logger.info(
            "[roles] Granted %s on client %s to user %s in realm '%s'",
            [r["name"] for r in roles], client_uuid, user_id, realm,
        )

    def revoke_client_roles(self, realm: str, user_id: str, client_uuid: str, roles: list[dict]) -> None:
        """Remove client roles from a user in one batched call."""
        self.client.delete(
            admin_path(
                "/admin/realms/{realm}/users/{user_id}/role-mappings/clients/{client_uuid}",
                realm=realm, user_id=user_id, client_uuid=client_uuid,
            ),
            json=roles,
        )
        logger.info(
            "[roles] Revoked %s on client %s from user %s in realm '%s'",
            [r["name"] for r in roles], client_uuid, user_id, realm,
        )
