"""Keycloak realm and client discovery operations."""
from __future__ import annotations
from typing import Optional

from .client import KeycloakClient, admin_path
from .exceptions import KeycloakAPIError


class RealmService:
    """Service for reading Keycloak realms and their clients."""

    def __init__(self, client: KeycloakClient):
        """Initialize realm service.

        Args:
            client: Authenticated Keycloak client
        """
        self.client = client

    def list_realms(self) -> list[dict]:
        """Return every realm representation visible to the admin session."""
        return self.client.get("/admin/realms").json()

    def find_client_by_id(self, realm: str, client_uuid: str) -> Optional[dict]:
        """Return the client with the given internal id, or None when Keycloak answers 404.

        Args:
            realm: Realm name
            client_uuid: Canonical (internal) client id

        Raises:
            KeycloakAPIError: On any HTTP error other than 404
        """
        try:
            resp = self.client.get(
                admin_path("/admin/realms/{realm}/clients/{client_uuid}", realm=realm, client_uuid=client_uuid)
            )
        except KeycloakAPIError as e:
            if e.status_code == 404:
                return None
            raise
        body = resp.json()
        return body if isinstance(body, dict) and body else None

    def list_clients(self, realm: str) -> list[dict]:
        """Return every client registered in the realm.

        Args:
            realm: Realm name
        """
        return self.client.get(admin_path("/admin/realms/{realm}/clients", realm=realm)).json()
