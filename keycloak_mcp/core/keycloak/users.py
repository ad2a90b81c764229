"""Keycloak user management operations."""
from __future__ import annotations
import logging
from typing import Any, Optional

from .client import KeycloakClient, admin_path
from .exceptions import KeycloakAPIError, KeycloakError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserService:
    """Service for managing Keycloak users."""

    def __init__(self, client: KeycloakClient):
        """Initialize user service.

        Args:
            client: Authenticated Keycloak client
        """
        self.client = client

    def get_user_by_username(self, realm: str, username: str) -> Optional[dict]:
        """Return the user representation that exactly matches the username.

        Args:
            realm: Realm name
            username: Username to search for

        Returns:
            User representation or None if not found
        """
        resp = self.client.get(
            admin_path("/admin/realms/{realm}/users", realm=realm), params={"username": username, "exact": "true"}
        )
        for user in resp.json():
            if user.get("username") == username:
                return user
        return None

    def create_user(
        self,
        realm: str,
        username: str,
        email: str,
        first_name: str,
        last_name: str,
        *,
        enabled: bool = True,
        email_verified: Optional[bool] = None,
        credentials: Optional[list[dict[str, Any]]] = None,
    ) -> str:
        """Create a user and return its id.

        Args:
            realm: Realm name
            username: Username
            email: Email address
            first_name: First name
            last_name: Last name
            enabled: Whether the account is enabled
            email_verified: Whether the email is verified (omitted when None)
            credentials: Initial credentials, e.g. [{"type": "password", "value": "..."}]

        Returns:
            Canonical id of the created user
        """
        payload: dict[str, Any] = {
            "username": username,
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "enabled": enabled,
        }
        if email_verified is not None:
            payload["emailVerified"] = email_verified
        if credentials:
            payload["credentials"] = credentials

        resp = self.client.post(admin_path("/admin/realms/{realm}/users", realm=realm), json=payload)

        # Keycloak answers 201 with the new resource in the Location header
        location = resp.headers.get("Location", "")
        user_id = location.rstrip("/").rsplit("/", 1)[-1] if location else ""
        if not user_id:
            user = self.get_user_by_username(realm, username)
            if not user:
                raise KeycloakError(f"User '{username}' was created but could not be read back from realm '{realm}'")
            user_id = user["id"]

        logger.info("[users] User '%s' created in realm '%s' (id=%s)", username, realm, user_id)
        return user_id

    def delete_user(self, realm: str, user_id: str) -> None:
        """Delete a user by id.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        try:
            self.client.delete(admin_path("/admin/realms/{realm}/users/{user_id}", realm=realm, user_id=user_id))
        except KeycloakAPIError as e:
            if e.status_code == 404:
                raise UserNotFoundError(f"User '{user_id}' not found in realm '{realm}'.") from e
            raise
        logger.info("[users] User '%s' deleted from realm '%s'", user_id, realm)

    def list_users(self, realm: str) -> list[dict]:
        """Return the user representations of a realm."""
        return self.client.get(admin_path("/admin/realms/{realm}/users", realm=realm)).json()

    def reset_password(self, realm: str, user_id: str, password: str, temporary: bool = False) -> None:
        """Set a new password credential for the user.

        Args:
            realm: Realm name
            user_id: User id
            password: New password
            temporary: Require a password change on next login

        Raises:
            UserNotFoundError: If the user does not exist
        """
        credential = {"type": "password", "value": password, "temporary": temporary}
        try:
            self.client.put(
                admin_path("/admin/realms/{realm}/users/{user_id}/reset-password", realm=realm, user_id=user_id),
                json=credential,
            )
        except KeycloakAPIError as e:
            if e.status_code == 404:
                raise UserNotFoundError(f"User '{user_id}' not found in realm '{realm}'.") from e
            raise
        logger.info("[users] Password reset for '%s' in realm '%s' (temporary=%s)", user_id, realm, temporary)
