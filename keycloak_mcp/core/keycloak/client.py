"""Low-level HTTP client for Keycloak Admin API.

Handles the admin token exchange, bearer authentication, and HTTP operations.
Token lifetime is not tracked here; see ``keycloak_mcp.core.session``.
"""
from __future__ import annotations
import logging
from typing import Optional, Dict, Any
from urllib.parse import quote

import requests

from .exceptions import KeycloakAPIError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10


def quote_segment(value: str) -> str:
    """Encode a caller-supplied value as exactly one URL path segment.

    Raises:
        ValueError: For "." and "..", which no encoding keeps from being
            collapsed as dot segments
    """
    if value in (".", ".."):
        raise ValueError(f"Invalid path segment: {value!r}")
    return quote(str(value), safe="")


def admin_path(template: str, **params: str) -> str:
    """Fill an Admin API path template with escaped path parameters.

    Example:
        admin_path("/admin/realms/{realm}/users/{user_id}", realm="demo", user_id=uid)
    """
    return template.format(**{name: quote_segment(value) for name, value in params.items()})


class KeycloakClient:
    """HTTP client for Keycloak Admin API.

    Usage:
        client = KeycloakClient("http://keycloak:8080")
        token = client.exchange_admin_token("admin", "password")
        client.set_token(token)
        response = client.get("/admin/realms/demo/users")
    """

    def __init__(self, base_url: str, timeout: float = REQUEST_TIMEOUT):
        """Initialize Keycloak client.

        Args:
            base_url: Keycloak base URL (trailing slashes are stripped)
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token: Optional[str] = None

    @property
    def has_token(self) -> bool:
        return self._token is not None

    def set_token(self, token: str) -> None:
        self._token = token

    def clear_token(self) -> None:
        self._token = None

    def exchange_admin_token(
        self,
        username: str,
        password: str,
        realm: str = "master",
        client_id: str = "admin-cli",
    ) -> str:
        """Obtain an admin access token via direct access grant.

        Args:
            username: Admin username
            password: Admin password
            realm: Authentication realm (default: master)
            client_id: Public client used for the grant (default: admin-cli)

        Returns:
            Access token

        Raises:
            KeycloakAPIError: If the token endpoint rejects the request
        """
        url = f"{self.base_url}/realms/{quote_segment(realm)}/protocol/openid-connect/token"
        data = {
            "grant_type": "password",
            "client_id": client_id,
            "username": username,
            "password": password,
        }
        resp = requests.post(url, data=data, timeout=self.timeout)
        if resp.status_code != 200:
            raise KeycloakAPIError(resp.status_code, resp.text, url)
        try:
            return resp.json()["access_token"]
        except (ValueError, KeyError, TypeError):
            raise KeycloakAPIError(resp.status_code, "Token response has no access_token", url)

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute GET request with bearer authentication.

        Args:
            path: API endpoint path (e.g., "/admin/realms/demo/users")
            params: Query parameters
            **kwargs: Additional arguments for requests.get

        Returns:
            Response object

        Raises:
            KeycloakAPIError: On HTTP error
        """
        resp = requests.get(
            self._url(path), params=params, headers=self._headers(kwargs), timeout=self.timeout, **kwargs
        )
        self._handle_error(resp)
        return resp

    def post(self, path: str, json: Any = None, **kwargs) -> requests.Response:
        """Execute POST request with bearer authentication.

        Raises:
            KeycloakAPIError: On HTTP error
        """
        resp = requests.post(
            self._url(path), json=json, headers=self._headers(kwargs), timeout=self.timeout, **kwargs
        )
        self._handle_error(resp)
        return resp

    def put(self, path: str, json: Any = None, **kwargs) -> requests.Response:
        """Execute PUT request with bearer authentication.

        Raises:
            KeycloakAPIError: On HTTP error
        """
        resp = requests.put(
            self._url(path), json=json, headers=self._headers(kwargs), timeout=self.timeout, **kwargs
        )
        self._handle_error(resp)
        return resp

    def delete(self, path: str, json: Any = None, **kwargs) -> requests.Response:
        """Execute DELETE request with bearer authentication.

        Keycloak takes a JSON body on some DELETE endpoints (role mappings).

        Raises:
            KeycloakAPIError: On HTTP error
        """
        resp = requests.delete(
            self._url(path), json=json, headers=self._headers(kwargs), timeout=self.timeout, **kwargs
        )
        self._handle_error(resp)
        return resp

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _headers(self, kwargs: Dict[str, Any]) -> Dict[str, str]:
        if self._token is None:
            raise KeycloakAPIError(401, "Not authenticated - no admin session established", self.base_url)
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Raises:
            KeycloakAPIError: If response status indicates error
        """
        if resp.status_code >= 400:
            logger.debug("[keycloak] %s -> %s", resp.url, resp.status_code)
            raise KeycloakAPIError(resp.status_code, resp.text, resp.url)
