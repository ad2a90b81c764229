"""Keycloak-specific exceptions for error handling."""


class KeycloakError(Exception):
    """Base exception for all Keycloak operations."""
    pass


class KeycloakAPIError(KeycloakError):
    """HTTP error from Keycloak Admin API.

    Attributes:
        status_code: HTTP status code
        message: Error message from response
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class AuthenticationError(KeycloakError):
    """Admin credential exchange against the token endpoint failed."""
    pass


class NotFoundError(KeycloakError):
    """Named realm, client or user does not exist."""
    pass


class UserNotFoundError(NotFoundError):
    """User lookup failed - user id does not exist in realm."""
    pass


class ClientNotFoundError(NotFoundError):
    """Client does not exist in realm."""

    def __init__(self, realm: str, identifier: str):
        self.realm = realm
        self.identifier = identifier
        super().__init__(f"Client '{identifier}' not found in realm '{realm}'.")


class AmbiguousClientError(KeycloakError):
    """More than one client in the realm answers to the same identifier."""

    def __init__(self, realm: str, identifier: str, candidates: list[str]):
        self.realm = realm
        self.identifier = identifier
        self.candidates = candidates
        super().__init__(
            f"Client identifier '{identifier}' is ambiguous in realm '{realm}' "
            f"(matches: {', '.join(candidates)})."
        )
