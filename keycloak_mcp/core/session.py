"""Admin session management with lazy renewal.

One ``SessionManager`` owns the authenticated session to Keycloak for the
whole process. Commands call ``ensure_session()`` before touching the Admin
API; the manager re-runs the password grant only when its own conservative
expiry window has passed.
"""
from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from keycloak_mcp.config.settings import AppConfig, DEFAULT_SESSION_WINDOW_SECONDS
from keycloak_mcp.core.keycloak import AuthenticationError, KeycloakClient

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """Mutable session state; never persisted."""
    base_url: str
    admin_username: str
    admin_password: str
    admin_realm: str = "master"
    client_id: str = "admin-cli"
    is_authenticated: bool = False
    expires_at: Optional[datetime] = None


class SessionManager:
    """Keeps a live admin token installed on a ``KeycloakClient``.

    The tracked expiry is a fixed window that ends before the real token
    lifetime. Renewal is serialised by a lock; concurrent commands on
    an expired session share a single credential exchange.
    """

    def __init__(
        self,
        client: KeycloakClient,
        session: Session,
        window_seconds: int = DEFAULT_SESSION_WINDOW_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.client = client
        self.session = session
        self.window = timedelta(seconds=window_seconds)
        self._clock = clock
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: AppConfig, client: Optional[KeycloakClient] = None) -> "SessionManager":
        client = client or KeycloakClient(cfg.keycloak_url, timeout=cfg.request_timeout)
        session = Session(
            base_url=cfg.keycloak_url,
            admin_username=cfg.keycloak_admin,
            admin_password=cfg.keycloak_admin_password,
            admin_realm=cfg.keycloak_admin_realm,
            client_id=cfg.keycloak_admin_client_id,
        )
        return cls(client, session, window_seconds=cfg.session_window_seconds)

    def is_valid(self) -> bool:
        s = self.session
        return s.is_authenticated and s.expires_at is not None and self._clock() < s.expires_at

    def ensure_session(self) -> None:
        """Authenticate unless the tracked session is still inside its window.

        Raises:
            AuthenticationError: If the credential exchange fails
        """
        if self.is_valid():
            return

        with self._lock:
            # Another thread may have renewed while we waited
            if self.is_valid():
                return
            self._authenticate()

    def invalidate(self) -> None:
        """Force the next ``ensure_session`` call to re-authenticate."""
        with self._lock:
            self._mark_unauthenticated()

    def _authenticate(self) -> None:
        s = self.session
        now = self._clock()
        try:
            token = self.client.exchange_admin_token(
                s.admin_username,
                s.admin_password,
                realm=s.admin_realm,
                client_id=s.client_id,
            )
        except Exception as e:
            self._mark_unauthenticated()
            logger.warning("[session] Admin credential exchange failed: %s", e)
            raise AuthenticationError(f"Failed to authenticate with Keycloak: {e}") from e

        self.client.set_token(token)
        s.is_authenticated = True
        s.expires_at = now + self.window
        logger.info("[session] Authenticated as '%s' on %s (valid until %s)", s.admin_username, s.base_url, s.expires_at.isoformat())

    def _mark_unauthenticated(self) -> None:
        self.session.is_authenticated = False
        self.session.expires_at = None
        self.client.clear_token()
