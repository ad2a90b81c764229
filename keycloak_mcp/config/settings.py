"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_KEYCLOAK_URL = "http://localhost:8080"
DEFAULT_SESSION_WINDOW_SECONDS = 300
DEFAULT_REQUEST_TIMEOUT = 10.0
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(RuntimeError):
    """Startup configuration is invalid; the process must not serve commands."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Invalid configuration: " + "; ".join(problems))


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("[settings] Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("[settings] Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        return os.getenv(env_var)

    return None


@dataclass(frozen=True)
class AppConfig:
    """Application configuration container.

    Construction validates and normalises every field, so an ``AppConfig``
    instance is always safe to use.
    """
    keycloak_url: str = DEFAULT_KEYCLOAK_URL
    keycloak_admin: str = "admin"
    keycloak_admin_password: str = "admin"
    keycloak_admin_realm: str = "master"
    keycloak_admin_client_id: str = "admin-cli"
    session_window_seconds: int = DEFAULT_SESSION_WINDOW_SECONDS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        problems: list[str] = []

        url = (self.keycloak_url or "").strip()
        if not url:
            problems.append("Keycloak URL cannot be empty")
        else:
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                problems.append("Keycloak URL must be a valid URL starting with http:// or https://")
        object.__setattr__(self, "keycloak_url", url.rstrip("/"))

        for attr, label in (
            ("keycloak_admin", "Admin username"),
            ("keycloak_admin_password", "Admin password"),
            ("keycloak_admin_realm", "Admin realm"),
            ("keycloak_admin_client_id", "Admin client id"),
        ):
            value = (getattr(self, attr) or "").strip()
            if not value:
                problems.append(f"{label} cannot be empty")
            object.__setattr__(self, attr, value)

        if self.session_window_seconds <= 0:
            problems.append("Session window must be a positive number of seconds")
        if self.request_timeout <= 0:
            problems.append("Request timeout must be a positive number of seconds")
        if self.log_level not in LOG_LEVELS:
            problems.append(f"Log level must be one of {', '.join(LOG_LEVELS)}")

        if problems:
            raise ConfigurationError(problems)


def _read_number(var_name: str, default, cast, problems: list[str]):
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        problems.append(f"{var_name} must be a number (got {raw!r})")
        return default


def load_settings() -> AppConfig:
    """Load application settings from the environment and /run/secrets.

    Raises:
        ConfigurationError: If any value is missing or malformed
    """
    problems: list[str] = []

    keycloak_url = os.environ.get("KEYCLOAK_URL") or DEFAULT_KEYCLOAK_URL
    keycloak_admin = os.environ.get("KEYCLOAK_ADMIN") or "admin"
    keycloak_admin_password = _load_secret_from_file(
        "keycloak_admin_password",
        "KEYCLOAK_ADMIN_PASSWORD",
    ) or "admin"
    keycloak_admin_realm = os.environ.get("KEYCLOAK_ADMIN_REALM") or "master"
    keycloak_admin_client_id = os.environ.get("KEYCLOAK_ADMIN_CLIENT_ID") or "admin-cli"

    session_window_seconds = _read_number(
        "KEYCLOAK_SESSION_WINDOW_SECONDS", DEFAULT_SESSION_WINDOW_SECONDS, int, problems
    )
    request_timeout = _read_number("KEYCLOAK_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float, problems)
    log_level = (os.environ.get("LOG_LEVEL") or "INFO").strip().upper()

    try:
        cfg = AppConfig(
            keycloak_url=keycloak_url,
            keycloak_admin=keycloak_admin,
            keycloak_admin_password=keycloak_admin_password,
            keycloak_admin_realm=keycloak_admin_realm,
            keycloak_admin_client_id=keycloak_admin_client_id,
            session_window_seconds=session_window_seconds,
            request_timeout=request_timeout,
            log_level=log_level,
        )
    except ConfigurationError as e:
        raise ConfigurationError(problems + e.problems) from None

    if problems:
        raise ConfigurationError(problems)

    logger.info(
        "[settings] keycloak_url=%s; admin=%s; password=%s; session_window=%ss",
        cfg.keycloak_url,
        cfg.keycloak_admin,
        "***",
        cfg.session_window_seconds,
    )
    return cfg


def configure_logging(level: str | None = None) -> None:
    """Send log records to stderr; stdout is reserved for the MCP protocol."""
    name = (level or os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # basicConfig is a no-op once handlers exist; a later call still applies the level
    logging.getLogger().setLevel(getattr(logging, name, logging.INFO))
