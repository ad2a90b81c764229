"""Configuration module for the Keycloak MCP server."""
from .settings import AppConfig, ConfigurationError, configure_logging, load_settings

__all__ = ["AppConfig", "ConfigurationError", "configure_logging", "load_settings"]
