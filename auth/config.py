"""
Runtime configuration for the Google Docs markdown MCP server.

All settings come from environment variables so the server can be configured
from an MCP client's launch block without any config file:

- WORKSPACE_MCP_CREDENTIALS_DIR: directory holding one token JSON per user
- USER_GOOGLE_EMAIL: default account when a tool call omits one
- GDOCS_MAX_BATCH_REQUESTS: ceiling on requests per batchUpdate call
- WORKSPACE_MCP_LOG_LEVEL: root log level for main.py
"""

import os

from core.errors import ServiceConfigurationError

# Application metadata
GOOGLE_WORKSPACE_MCP_APP_NAME = "GDocs Markdown MCP"
DEFAULT_CREDENTIALS_DIR = "~/.config/gdocs-markdown-mcp/credentials"

# The Docs API rejects very large batchUpdate bodies; 50 keeps each call well inside limits.
DEFAULT_MAX_BATCH_REQUESTS = 50


class WorkspaceConfig:
    """
    Environment-driven settings, read once per instance.

    Raises:
        ServiceConfigurationError: If a numeric setting is not a positive integer.
    """

    def __init__(self):
        self.credentials_dir = os.path.expanduser(os.getenv("WORKSPACE_MCP_CREDENTIALS_DIR", DEFAULT_CREDENTIALS_DIR))
        self.user_google_email = os.getenv("USER_GOOGLE_EMAIL") or None
        self.log_level = os.getenv("WORKSPACE_MCP_LOG_LEVEL", "INFO").upper()
        self.max_batch_requests = self._parse_positive_int(
            "GDOCS_MAX_BATCH_REQUESTS", os.getenv("GDOCS_MAX_BATCH_REQUESTS"), DEFAULT_MAX_BATCH_REQUESTS
        )

    @staticmethod
    def _parse_positive_int(name: str, raw: str | None, default: int) -> int:
        if raw is None or raw.strip() == "":
            return default
        try:
            value = int(raw)
        except ValueError as e:
            raise ServiceConfigurationError(f"{name} must be an integer, got '{raw}'") from e
        if value < 1:
            raise ServiceConfigurationError(f"{name} must be a positive integer, got {value}")
        return value

    def resolve_user_email(self, user_google_email: str | None) -> str | None:
        """Return the explicit email if given, else the configured default."""
        return user_google_email or self.user_google_email


_config: WorkspaceConfig | None = None


def get_config() -> WorkspaceConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = WorkspaceConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    global _config
    _config = None


def get_credentials_directory() -> str:
    """Get the credentials storage directory."""
    return get_config().credentials_dir
