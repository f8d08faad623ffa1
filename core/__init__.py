"""Core utilities for the Google Docs markdown MCP server."""

from core.errors import (
    APIError,
    AuthenticationError,
    CredentialsNotFoundError,
    MarkdownConversionError,
    MarkdownStructureError,
    ScopeMismatchError,
    ServiceConfigurationError,
    TokenRefreshError,
    ValidationError,
    WorkspaceMCPError,
)
from core.utils import TransientNetworkError, handle_http_errors

__all__ = [
    "APIError",
    "AuthenticationError",
    "CredentialsNotFoundError",
    "handle_http_errors",
    "MarkdownConversionError",
    "MarkdownStructureError",
    "ScopeMismatchError",
    "ServiceConfigurationError",
    "TokenRefreshError",
    "TransientNetworkError",
    "ValidationError",
    "WorkspaceMCPError",
]
