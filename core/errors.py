"""
Custom error types for the Google Docs markdown tools.

Every error raised on purpose by this package derives from `WorkspaceMCPError`,
so tool wrappers can tell deliberate, user-facing failures apart from
unexpected faults.
"""

# =============================================================================
# Base Exception Hierarchy
# =============================================================================


class WorkspaceMCPError(Exception):
    """Base exception for all Google Workspace MCP errors."""

    pass


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(WorkspaceMCPError):
    """Raised when authentication fails or credentials are invalid."""

    pass


class CredentialsNotFoundError(AuthenticationError):
    """Raised when no stored credentials exist for a user."""

    def __init__(self, user_email: str):
        super().__init__(
            f"No credentials found for user: {user_email}. "
            "Store an authorized token for this account in the credentials directory first."
        )
        self.user_email = user_email


class TokenRefreshError(AuthenticationError):
    """Raised when an expired token cannot be refreshed."""

    def __init__(self, user_email: str, reason: str):
        super().__init__(f"Failed to refresh token for {user_email}: {reason}. Please re-authenticate.")
        self.user_email = user_email
        self.reason = reason


class ScopeMismatchError(AuthenticationError):
    """Raised when credentials lack required scopes."""

    def __init__(self, required: list[str], available: list[str]):
        missing = sorted(set(required) - set(available))
        super().__init__(
            f"Missing required OAuth scopes: {', '.join(missing)}. "
            "Please re-authenticate with the required permissions."
        )
        self.required_scopes = required
        self.available_scopes = available
        self.missing_scopes = missing


# =============================================================================
# Configuration Errors
# =============================================================================


class ServiceConfigurationError(WorkspaceMCPError):
    """Raised when a service or setting is misconfigured."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(WorkspaceMCPError):
    """Raised when input validation fails."""

    pass


# =============================================================================
# API Errors
# =============================================================================


class APIError(WorkspaceMCPError):
    """Raised for general Google API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


# =============================================================================
# Markdown Conversion Errors
# =============================================================================


class MarkdownConversionError(WorkspaceMCPError):
    """Raised when markdown cannot be turned into Docs requests.

    Raised directly, this signals an internal fault during the conversion pass.
    The message always starts with "Failed to convert markdown:".
    """

    pass


class MarkdownStructureError(MarkdownConversionError):
    """Raised when the token stream itself is malformed (caller input).

    For example a list item that appears with no enclosing list.
    """

    pass
