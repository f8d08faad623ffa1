# Make the auth directory a Python package
# Public API exports from canonical locations

from auth.config import WorkspaceConfig, get_config, get_credentials_directory, reset_config
from auth.credential_store import LocalDirectoryCredentialStore, get_credential_store, set_credential_store
from auth.service_decorator import require_google_service

__all__ = [
    "get_config",
    "get_credential_store",
    "get_credentials_directory",
    "LocalDirectoryCredentialStore",
    "require_google_service",
    "reset_config",
    "set_credential_store",
    "WorkspaceConfig",
]
