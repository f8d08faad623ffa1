"""
File-backed credential storage.

Each authorized account is kept as `<email>.json` inside the configured
credentials directory, in the same shape `google.oauth2.credentials.Credentials`
serializes to. Tokens are written back after a refresh.
"""

import json
import logging
import os
from datetime import datetime

from google.oauth2.credentials import Credentials

from auth.config import get_credentials_directory

logger = logging.getLogger(__name__)


class LocalDirectoryCredentialStore:
    """Credential store that keeps one JSON token file per user."""

    def __init__(self, base_dir: str | None = None):
        self.base_dir: str = base_dir or get_credentials_directory()
        logger.debug(f"Credential store using base_dir: {self.base_dir}")

    def credential_path(self, user_email: str) -> str:
        return os.path.join(self.base_dir, f"{user_email}.json")

    def get_credential(self, user_email: str) -> Credentials | None:
        """Load credentials for a user, or None when no usable file exists."""
        path = self.credential_path(user_email)
        if not os.path.exists(path):
            logger.debug(f"No credential file for {user_email} at {path}")
            return None

        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read credentials for {user_email} from {path}: {e}")
            return None

        expiry = None
        if data.get("expiry"):
            try:
                # google-auth compares expiry against naive UTC datetimes
                expiry = datetime.fromisoformat(data["expiry"]).replace(tzinfo=None)
            except (ValueError, TypeError) as e:
                logger.warning(f"Ignoring unparseable expiry for {user_email}: {e}")

        return Credentials(
            token=data.get("token"),
            refresh_token=data.get("refresh_token"),
            token_uri=data.get("token_uri"),
            client_id=data.get("client_id"),
            client_secret=data.get("client_secret"),
            scopes=data.get("scopes"),
            expiry=expiry,
        )

    def store_credential(self, user_email: str, credentials: Credentials) -> bool:
        """Persist credentials for a user; returns False if the write failed."""
        os.makedirs(self.base_dir, exist_ok=True)
        path = self.credential_path(user_email)
        data = {
            "token": credentials.token,
            "refresh_token": credentials.refresh_token,
            "token_uri": credentials.token_uri,
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
            "scopes": list(credentials.scopes) if credentials.scopes else None,
            "expiry": credentials.expiry.isoformat() if credentials.expiry else None,
        }
        try:
            with open(path, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Could not store credentials for {user_email} at {path}: {e}")
            return False
        logger.info(f"Stored refreshed credentials for {user_email}")
        return True


_credential_store: LocalDirectoryCredentialStore | None = None


def get_credential_store() -> LocalDirectoryCredentialStore:
    """Get the global credential store instance."""
    global _credential_store
    if _credential_store is None:
        _credential_store = LocalDirectoryCredentialStore()
    return _credential_store


def set_credential_store(store: LocalDirectoryCredentialStore | None) -> None:
    """Replace the global credential store (tests pass a temp-dir store, or None to reset)."""
    global _credential_store
    _credential_store = store
