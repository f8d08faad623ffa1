"""Shared pytest fixtures for gdocs-markdown-mcp tests."""

from unittest.mock import MagicMock

import pytest

from auth.config import reset_config
from auth.credential_store import set_credential_store


@pytest.fixture(autouse=True)
def reset_global_state():
    """Cached config and credential store are module globals; isolate each test."""
    reset_config()
    set_credential_store(None)
    yield
    reset_config()
    set_credential_store(None)


@pytest.fixture
def mock_docs_service():
    """Create a mock Google Docs service."""
    service = MagicMock()
    service.documents.return_value.create.return_value.execute.return_value = {
        "documentId": "doc123",
        "title": "Test Doc",
    }
    service.documents.return_value.batchUpdate.return_value.execute.return_value = {"replies": []}
    return service


@pytest.fixture
def sample_credentials():
    """Create sample OAuth credentials for testing."""
    return {
        "token": "test_access_token",
        "refresh_token": "test_refresh_token",
        "token_uri": "https://oauth2.googleapis.com/token",
        "client_id": "test_client_id",
        "client_secret": "test_client_secret",
        "scopes": ["https://www.googleapis.com/auth/documents"],
    }


@pytest.fixture
def env_override(monkeypatch):
    """Helper to override environment variables."""

    def _override(**kwargs):
        for key, value in kwargs.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, value)

    return _override


@pytest.fixture
def batch_update_bodies():
    """Return a helper that lists the request bodies of each batchUpdate call, in call order."""

    def _bodies(service) -> list[list[dict]]:
        return [c.kwargs["body"]["requests"] for c in service.documents.return_value.batchUpdate.call_args_list]

    return _bodies
