"""
Service injection for Google API tools.

`require_google_service` resolves the calling user's stored credentials,
refreshes them when expired, checks the scopes the tool needs, builds the
Google API client and passes it to the tool as its first argument. The
decorated tool's public signature no longer mentions `service`, so MCP
clients never see it.
"""

import asyncio
import functools
import inspect
import logging
from typing import Any

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from googleapiclient.discovery import build

from auth.config import get_config
from auth.credential_store import get_credential_store
from auth.scopes import expand_granted_scopes, get_scopes_for_group
from core.errors import (
    CredentialsNotFoundError,
    ScopeMismatchError,
    ServiceConfigurationError,
    TokenRefreshError,
    ValidationError,
)
from core.utils import validate_email

logger = logging.getLogger(__name__)

# service_type -> (API name, version)
SERVICE_CONFIGS: dict[str, tuple[str, str]] = {
    "docs": ("docs", "v1"),
}


def _load_valid_credentials(user_google_email: str, required_scopes: list[str]):
    store = get_credential_store()
    credentials = store.get_credential(user_google_email)
    if credentials is None:
        raise CredentialsNotFoundError(user_google_email)

    if credentials.expired and credentials.refresh_token:
        logger.info(f"Refreshing expired credentials for {user_google_email}")
        try:
            credentials.refresh(Request())
        except RefreshError as e:
            raise TokenRefreshError(user_google_email, str(e)) from e
        store.store_credential(user_google_email, credentials)
    elif not credentials.valid and not credentials.refresh_token:
        raise TokenRefreshError(user_google_email, "token is invalid and no refresh token is stored")

    granted = expand_granted_scopes(credentials.scopes)
    if credentials.scopes is not None and not set(required_scopes) <= granted:
        raise ScopeMismatchError(required_scopes, sorted(granted))

    return credentials


async def get_authenticated_google_service(service_type: str, scope_group: str, user_google_email: str) -> Any:
    """
    Build an authenticated Google API client for a user.

    Args:
        service_type: Key into SERVICE_CONFIGS (currently only "docs").
        scope_group: Key into auth.scopes.SCOPE_GROUPS.
        user_google_email: Account whose stored credentials are used.

    Returns:
        A googleapiclient Resource for the requested API.
    """
    if service_type not in SERVICE_CONFIGS:
        raise ServiceConfigurationError(f"Unknown service type: {service_type}")
    try:
        required_scopes = get_scopes_for_group(scope_group)
    except KeyError as e:
        raise ServiceConfigurationError(f"Unknown scope group: {scope_group}") from e

    api_name, api_version = SERVICE_CONFIGS[service_type]
    credentials = await asyncio.to_thread(_load_valid_credentials, user_google_email, required_scopes)
    service = await asyncio.to_thread(build, api_name, api_version, credentials=credentials, cache_discovery=False)
    logger.debug(f"Built {api_name} {api_version} service for {user_google_email}")
    return service


def require_google_service(service_type: str, scope_group: str):
    """
    Decorator that injects an authenticated Google API service as the first argument.

    The tool must accept `service` as its first parameter and `user_google_email`
    as a keyword. An empty email falls back to USER_GOOGLE_EMAIL.
    """

    def decorator(func):
        original_sig = inspect.signature(func)
        params = list(original_sig.parameters.values())
        if not params or params[0].name != "service":
            raise TypeError(f"{func.__name__} must take 'service' as its first parameter")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            user_google_email = get_config().resolve_user_email(kwargs.get("user_google_email"))
            if not user_google_email:
                raise ValidationError(
                    "user_google_email is required (pass it explicitly or set USER_GOOGLE_EMAIL)"
                )
            user_google_email = validate_email(user_google_email)
            kwargs["user_google_email"] = user_google_email

            service = await get_authenticated_google_service(service_type, scope_group, user_google_email)
            return await func(service, *args, **kwargs)

        wrapper.__signature__ = original_sig.replace(parameters=params[1:])
        return wrapper

    return decorator
