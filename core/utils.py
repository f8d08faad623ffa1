import asyncio
import functools
import logging
import re
import ssl

from googleapiclient.errors import HttpError

from core.errors import (
    APIError,
    AuthenticationError,
    MarkdownConversionError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def validate_document_id(document_id: str, param_name: str = "document_id") -> str:
    """Validate a Google Docs document ID."""
    if not document_id:
        raise ValidationError(f"{param_name} is required")

    document_id = document_id.strip()
    if not document_id:
        raise ValidationError(f"{param_name} cannot be empty")

    if not re.match(r"^[\w\-]+$", document_id):
        raise ValidationError(f"{param_name} contains invalid characters")

    return document_id


def validate_email(email: str, param_name: str = "user_google_email") -> str:
    """Validate an email address."""
    if not email:
        raise ValidationError(f"{param_name} is required")

    email = email.strip().lower()
    if not re.match(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$", email):
        raise ValidationError(f"{param_name} is not a valid email address")

    return email


def validate_positive_int(value: int, param_name: str, max_value: int | None = None) -> int:
    """Validate a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{param_name} must be a positive integer")

    if max_value is not None and value > max_value:
        raise ValidationError(f"{param_name} cannot exceed {max_value}")

    return value


class TransientNetworkError(Exception):
    """Raised when an SSL error persists after every retry."""


# Read-only tools retry SSL failures with delays of 1s, 2s before giving up.
SSL_MAX_ATTEMPTS = 3
SSL_BASE_DELAY = 1


def _api_error_from_http(error: HttpError, tool_name: str, user_google_email: str, service_type: str | None) -> APIError:
    status = error.resp.status
    message = f"API error in {tool_name}: {error}"
    if status in (401, 403):
        message += (
            f". You might need to re-authenticate for user '{user_google_email}' "
            f"with access to the {service_type or 'requested'} API."
        )
    return APIError(message, status_code=status)


def handle_http_errors(tool_name: str, is_read_only: bool = False, service_type: str | None = None):
    """
    Decorator that turns failures inside a tool into the server's error types.

    - HttpError becomes APIError carrying the HTTP status; 401/403 add a
      re-authentication hint naming the user.
    - ssl.SSLError is retried with exponential backoff when `is_read_only` is
      set, and surfaces as TransientNetworkError otherwise or once retries run out.
    - ValidationError, MarkdownConversionError and AuthenticationError pass
      through unchanged.
    - Anything else is wrapped in APIError.

    Args:
        tool_name: Name used in log lines and error messages.
        is_read_only: Whether the tool is safe to retry.
        service_type: Google service named in the re-authentication hint.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except ssl.SSLError as e:
                    if not is_read_only or attempt >= SSL_MAX_ATTEMPTS:
                        logger.error(f"SSL error in {tool_name} after {attempt} attempt(s): {e}")
                        raise TransientNetworkError(
                            f"A transient SSL error occurred in '{tool_name}' after {attempt} attempt(s). "
                            "Please try again shortly."
                        ) from e
                    delay = SSL_BASE_DELAY * 2 ** (attempt - 1)
                    logger.warning(f"SSL error in {tool_name} (attempt {attempt}): {e}. Retrying in {delay}s")
                    await asyncio.sleep(delay)
                    attempt += 1
                except (ValidationError, MarkdownConversionError) as e:
                    logger.warning(f"Input error in {tool_name}: {e}")
                    raise
                except (AuthenticationError, TransientNetworkError):
                    raise
                except HttpError as error:
                    logger.error(f"API error in {tool_name}: {error}", exc_info=True)
                    raise _api_error_from_http(
                        error, tool_name, kwargs.get("user_google_email", "N/A"), service_type
                    ) from error
                except Exception as e:
                    logger.exception(f"Unexpected error in {tool_name}")
                    raise APIError(f"An unexpected error occurred in {tool_name}: {e}") from e

        return wrapper

    return decorator
