"""Provider error taxonomy.

Only three backend failure modes are normalized, because they are the ones
a user can act on (set a key, fix a key, wait). Every other backend error is
re-raised unchanged so callers see exactly what the SDK raised.

WHY SEPARATE ERROR CLASSES:
- Callers dispatch on the class, never on message text
- Messages are backend-agnostic (no raw payloads leak to the UI)
"""

import contextlib

__all__ = [
    "ProviderError",
    "APIKeyNotSetError",
    "APIKeyInvalidError",
    "RateLimitExceededError",
    "classify_backend_error",
    "extract_status",
]


class ProviderError(Exception):
    """Base class for all normalized provider errors.

    Allows callers to catch the whole taxonomy with a single handler.
    """

    pass


class APIKeyNotSetError(ProviderError):
    """Credential absent when the operation requires one.

    Raised before any network call is made.
    """

    pass


class APIKeyInvalidError(ProviderError):
    """Backend rejected the configured credential (HTTP 401)."""

    pass


class RateLimitExceededError(ProviderError):
    """Backend signalled throttling (HTTP 429).

    WHY RETRY_AFTER IS ONLY A HINT:
    - This layer never retries; the caller owns backoff policy
    """

    def __init__(self, message: str, retry_after_seconds: float | None = None):
        """Initialize RateLimitExceededError.

        Args:
            message: Backend-agnostic error description.
            retry_after_seconds: Optional hint parsed from a retry-after header.
        """
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


_UNAUTHORIZED = 401
_TOO_MANY_REQUESTS = 429


def extract_status(error: BaseException) -> int | None:
    """Read an HTTP status signal from a backend SDK exception.

    Checked in order: ``status_code`` (openai, anthropic), ``status``,
    ``code`` (google-genai), then ``response.status_code``. Only integers in
    the HTTP range count; google-genai puts a string in ``status``.
    """
    for attr in ("status_code", "status", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and 100 <= value < 600:
            return value
    response = getattr(error, "response", None)
    if response is not None:
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value < 600:
            return value
    return None


def _retry_after(error: BaseException) -> float | None:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    retry_header = headers.get("retry-after")
    if retry_header is None:
        return None
    with contextlib.suppress(TypeError, ValueError):
        return float(retry_header)
    return None


def classify_backend_error(
    error: BaseException, provider_label: str
) -> ProviderError | None:
    """Map a backend exception to the taxonomy.

    Returns a ProviderError subclass instance (does not raise), or None when
    the error is not one of the normalized kinds. The caller is responsible
    for ``raise classified from error`` or a bare ``raise`` on None.

    Args:
        error: Exception raised by the backend client.
        provider_label: Human-readable backend name used in the message.
    """
    status = extract_status(error)
    if status == _TOO_MANY_REQUESTS:
        return RateLimitExceededError(
            f"{provider_label} API rate limit exceeded. Please try again later.",
            retry_after_seconds=_retry_after(error),
        )
    if status == _UNAUTHORIZED:
        return APIKeyInvalidError(
            f"{provider_label} API key is invalid. Please update it in settings menu."
        )
    return None
