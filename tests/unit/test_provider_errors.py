"""Tests for the provider error taxonomy.

Tests behavior of error classes:
- Inheritance hierarchy
- Status extraction from SDK-shaped exceptions
- Classification of 401/429 and pass-through of everything else
"""

from unittest.mock import MagicMock

import httpx
import openai
import pytest

from llm_providers.errors import (
    APIKeyInvalidError,
    APIKeyNotSetError,
    ProviderError,
    RateLimitExceededError,
    classify_backend_error,
    extract_status,
)


def _openai_status_error(error_class, status: int, headers=None):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status, request=request, headers=headers or {})
    return error_class("raw backend payload {secret}", response=response, body=None)


class TestProviderErrorHierarchy:
    """Test error inheritance structure."""

    def test_provider_error_is_exception(self):
        """ProviderError should be a standard Exception."""
        error = ProviderError("test")
        assert isinstance(error, Exception)

    @pytest.mark.parametrize(
        "error_class",
        [APIKeyNotSetError, APIKeyInvalidError, RateLimitExceededError],
    )
    def test_all_errors_inherit_from_provider_error(self, error_class):
        """All taxonomy errors should inherit from ProviderError."""
        error = error_class("test message")
        assert isinstance(error, ProviderError)

    @pytest.mark.parametrize(
        "error_class",
        [APIKeyNotSetError, APIKeyInvalidError, RateLimitExceededError],
    )
    def test_errors_preserve_message(self, error_class):
        """All errors should preserve their message."""
        error = error_class("specific error message")
        assert str(error) == "specific error message"

    def test_kinds_are_distinct(self):
        """Callers dispatch on class, so kinds must not overlap."""
        assert not isinstance(RateLimitExceededError("x"), APIKeyInvalidError)
        assert not isinstance(APIKeyInvalidError("x"), APIKeyNotSetError)
        assert not isinstance(APIKeyNotSetError("x"), RateLimitExceededError)


class TestRateLimitExceededError:
    """Test RateLimitExceededError specific behavior."""

    def test_has_retry_after_seconds_attribute(self):
        error = RateLimitExceededError("rate limited", retry_after_seconds=30.0)
        assert error.retry_after_seconds == 30.0

    def test_retry_after_defaults_to_none(self):
        error = RateLimitExceededError("rate limited")
        assert error.retry_after_seconds is None


class TestExtractStatus:
    """Test status extraction from backend exceptions."""

    def test_reads_status_code(self):
        error = _openai_status_error(openai.RateLimitError, 429)
        assert extract_status(error) == 429

    def test_reads_status_attribute(self, backend_error):
        assert extract_status(backend_error("throttled", status=429)) == 429

    def test_reads_code_attribute(self):
        error = Exception("resource exhausted")
        error.code = 429
        assert extract_status(error) == 429

    def test_ignores_string_status(self):
        """google-genai puts a status name string in ``status``."""
        error = Exception("resource exhausted")
        error.status = "RESOURCE_EXHAUSTED"
        assert extract_status(error) is None

    def test_reads_response_status_code(self):
        error = Exception("wrapped")
        error.response = MagicMock(status_code=401)
        assert extract_status(error) == 401

    def test_returns_none_without_status(self):
        assert extract_status(ValueError("boom")) is None


class TestClassifyBackendError:
    """Test mapping of backend errors to the taxonomy."""

    def test_429_maps_to_rate_limit(self):
        error = _openai_status_error(openai.RateLimitError, 429)
        classified = classify_backend_error(error, "Azure OpenAI")
        assert isinstance(classified, RateLimitExceededError)

    def test_rate_limit_message_is_backend_agnostic(self):
        error = _openai_status_error(openai.RateLimitError, 429)
        classified = classify_backend_error(error, "Azure OpenAI")
        assert str(classified) == (
            "Azure OpenAI API rate limit exceeded. Please try again later."
        )
        assert "secret" not in str(classified)

    def test_retry_after_header_is_parsed(self):
        error = _openai_status_error(
            openai.RateLimitError, 429, headers={"retry-after": "12"}
        )
        classified = classify_backend_error(error, "OpenAI")
        assert classified.retry_after_seconds == 12.0

    def test_malformed_retry_after_is_ignored(self):
        error = _openai_status_error(
            openai.RateLimitError, 429, headers={"retry-after": "soon"}
        )
        classified = classify_backend_error(error, "OpenAI")
        assert classified.retry_after_seconds is None

    def test_401_maps_to_invalid_key(self):
        error = _openai_status_error(openai.AuthenticationError, 401)
        classified = classify_backend_error(error, "OpenAI")
        assert isinstance(classified, APIKeyInvalidError)
        assert "secret" not in str(classified)

    @pytest.mark.parametrize("status", [400, 403, 404, 500, 503])
    def test_other_statuses_are_not_classified(self, backend_error, status):
        assert classify_backend_error(backend_error("nope", status), "OpenAI") is None

    def test_errors_without_status_are_not_classified(self):
        assert classify_backend_error(ConnectionError("reset"), "OpenAI") is None
