"""Message adapter interface.

One adapter per wire-protocol family. Many providers can share one adapter
class (OpenAI, Azure OpenAI and OpenAI-compatible servers all speak the
chat-completions protocol); the adapter is handed the provider's client on
every call and keeps nothing between calls.
"""

import contextlib
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterator
from typing import Any

import structlog

from llm_providers.errors import ProviderError, classify_backend_error
from llm_providers.llm.base import (
    LLMOptions,
    LLMRequestNonStreaming,
    LLMRequestStreaming,
    LLMResponseNonStreaming,
    LLMResponseStreaming,
)

logger = structlog.get_logger()


class MessageAdapter(ABC):
    """Translates between the uniform model and one backend protocol.

    Attributes:
        provider_label: Human-readable backend name for logs and error messages.
    """

    def __init__(self, provider_label: str) -> None:
        self.provider_label = provider_label

    @abstractmethod
    async def generate_response(
        self,
        client: Any,
        request: LLMRequestNonStreaming,
        options: LLMOptions | None = None,
    ) -> LLMResponseNonStreaming:
        """Issue a non-streaming call and translate the complete response.

        Args:
            client: Backend SDK client owned by the calling provider.
            request: Uniform request.
            options: Generation options; None fields use backend defaults.

        Returns:
            Exactly one complete response.

        Raises:
            APIKeyInvalidError: Backend rejected the credential.
            RateLimitExceededError: Backend signalled throttling.
            Exception: Any other backend error, unchanged.
        """
        ...

    @abstractmethod
    async def stream_response(
        self,
        client: Any,
        request: LLMRequestStreaming,
        options: LLMOptions | None = None,
    ) -> AsyncIterator[LLMResponseStreaming]:
        """Start a streaming call and return a lazy sequence of chunks.

        WHY AWAIT THEN ITERATE:
        Starting the stream happens on ``await`` so failures to connect
        (including rate limits) surface before the caller starts iterating.
        The returned generator closes the native stream when it finishes,
        fails, or is closed early by the caller.

        Args:
            client: Backend SDK client owned by the calling provider.
            request: Uniform request.
            options: Generation options; None fields use backend defaults.

        Returns:
            Async iterator yielding chunks in backend emission order.
        """
        ...

    def classify_error(self, error: Exception) -> ProviderError | None:
        """Map a backend exception to the taxonomy, or None to pass it through."""
        return classify_backend_error(error, self.provider_label)

    @contextlib.contextmanager
    def translating_errors(
        self, model: str, event: str = "llm_request_failed"
    ) -> Iterator[None]:
        """Re-raise taxonomy errors for normalized failures, others unchanged.

        Every failure is logged under ``event`` before it propagates.
        """
        try:
            yield
        except Exception as e:
            logger.error(
                event,
                provider=self.provider_label,
                model=model,
                error_type=type(e).__name__,
            )
            classified = self.classify_error(e)
            if classified is None:
                raise
            raise classified from e
