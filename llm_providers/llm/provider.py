"""Abstract base class for LLM providers.

A provider owns one backend configuration and the SDK client built from it.
It holds no per-request state, so concurrent calls on one instance never
interfere; the client is shared read-only across them.
"""

import dataclasses
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any, ClassVar, TypeVar

from llm_providers.config import ProviderConfig, ProviderType
from llm_providers.errors import APIKeyNotSetError
from llm_providers.llm.adapter import MessageAdapter
from llm_providers.llm.base import (
    ChatModel,
    LLMOptions,
    LLMRequestNonStreaming,
    LLMRequestStreaming,
    LLMResponseNonStreaming,
    LLMResponseStreaming,
)

RequestT = TypeVar("RequestT", LLMRequestNonStreaming, LLMRequestStreaming)


class BaseLLMProvider(ABC):
    """Uniform generate/stream/embed contract over one backend.

    Subclasses set ``provider_type`` and ``display_name``, then build
    ``self.client`` and ``self.adapter`` in ``__init__`` without any network I/O.

    Attributes:
        config: Immutable provider configuration.
        client: Backend SDK client, owned exclusively by this provider.
        adapter: Message adapter for the backend's protocol family.
    """

    provider_type: ClassVar[ProviderType]
    display_name: ClassVar[str]
    # Self-hosted backends may accept unauthenticated chat calls
    requires_api_key: ClassVar[bool] = True

    client: Any
    adapter: MessageAdapter

    def __init__(self, config: ProviderConfig) -> None:
        """Initialize with provider configuration.

        Args:
            config: Provider configuration; its type must match this provider.

        Raises:
            ValueError: If the configuration is for another provider type.
        """
        if config.type != self.provider_type:
            raise ValueError(
                f"Provider {config.id} has type {config.type.value}, "
                f"expected {self.provider_type.value}"
            )
        self.config = config

    def has_api_key(self) -> bool:
        """Return whether a credential is configured."""
        return bool(self.config.api_key)

    def _ensure_model_type(self, model: ChatModel) -> None:
        # Routing a model to the wrong provider is a caller bug, not a
        # recoverable provider error, so it stays outside the taxonomy.
        if model.provider_type != self.provider_type:
            raise ValueError(
                f"Model {model.id} runs on {model.provider_type.value}, "
                f"not {self.display_name}"
            )

    def _ensure_api_key(self) -> None:
        if not self.has_api_key():
            raise APIKeyNotSetError(
                f"Provider {self.config.id} API key is missing. "
                "Please set it in settings menu."
            )

    @staticmethod
    def _bind_model(model: ChatModel, request: RequestT) -> RequestT:
        # ChatModel.model is what goes on the wire
        if request.model == model.model:
            return request
        return dataclasses.replace(request, model=model.model)

    async def generate_response(
        self,
        model: ChatModel,
        request: LLMRequestNonStreaming,
        options: LLMOptions | None = None,
    ) -> LLMResponseNonStreaming:
        """Generate one complete response.

        Raises:
            ValueError: If ``model`` belongs to another provider type.
            APIKeyNotSetError: If a required credential is missing.
            APIKeyInvalidError: If the backend rejects the credential.
            RateLimitExceededError: If the backend throttles the call.
        """
        self._ensure_model_type(model)
        if self.requires_api_key:
            self._ensure_api_key()
        request = self._bind_model(model, request)
        return await self.adapter.generate_response(self.client, request, options)

    async def stream_response(
        self,
        model: ChatModel,
        request: LLMRequestStreaming,
        options: LLMOptions | None = None,
    ) -> AsyncIterator[LLMResponseStreaming]:
        """Start a streamed response.

        Usage::

            stream = await provider.stream_response(model, request)
            async for chunk in stream:
                ...

        The returned iterator is single-use. Closing it early (``aclose()``,
        or leaving an ``async with contextlib.aclosing(stream)`` block)
        releases the backend connection.

        Raises:
            ValueError: If ``model`` belongs to another provider type.
            APIKeyNotSetError: If a required credential is missing.
            APIKeyInvalidError: If the backend rejects the credential.
            RateLimitExceededError: If the backend throttles the call.
        """
        self._ensure_model_type(model)
        if self.requires_api_key:
            self._ensure_api_key()
        request = self._bind_model(model, request)
        return await self.adapter.stream_response(self.client, request, options)

    @abstractmethod
    async def get_embedding(self, model: str, text: str) -> list[float]:
        """Embed a single text.

        Args:
            model: Backend embedding model identifier.
            text: Text to embed; exactly one input is sent per call.

        Returns:
            The embedding vector for the input.

        Raises:
            APIKeyNotSetError: If no credential is configured (no network call).
            RateLimitExceededError: If the backend throttles the call.
        """
        ...
