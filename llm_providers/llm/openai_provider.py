"""Providers speaking the OpenAI chat-completions protocol.

All three share OpenAIMessageAdapter and the embeddings endpoint; they differ
only in how the client is built from configuration.
"""

import structlog
from openai import AsyncAzureOpenAI, AsyncOpenAI

from llm_providers.config import ProviderConfig, ProviderType
from llm_providers.llm.openai_adapter import OpenAIMessageAdapter
from llm_providers.llm.provider import BaseLLMProvider

logger = structlog.get_logger()

# The SDK refuses to build a client without a key. Calls that need one are
# stopped by _ensure_api_key before this value ever reaches the wire.
KEYLESS_PLACEHOLDER = "no-api-key"


class OpenAIFamilyProvider(BaseLLMProvider):
    """Shared embedding support for chat-completions backends."""

    client: AsyncOpenAI

    async def get_embedding(self, model: str, text: str) -> list[float]:
        """Embed one text through the embeddings endpoint."""
        self._ensure_api_key()

        logger.info("embedding_request_start", provider=self.display_name, model=model)
        with self.adapter.translating_errors(model, event="embedding_request_failed"):
            embedding = await self.client.embeddings.create(model=model, input=text)
        return embedding.data[0].embedding


class OpenAIProvider(OpenAIFamilyProvider):
    """api.openai.com, or any endpoint given by ``base_url``."""

    provider_type = ProviderType.OPENAI
    display_name = "OpenAI"

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        self.adapter = OpenAIMessageAdapter(self.display_name)
        self.client = AsyncOpenAI(
            api_key=config.api_key or KEYLESS_PLACEHOLDER,
            base_url=config.base_url or None,
        )


class AzureOpenAIProvider(OpenAIFamilyProvider):
    """Azure-hosted OpenAI models.

    Azure authenticates with an endpoint + api-version (+ optional
    deployment) triple instead of a bare key. ``base_url`` is the resource
    endpoint; ``additional_settings`` carries ``apiVersion`` and ``deployment``.
    """

    provider_type = ProviderType.AZURE_OPENAI
    display_name = "Azure OpenAI"

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        api_version = config.additional_settings.get("apiVersion")
        if not config.base_url:
            raise ValueError(f"Provider {config.id} requires an Azure endpoint URL")
        if not api_version:
            raise ValueError(f"Provider {config.id} requires an Azure apiVersion")

        self.adapter = OpenAIMessageAdapter(self.display_name)
        self.client = AsyncAzureOpenAI(
            api_key=config.api_key or KEYLESS_PLACEHOLDER,
            azure_endpoint=config.base_url,
            api_version=api_version,
            azure_deployment=config.additional_settings.get("deployment") or None,
        )


class OpenAICompatibleProvider(OpenAIFamilyProvider):
    """Self-hosted or third-party servers exposing the OpenAI API."""

    provider_type = ProviderType.OPENAI_COMPATIBLE
    display_name = "OpenAI-compatible"
    requires_api_key = False

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        if not config.base_url:
            raise ValueError(f"Provider {config.id} requires a base URL")

        # Many compatible servers reject stream_options
        self.adapter = OpenAIMessageAdapter(self.display_name, stream_usage=False)
        self.client = AsyncOpenAI(
            api_key=config.api_key or KEYLESS_PLACEHOLDER,
            base_url=config.base_url,
        )
