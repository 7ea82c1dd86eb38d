"""Anthropic (Claude) provider."""

from anthropic import AsyncAnthropic

from llm_providers.config import ProviderConfig, ProviderType
from llm_providers.llm.anthropic_adapter import AnthropicMessageAdapter
from llm_providers.llm.provider import BaseLLMProvider


class AnthropicProvider(BaseLLMProvider):
    """Claude models through the Anthropic messages API."""

    provider_type = ProviderType.ANTHROPIC
    display_name = "Anthropic"

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        self.adapter = AnthropicMessageAdapter(self.display_name)
        self.client = AsyncAnthropic(
            api_key=config.api_key or "",
            base_url=config.base_url or None,
        )

    async def get_embedding(self, model: str, text: str) -> list[float]:
        """Anthropic has no embeddings endpoint."""
        raise NotImplementedError(
            f"Provider {self.config.id} does not support embeddings. "
            "Please use a different provider for embeddings."
        )
