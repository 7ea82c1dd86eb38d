"""Google Gemini provider."""

import structlog
from google import genai
from google.genai import types

from llm_providers.config import ProviderConfig, ProviderType
from llm_providers.llm.gemini_adapter import GeminiMessageAdapter
from llm_providers.llm.provider import BaseLLMProvider

logger = structlog.get_logger()


class GeminiProvider(BaseLLMProvider):
    """Gemini models through the google-genai SDK."""

    provider_type = ProviderType.GEMINI
    display_name = "Gemini"

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        self.adapter = GeminiMessageAdapter(self.display_name)
        http_options = (
            types.HttpOptions(base_url=config.base_url) if config.base_url else None
        )
        # genai.Client refuses to build without a key; every call checks the
        # key before touching the client, so None is never dereferenced.
        self.client: genai.Client | None = (
            genai.Client(api_key=config.api_key, http_options=http_options)
            if config.api_key
            else None
        )

    async def get_embedding(self, model: str, text: str) -> list[float]:
        """Embed one text through embed_content."""
        self._ensure_api_key()

        logger.info("embedding_request_start", provider=self.display_name, model=model)
        with self.adapter.translating_errors(model, event="embedding_request_failed"):
            result = await self.client.aio.models.embed_content(
                model=model,
                contents=text,
            )
        return list(result.embeddings[0].values)
