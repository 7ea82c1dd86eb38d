"""Provider construction.

WHY NO SINGLETONS:
- Each configuration gets its own provider owning its own client
- Several accounts of one backend type can coexist
"""

from collections.abc import Mapping

from llm_providers.config import ProviderConfig, ProviderType
from llm_providers.llm.anthropic_provider import AnthropicProvider
from llm_providers.llm.base import ChatModel
from llm_providers.llm.gemini_provider import GeminiProvider
from llm_providers.llm.openai_provider import (
    AzureOpenAIProvider,
    OpenAICompatibleProvider,
    OpenAIProvider,
)
from llm_providers.llm.provider import BaseLLMProvider


def create_provider(config: ProviderConfig) -> BaseLLMProvider:
    """Build the provider matching ``config.type``.

    Construction maps configuration to a client; it performs no network I/O.

    Args:
        config: Provider configuration.

    Returns:
        A new provider instance.

    Raises:
        ValueError: If the provider type is unknown or required settings
            (endpoint, api version) are missing.
    """
    match config.type:
        case ProviderType.OPENAI:
            return OpenAIProvider(config)
        case ProviderType.AZURE_OPENAI:
            return AzureOpenAIProvider(config)
        case ProviderType.OPENAI_COMPATIBLE:
            return OpenAICompatibleProvider(config)
        case ProviderType.ANTHROPIC:
            return AnthropicProvider(config)
        case ProviderType.GEMINI:
            return GeminiProvider(config)
    raise ValueError(f"Unknown LLM provider: {config.type}")


def get_provider_for_model(
    model: ChatModel, providers: Mapping[str, BaseLLMProvider]
) -> BaseLLMProvider:
    """Select the provider configured for ``model``.

    Args:
        model: Chat model naming its provider id.
        providers: Providers keyed by config id.

    Raises:
        KeyError: If no provider with that id is configured.
    """
    try:
        return providers[model.provider_id]
    except KeyError:
        raise KeyError(
            f"Provider {model.provider_id} for model {model.id} is not configured"
        ) from None
