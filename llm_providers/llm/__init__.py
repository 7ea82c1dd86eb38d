"""LLM provider module.

Uniform request/response model, message adapters, and providers.
"""

from llm_providers.llm.adapter import MessageAdapter
from llm_providers.llm.anthropic_adapter import AnthropicMessageAdapter
from llm_providers.llm.anthropic_provider import AnthropicProvider
from llm_providers.llm.base import (
    ChatModel,
    LLMOptions,
    LLMRequest,
    LLMRequestNonStreaming,
    LLMRequestStreaming,
    LLMResponseNonStreaming,
    LLMResponseStreaming,
    RequestMessage,
    ResponseUsage,
    ToolCall,
    ToolCallDelta,
    ToolDefinition,
    ToolParameter,
)
from llm_providers.llm.gemini_adapter import GeminiMessageAdapter
from llm_providers.llm.gemini_provider import GeminiProvider
from llm_providers.llm.openai_adapter import OpenAIMessageAdapter
from llm_providers.llm.openai_provider import (
    AzureOpenAIProvider,
    OpenAICompatibleProvider,
    OpenAIProvider,
)
from llm_providers.llm.provider import BaseLLMProvider

__all__ = [
    # Base types
    "ChatModel",
    "LLMOptions",
    "LLMRequest",
    "LLMRequestNonStreaming",
    "LLMRequestStreaming",
    "LLMResponseNonStreaming",
    "LLMResponseStreaming",
    "RequestMessage",
    "ResponseUsage",
    "ToolCall",
    "ToolCallDelta",
    "ToolDefinition",
    "ToolParameter",
    # Adapters
    "MessageAdapter",
    "AnthropicMessageAdapter",
    "GeminiMessageAdapter",
    "OpenAIMessageAdapter",
    # Providers
    "BaseLLMProvider",
    "AnthropicProvider",
    "AzureOpenAIProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "OpenAIProvider",
]
