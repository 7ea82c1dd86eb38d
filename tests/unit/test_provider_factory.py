"""Tests for provider factory functions."""

from unittest.mock import patch

import pytest

from llm_providers.config import ProviderConfig, ProviderType
from llm_providers.factory import create_provider, get_provider_for_model
from llm_providers.llm.anthropic_provider import AnthropicProvider
from llm_providers.llm.gemini_provider import GeminiProvider
from llm_providers.llm.openai_provider import (
    AzureOpenAIProvider,
    OpenAICompatibleProvider,
    OpenAIProvider,
)


class TestCreateProvider:
    """Test create_provider() factory function."""

    @pytest.mark.parametrize(
        ("config", "expected_class"),
        [
            (
                ProviderConfig(id="openai", type=ProviderType.OPENAI, api_key="sk-1"),
                OpenAIProvider,
            ),
            (
                ProviderConfig(
                    id="azure",
                    type=ProviderType.AZURE_OPENAI,
                    api_key="azure-key",
                    base_url="https://example.openai.azure.com",
                    additional_settings={"apiVersion": "2024-10-21"},
                ),
                AzureOpenAIProvider,
            ),
            (
                ProviderConfig(
                    id="local",
                    type=ProviderType.OPENAI_COMPATIBLE,
                    base_url="http://localhost:11434/v1",
                ),
                OpenAICompatibleProvider,
            ),
            (
                ProviderConfig(id="anthropic", type=ProviderType.ANTHROPIC, api_key="k"),
                AnthropicProvider,
            ),
            (
                ProviderConfig(id="gemini", type=ProviderType.GEMINI, api_key="k"),
                GeminiProvider,
            ),
        ],
    )
    def test_returns_provider_for_type(self, config, expected_class):
        provider = create_provider(config)
        assert isinstance(provider, expected_class)
        assert provider.config is config

    def test_each_call_builds_new_instance(self):
        """No singletons: two configs of one type get independent providers."""
        first = create_provider(
            ProviderConfig(id="openai-a", type=ProviderType.OPENAI, api_key="sk-a")
        )
        second = create_provider(
            ProviderConfig(id="openai-b", type=ProviderType.OPENAI, api_key="sk-b")
        )
        assert first is not second
        assert first.client is not second.client

    def test_incomplete_azure_config_raises(self):
        config = ProviderConfig(id="azure", type=ProviderType.AZURE_OPENAI, api_key="k")
        with pytest.raises(ValueError):
            create_provider(config)

    def test_construction_makes_no_network_calls(self):
        config = ProviderConfig(id="openai", type=ProviderType.OPENAI, api_key="sk-1")
        with patch("llm_providers.llm.openai_provider.AsyncOpenAI") as mock_client:
            create_provider(config)
        assert mock_client.return_value.method_calls == []


class TestGetProviderForModel:
    """Test get_provider_for_model()."""

    def test_selects_by_provider_id(self, azure_model):
        provider = create_provider(
            ProviderConfig(
                id="azure",
                type=ProviderType.AZURE_OPENAI,
                api_key="azure-key",
                base_url="https://example.openai.azure.com",
                additional_settings={"apiVersion": "2024-10-21"},
            )
        )
        assert get_provider_for_model(azure_model, {"azure": provider}) is provider

    def test_unconfigured_provider_raises(self, openai_model):
        with pytest.raises(KeyError, match="not configured"):
            get_provider_for_model(openai_model, {})
