"""Provider abstraction layer.

Exports:
    Error classes for provider error handling
    ProviderConfig, ProviderType and Settings for configuration
    Factory functions for provider instances
"""

from llm_providers.config import ProviderConfig, ProviderType, Settings
from llm_providers.errors import (
    APIKeyInvalidError,
    APIKeyNotSetError,
    ProviderError,
    RateLimitExceededError,
)
from llm_providers.factory import create_provider, get_provider_for_model

__all__ = [
    # Config
    "ProviderConfig",
    "ProviderType",
    "Settings",
    # Errors
    "ProviderError",
    "APIKeyNotSetError",
    "APIKeyInvalidError",
    "RateLimitExceededError",
    # Factory
    "create_provider",
    "get_provider_for_model",
]
