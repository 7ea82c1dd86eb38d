"""Provider configuration management.

A ProviderConfig is supplied once when a provider is built and never changes
afterwards. Where configs come from (settings UI, database, env) is the
caller's business; Settings covers the environment-driven case.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderType(str, Enum):
    """Closed set of supported backend types.

    WHY ENUM: Provider construction and request routing match exhaustively
    over this tag instead of inspecting client classes at runtime.
    """

    OPENAI = "openai"
    AZURE_OPENAI = "azure-openai"
    OPENAI_COMPATIBLE = "openai-compatible"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


class Settings(BaseSettings):
    """Default credentials and endpoints loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str = ""
    openai_base_url: str = ""

    # Azure OpenAI
    azure_openai_api_key: str = ""
    azure_openai_endpoint: str = ""
    azure_openai_api_version: str = ""
    azure_openai_deployment: str = ""

    # Self-hosted / third-party OpenAI-compatible servers
    openai_compatible_api_key: str = ""
    openai_compatible_base_url: str = ""

    # Anthropic
    anthropic_api_key: str = ""

    # Google Gemini
    google_api_key: str = ""


@dataclass(frozen=True)
class ProviderConfig:
    """Connection configuration for one provider instance.

    Attributes:
        id: Provider identifier (shown in error messages).
        type: Backend type tag.
        api_key: Credential; None or "" means not set.
        base_url: Endpoint URL; required for Azure and self-hosted backends.
        additional_settings: Backend-specific keys. Azure uses
            ``apiVersion`` and ``deployment``.
    """

    id: str
    type: ProviderType
    api_key: str | None = None
    base_url: str | None = None
    additional_settings: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only view so the config stays immutable all the way down
        object.__setattr__(
            self,
            "additional_settings",
            MappingProxyType(dict(self.additional_settings)),
        )

    @classmethod
    def from_settings(
        cls,
        provider_type: ProviderType,
        settings: Settings | None = None,
        provider_id: str | None = None,
    ) -> "ProviderConfig":
        """Build a provider configuration from environment settings.

        Args:
            provider_type: Backend type to configure.
            settings: Loaded settings; read from the environment when None.
            provider_id: Provider identifier; defaults to the type value.

        Returns:
            ProviderConfig with empty settings values mapped to None.
        """
        if settings is None:
            settings = Settings()
        provider_id = provider_id or provider_type.value

        match provider_type:
            case ProviderType.OPENAI:
                return cls(
                    id=provider_id,
                    type=provider_type,
                    api_key=settings.openai_api_key or None,
                    base_url=settings.openai_base_url or None,
                )
            case ProviderType.AZURE_OPENAI:
                additional: dict[str, str] = {}
                if settings.azure_openai_api_version:
                    additional["apiVersion"] = settings.azure_openai_api_version
                if settings.azure_openai_deployment:
                    additional["deployment"] = settings.azure_openai_deployment
                return cls(
                    id=provider_id,
                    type=provider_type,
                    api_key=settings.azure_openai_api_key or None,
                    base_url=settings.azure_openai_endpoint or None,
                    additional_settings=additional,
                )
            case ProviderType.OPENAI_COMPATIBLE:
                return cls(
                    id=provider_id,
                    type=provider_type,
                    api_key=settings.openai_compatible_api_key or None,
                    base_url=settings.openai_compatible_base_url or None,
                )
            case ProviderType.ANTHROPIC:
                return cls(
                    id=provider_id,
                    type=provider_type,
                    api_key=settings.anthropic_api_key or None,
                )
            case ProviderType.GEMINI:
                return cls(
                    id=provider_id,
                    type=provider_type,
                    api_key=settings.google_api_key or None,
                )
        raise ValueError(f"Unknown provider type: {provider_type}")
