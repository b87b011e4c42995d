"""Provider adapters, one per LLM backend.

The orchestrator depends only on the Provider interface; the concrete class
is picked by the provider id stored in ProviderConfig.
"""

import httpx

from repolens.config import LLMConfig
from repolens.errors import ConfigError
from repolens.llm.providers.base import Provider, ProviderRequest
from repolens.llm.providers.gemini import GeminiProvider
from repolens.llm.providers.openai import ChatCompletionsProvider, OpenAIProvider
from repolens.llm.providers.openrouter import OpenRouterProvider

PROVIDER_CLASSES: dict[str, type[Provider]] = {
    OpenRouterProvider.provider_id: OpenRouterProvider,
    GeminiProvider.provider_id: GeminiProvider,
    OpenAIProvider.provider_id: OpenAIProvider,
}


def create_provider(
    provider_id: str,
    http_client: httpx.AsyncClient,
    config: LLMConfig | None = None,
) -> Provider:
    """Create the adapter for a provider id.

    Args:
        provider_id: openrouter, gemini or openai
        http_client: Shared async HTTP client
        config: LLM settings (models, base URLs, timeout); defaults if None

    Returns:
        Provider instance

    Raises:
        ConfigError: If the provider id is unknown
    """
    provider_class = PROVIDER_CLASSES.get(provider_id)
    if provider_class is None:
        raise ConfigError(f"Unsupported provider: {provider_id}")

    config = config or LLMConfig()
    return provider_class(
        http_client,
        model=config.model_for(provider_id),
        base_url=config.base_urls.get(provider_id),
        timeout=config.timeout,
    )


__all__ = [
    "ChatCompletionsProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    "PROVIDER_CLASSES",
    "Provider",
    "ProviderRequest",
    "create_provider",
]
