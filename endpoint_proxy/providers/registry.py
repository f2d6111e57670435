"""Provider registry: singleton map of api_type tag -> provider instance."""

from endpoint_proxy.errors import UnsupportedProviderError
from endpoint_proxy.providers.anthropic import AnthropicProvider
from endpoint_proxy.providers.base import LLMProvider
from endpoint_proxy.providers.cohere import CohereProvider
from endpoint_proxy.providers.generic import CustomProvider, GoogleAIProvider, HuggingFaceProvider
from endpoint_proxy.providers.openai import AzureOpenAIProvider, OpenAIProvider

PROVIDER_CLASSES: dict[str, type[LLMProvider]] = {
    cls.api_type.value: cls
    for cls in (
        OpenAIProvider,
        AnthropicProvider,
        CohereProvider,
        GoogleAIProvider,
        AzureOpenAIProvider,
        HuggingFaceProvider,
        CustomProvider,
    )
}

_providers: dict[str, LLMProvider] = {}


def get_provider(api_type: str) -> LLMProvider:
    """Get or create the provider for an api_type tag."""
    if api_type in _providers:
        return _providers[api_type]

    provider_cls = PROVIDER_CLASSES.get(api_type)
    if provider_cls is None:
        raise UnsupportedProviderError(api_type)

    _providers[api_type] = provider_cls()
    return _providers[api_type]


async def close_all_providers() -> None:
    """Gracefully shut down all provider connections."""
    for provider in _providers.values():
        await provider.close()
    _providers.clear()
