"""Providers whose upstream URL comes from the endpoint's target_url."""

from endpoint_proxy.endpoints.models import ApiType, EndpointConfig
from endpoint_proxy.providers.base import LLMProvider, UpstreamRequest, bearer_headers


class GoogleAIProvider(LLMProvider):
    api_type = ApiType.GOOGLE_AI

    def build_request(self, config: EndpointConfig, prompt: str, body: dict) -> UpstreamRequest:
        base_url = self._target_url(config).rstrip("/")
        return UpstreamRequest(
            url=f"{base_url}/generateText",
            json={"prompt": {"text": prompt}},
            headers=bearer_headers(config.api_key),
        )


class HuggingFaceProvider(LLMProvider):
    """Hugging Face Inference API; target_url is the model URL."""

    api_type = ApiType.HUGGINGFACE

    def build_request(self, config: EndpointConfig, prompt: str, body: dict) -> UpstreamRequest:
        return UpstreamRequest(
            url=self._target_url(config),
            json={"inputs": prompt},
            headers=bearer_headers(config.api_key),
        )


class CustomProvider(LLMProvider):
    """Forwards the inbound body verbatim; Authorization only when a key is stored."""

    api_type = ApiType.CUSTOM

    def build_request(self, config: EndpointConfig, prompt: str, body: dict) -> UpstreamRequest:
        return UpstreamRequest(
            url=self._target_url(config),
            json=body,
            headers=bearer_headers(config.api_key),
        )
