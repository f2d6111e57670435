"""Cohere generate provider."""

from endpoint_proxy.endpoints.models import ApiType, EndpointConfig
from endpoint_proxy.providers.base import LLMProvider, UpstreamRequest, bearer_headers


class CohereProvider(LLMProvider):
    api_type = ApiType.COHERE

    URL = "https://api.cohere.ai/v1/generate"
    MODEL = "command"
    MAX_TOKENS = 300

    def build_request(self, config: EndpointConfig, prompt: str, body: dict) -> UpstreamRequest:
        return UpstreamRequest(
            url=self.URL,
            json={"prompt": prompt, "model": self.MODEL, "max_tokens": self.MAX_TOKENS},
            headers=bearer_headers(config.api_key),
        )
