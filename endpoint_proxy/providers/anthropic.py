"""Anthropic legacy text-completions provider."""

from endpoint_proxy.endpoints.models import ApiType, EndpointConfig
from endpoint_proxy.providers.base import LLMProvider, UpstreamRequest


class AnthropicProvider(LLMProvider):
    api_type = ApiType.ANTHROPIC

    URL = "https://api.anthropic.com/v1/complete"
    MODEL = "claude-2"
    MAX_TOKENS = 300
    API_VERSION = "2023-06-01"

    def build_request(self, config: EndpointConfig, prompt: str, body: dict) -> UpstreamRequest:
        return UpstreamRequest(
            url=self.URL,
            json={
                "prompt": f"\n\nHuman: {prompt}\n\nAssistant:",
                "model": self.MODEL,
                "max_tokens_to_sample": self.MAX_TOKENS,
            },
            headers={
                "Content-Type": "application/json",
                "X-API-Key": config.api_key,
                "anthropic-version": self.API_VERSION,
            },
        )
