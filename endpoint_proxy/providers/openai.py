"""OpenAI and Azure OpenAI chat-completions providers."""

from endpoint_proxy.endpoints.models import ApiType, EndpointConfig
from endpoint_proxy.providers.base import LLMProvider, UpstreamRequest, bearer_headers

SYSTEM_PROMPT = "You are a helpful assistant."


def chat_messages(prompt: str) -> list[dict]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


class OpenAIProvider(LLMProvider):
    """Fixed OpenAI endpoint; target_url is ignored."""

    api_type = ApiType.OPENAI

    URL = "https://api.openai.com/v1/chat/completions"
    MODEL = "gpt-3.5-turbo"

    def build_request(self, config: EndpointConfig, prompt: str, body: dict) -> UpstreamRequest:
        return UpstreamRequest(
            url=self.URL,
            json={"model": self.MODEL, "messages": chat_messages(prompt)},
            headers=bearer_headers(config.api_key),
        )


class AzureOpenAIProvider(LLMProvider):
    """Azure OpenAI resource at target_url; the model field names the deployment."""

    api_type = ApiType.AZURE_OPENAI

    API_VERSION = "2024-02-15-preview"
    DEPLOYMENT = "gpt-35-turbo"

    def build_request(self, config: EndpointConfig, prompt: str, body: dict) -> UpstreamRequest:
        base_url = self._target_url(config).rstrip("/")
        return UpstreamRequest(
            url=f"{base_url}/chat/completions",
            json={"model": self.DEPLOYMENT, "messages": chat_messages(prompt)},
            headers=bearer_headers(config.api_key),
            params={"api-version": self.API_VERSION},
        )
