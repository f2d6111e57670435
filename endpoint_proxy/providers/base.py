"""Abstract base for LLM providers.

A provider turns (config, prompt, inbound body) into exactly one outbound
POST and relays the upstream JSON body unmodified.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import httpx

from endpoint_proxy.config.settings import get_settings
from endpoint_proxy.endpoints.models import ApiType, EndpointConfig
from endpoint_proxy.errors import UpstreamError, ValidationError

# Upper bound on upstream text echoed back inside an error message
MAX_ERROR_TEXT = 500


@dataclass
class ProviderResponse:
    status_code: int
    body: dict | list

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class UpstreamRequest:
    url: str
    json: dict
    headers: dict = field(default_factory=dict)
    params: dict | None = None


def bearer_headers(api_key: str) -> dict:
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


class LLMProvider(ABC):
    """Base class for provider request templates."""

    api_type: ApiType

    def __init__(self):
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            timeout = get_settings().upstream_timeout
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10.0))
        return self._client

    @abstractmethod
    def build_request(self, config: EndpointConfig, prompt: str, body: dict) -> UpstreamRequest:
        """Build the outbound request for this provider.

        Args:
            config: Stored (or ad-hoc) endpoint configuration.
            prompt: User prompt, already validated as non-empty.
            body: The full inbound request body.
        """
        ...

    async def forward(self, config: EndpointConfig, prompt: str, body: dict | None = None) -> ProviderResponse:
        """Send one request upstream. Single attempt, no retries."""
        request = self.build_request(config, prompt, body if body is not None else {"prompt": prompt})

        client = await self._get_client()
        try:
            response = await client.post(
                request.url,
                json=request.json,
                headers=request.headers,
                params=request.params,
            )
        except httpx.ConnectError:
            raise UpstreamError("Cannot reach upstream provider")
        except httpx.TimeoutException:
            raise UpstreamError("Upstream provider timed out")
        except (httpx.InvalidURL, UnicodeError) as e:
            # InvalidURL is not an HTTPError; bad IDNA hosts surface as UnicodeError
            raise UpstreamError(f"Invalid upstream URL: {e}")
        except httpx.HTTPError as e:
            raise UpstreamError(f"Upstream error: {e}")

        try:
            payload = response.json()
        except ValueError:
            raise UpstreamError(_unparsable_message(response))

        return ProviderResponse(status_code=response.status_code, body=payload)

    @staticmethod
    def _target_url(config: EndpointConfig) -> str:
        if not config.target_url:
            raise ValidationError(f"Target URL is required for {config.api_type} endpoints")
        return config.target_url

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None


def _unparsable_message(response: httpx.Response) -> str:
    text = (response.text or "").strip()
    if not text:
        return f"Upstream returned status {response.status_code} with an empty body"
    return f"Upstream returned status {response.status_code}: {text[:MAX_ERROR_TEXT]}"
