"""Request/response models for the HTTP API.

JSON fields are camelCase on the wire; snake_case names are accepted too.
"""

from datetime import datetime

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from endpoint_proxy.config.settings import Settings
from endpoint_proxy.endpoints.models import ApiType, EndpointConfig


class APIModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_url(value: str | None) -> str | None:
    if not value:
        return value
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, UnicodeError) as e:
        raise ValueError(f"not a valid URL ({e})")
    if url.scheme not in ("http", "https") or not url.host:
        raise ValueError("must be an absolute http(s) URL")
    return value


class EndpointCreate(APIModel):
    name: str = Field(min_length=1)
    api_type: ApiType
    target_url: str = ""
    api_key: str = ""
    description: str = ""
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])
    # Proxy id issued by an earlier ad-hoc /test-endpoint call
    proxy_id: str | None = None

    @field_validator("target_url")
    @classmethod
    def check_target_url(cls, value):
        return _check_url(value)


class EndpointUpdate(APIModel):
    name: str | None = Field(default=None, min_length=1)
    api_type: ApiType | None = None
    target_url: str | None = None
    api_key: str | None = None
    description: str | None = None
    allowed_origins: list[str] | None = None

    @field_validator("target_url")
    @classmethod
    def check_target_url(cls, value):
        return _check_url(value)

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True, exclude_none=True)
        if "api_type" in data:
            data["api_type"] = data["api_type"].value
        return data


class EndpointRead(APIModel):
    """Public view of an endpoint. The upstream API key is never included."""

    id: str
    api_type: str
    name: str
    target_url: str
    description: str
    allowed_origins: list[str]
    status: str
    last_tested: datetime | None
    proxy_id: str
    proxy_url: str
    created_at: datetime
    has_api_key: bool

    @classmethod
    def from_config(cls, config: EndpointConfig, settings: Settings) -> "EndpointRead":
        return cls(
            id=config.id,
            api_type=config.api_type,
            name=config.name,
            target_url=config.target_url,
            description=config.description,
            allowed_origins=config.allowed_origins,
            status=config.status,
            last_tested=config.last_tested,
            proxy_id=config.proxy_id,
            proxy_url=settings.proxy_url_for(config.proxy_id),
            created_at=config.created_at,
            has_api_key=bool(config.api_key),
        )


class TestEndpointRequest(APIModel):
    """Ad-hoc test (api_key + api_type [+ target_url]) or a stored one (endpoint_id)."""

    __test__ = False  # not a pytest class

    prompt: str = ""
    api_key: str = ""
    api_type: ApiType = ApiType.OPENAI
    target_url: str = ""
    endpoint_id: str | None = None

    @field_validator("target_url")
    @classmethod
    def check_target_url(cls, value):
        return _check_url(value)
