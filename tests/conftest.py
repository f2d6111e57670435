"""Shared fixtures for the LLM Endpoint Proxy test suite."""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from endpoint_proxy.config.settings import get_settings
from endpoint_proxy.endpoints.models import EndpointConfig
from endpoint_proxy.endpoints.store import JSONEndpointStore


def make_endpoint(**overrides) -> EndpointConfig:
    """Build an EndpointConfig with sensible defaults for tests."""
    fields = {
        "id": "ep-1",
        "api_type": "cohere",
        "name": "Cohere test",
        "proxy_id": "AbCdEf1234",
        "target_url": "",
        "api_key": "k",
        "description": "summarizer",
        "allowed_origins": ["*"],
        "created_at": datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return EndpointConfig(**fields)


def make_httpx_client(status_code: int = 200, payload=None, text: str = "") -> AsyncMock:
    """Mock httpx.AsyncClient whose post() returns a canned response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload if payload is not None else {}

    client = AsyncMock()
    client.post.return_value = response
    client.is_closed = False
    return client


@pytest.fixture
def sample_endpoint() -> EndpointConfig:
    return make_endpoint()


@pytest.fixture
def endpoints_json_file(tmp_path):
    """Create a temp endpoints.json with two records and return its path."""
    data = {
        "endpoints": [
            {
                "id": "ep-openai",
                "api_type": "openai",
                "name": "OpenAI prod",
                "proxy_id": "OpenAi0001",
                "target_url": "",
                "api_key": "sk-openai",
                "description": "",
                "allowed_origins": ["*"],
                "status": "not_tested",
                "last_tested": None,
                "created_at": "2024-05-01T10:00:00+00:00",
            },
            {
                "id": "ep-custom",
                "api_type": "custom",
                "name": "Local model",
                "proxy_id": "Custom0001",
                "target_url": "http://localhost:8080/generate",
                "api_key": "",
                "description": "llama.cpp server",
                "allowed_origins": ["https://app.example.com"],
                "status": "operational",
                "last_tested": "2024-05-02T08:30:00+00:00",
                "created_at": "2024-05-02T10:00:00+00:00",
            },
        ]
    }
    path = tmp_path / "endpoints.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


@pytest.fixture
def json_store(tmp_path) -> JSONEndpointStore:
    return JSONEndpointStore(str(tmp_path / "store.json"))


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(PUBLIC_BASE_URL="https://proxy.example.com")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()
