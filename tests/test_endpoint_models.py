"""Tests for endpoint_proxy/endpoints/models.py."""

from datetime import datetime, timezone

from endpoint_proxy.endpoints.models import (
    PROXY_ID_ALPHABET,
    ApiType,
    EndpointConfig,
    EndpointStatus,
    generate_endpoint_id,
    generate_proxy_id,
    is_valid_proxy_id,
)
from tests.conftest import make_endpoint


class TestProxyId:

    def test_length_and_alphabet(self):
        proxy_id = generate_proxy_id()
        assert len(proxy_id) == 10
        assert all(c in PROXY_ID_ALPHABET for c in proxy_id)

    def test_alphabet_is_url_safe_and_large_enough(self):
        assert len(set(PROXY_ID_ALPHABET)) >= 36
        assert all(c.isascii() and c.isalnum() for c in PROXY_ID_ALPHABET)

    def test_uniqueness(self):
        assert len({generate_proxy_id() for _ in range(1000)}) == 1000

    def test_validation(self):
        assert is_valid_proxy_id("AbCdEf1234")
        assert is_valid_proxy_id(generate_proxy_id(16))
        assert not is_valid_proxy_id("short")
        assert not is_valid_proxy_id("has/slash00")
        assert not is_valid_proxy_id("with space1")


class TestEndpointId:

    def test_url_safe(self):
        endpoint_id = generate_endpoint_id()
        assert len(endpoint_id) == 21
        assert all(c.isalnum() or c in "-_" for c in endpoint_id)


class TestApiType:

    def test_all_seven_tags(self):
        assert {t.value for t in ApiType} == {
            "openai", "anthropic", "cohere", "google-ai",
            "azure-openai", "huggingface", "custom",
        }

    def test_target_url_types(self):
        assert not ApiType.OPENAI.uses_target_url
        assert not ApiType.ANTHROPIC.uses_target_url
        assert not ApiType.COHERE.uses_target_url
        assert ApiType.GOOGLE_AI.uses_target_url
        assert ApiType.AZURE_OPENAI.uses_target_url
        assert ApiType.HUGGINGFACE.uses_target_url
        assert ApiType.CUSTOM.uses_target_url

    def test_only_custom_allows_missing_key(self):
        assert not ApiType.CUSTOM.requires_api_key
        assert all(t.requires_api_key for t in ApiType if t is not ApiType.CUSTOM)


class TestOriginAllowed:

    def test_no_origin_header_always_allowed(self):
        config = make_endpoint(allowed_origins=["https://app.example.com"])
        assert config.origin_allowed(None)
        assert config.origin_allowed("")

    def test_wildcard_and_empty_list(self):
        assert make_endpoint(allowed_origins=["*"]).origin_allowed("https://evil.example")
        assert make_endpoint(allowed_origins=[]).origin_allowed("https://evil.example")

    def test_listed_origin(self):
        config = make_endpoint(allowed_origins=["https://app.example.com/"])
        assert config.origin_allowed("https://app.example.com")
        assert not config.origin_allowed("https://other.example.com")


class TestRecordConversion:

    def test_defaults(self):
        config = EndpointConfig(id="x", api_type="openai", name="n", proxy_id="AbCdEf1234")
        assert config.status == EndpointStatus.NOT_TESTED.value
        assert config.last_tested is None
        assert config.allowed_origins == ["*"]
        assert config.created_at.tzinfo is not None

    def test_record_round_trip(self):
        config = make_endpoint(
            status="operational",
            last_tested=datetime(2024, 5, 2, 9, 0, tzinfo=timezone.utc),
        )
        assert EndpointConfig.from_record(config.to_record()) == config

    def test_record_is_json_friendly(self):
        record = make_endpoint().to_record()
        assert record["created_at"] == "2024-05-01T12:00:00+00:00"
        assert record["last_tested"] is None

    def test_naive_timestamps_become_utc(self):
        record = make_endpoint().to_record()
        record["created_at"] = datetime(2024, 5, 1, 12, 0)
        config = EndpointConfig.from_record(record)
        assert config.created_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
