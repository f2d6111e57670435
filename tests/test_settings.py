"""Tests for endpoint_proxy/config/settings.py."""

from endpoint_proxy.config.settings import get_settings


class TestSettings:

    def test_defaults(self, override_settings):
        override_settings()
        s = get_settings()
        assert s.public_base_url == "http://localhost:3001"
        assert s.endpoint_store_backend == "sql"
        assert s.database_url == "sqlite:///endpoints.db"
        assert s.upstream_timeout == 30.0
        assert s.log_level == "INFO"

    def test_cors_origins_list(self, override_settings):
        override_settings(CORS_ORIGINS="https://a.example.com, https://b.example.com ,")
        s = get_settings()
        assert s.cors_origins_list == ["https://a.example.com", "https://b.example.com"]

    def test_proxy_url_for(self, override_settings):
        override_settings(PUBLIC_BASE_URL="https://proxy.example.com/")
        s = get_settings()
        assert s.proxy_url_for("AbCdEf1234") == "https://proxy.example.com/proxy/AbCdEf1234"

    def test_env_override(self, override_settings):
        override_settings(
            ENDPOINT_STORE_BACKEND="json",
            UPSTREAM_TIMEOUT="5",
            LOG_LEVEL="DEBUG",
        )
        s = get_settings()
        assert s.endpoint_store_backend == "json"
        assert s.upstream_timeout == 5.0
        assert s.log_level == "DEBUG"
