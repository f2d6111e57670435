"""Tests for endpoint_proxy/proxy/docs.py — proxy usage documentation."""

from endpoint_proxy.config.settings import Settings
from endpoint_proxy.proxy.docs import describe_proxy, prefers_html, render_html
from tests.conftest import make_endpoint


class TestPrefersHtml:

    def test_browser_accept_header(self):
        assert prefers_html("text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8")

    def test_json_clients(self):
        assert not prefers_html("application/json")
        assert not prefers_html("*/*")
        assert not prefers_html(None)
        assert not prefers_html("")

    def test_quality_values(self):
        assert not prefers_html("text/html;q=0.5, application/json")
        assert prefers_html("application/json;q=0.5, text/html")
        assert not prefers_html("text/html;q=0")


class TestDescribeProxy:

    def test_fields(self):
        settings = Settings(public_base_url="https://proxy.example.com")
        doc = describe_proxy(make_endpoint(), settings)
        assert doc["method"] == "POST"
        assert doc["url"] == "https://proxy.example.com/proxy/AbCdEf1234"
        assert doc["apiType"] == "cohere"
        assert doc["body"] == {"prompt": "Hello, this is a test message."}
        assert "https://proxy.example.com/proxy/AbCdEf1234" in doc["example"]

    def test_never_exposes_api_key(self):
        doc = describe_proxy(make_endpoint(api_key="sk-very-secret"), Settings())
        assert "sk-very-secret" not in repr(doc)

    def test_custom_mentions_verbatim_forwarding(self):
        config = make_endpoint(api_type="custom", target_url="https://x/y")
        doc = describe_proxy(config, Settings())
        assert "verbatim" in doc["bodyNotes"]


class TestRenderHtml:

    def test_escapes_user_text(self):
        config = make_endpoint(name="<script>alert(1)</script>")
        page = render_html(describe_proxy(config, Settings()))
        assert "<script>alert(1)</script>" not in page
        assert "&lt;script&gt;" in page
        assert page.startswith("<!DOCTYPE html>")
