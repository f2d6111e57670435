"""Tests for endpoint_proxy/endpoints/factory.py — get_endpoint_store factory."""

import pytest

import endpoint_proxy.endpoints.factory as factory_mod
from endpoint_proxy.endpoints.dynamodb_store import DynamoDBEndpointStore
from endpoint_proxy.endpoints.sql_store import SQLEndpointStore
from endpoint_proxy.endpoints.store import JSONEndpointStore


@pytest.fixture(autouse=True)
def reset_store_singleton(monkeypatch):
    """Reset the factory singleton between tests."""
    monkeypatch.setattr(factory_mod, "_store", None)
    yield
    monkeypatch.setattr(factory_mod, "_store", None)


class TestGetEndpointStore:

    def test_json_backend(self, override_settings, tmp_path):
        override_settings(
            ENDPOINT_STORE_BACKEND="json",
            ENDPOINT_STORE_PATH=str(tmp_path / "endpoints.json"),
        )
        assert isinstance(factory_mod.get_endpoint_store(), JSONEndpointStore)

    def test_sql_backend(self, override_settings, tmp_path):
        override_settings(
            ENDPOINT_STORE_BACKEND="sql",
            DATABASE_URL=f"sqlite:///{tmp_path / 'endpoints.db'}",
        )
        assert isinstance(factory_mod.get_endpoint_store(), SQLEndpointStore)

    def test_dynamodb_backend(self, override_settings):
        override_settings(ENDPOINT_STORE_BACKEND="dynamodb", DYNAMODB_TABLE_NAME="tbl")
        store = factory_mod.get_endpoint_store()
        assert isinstance(store, DynamoDBEndpointStore)
        assert store._table_name == "tbl"

    def test_singleton_returns_same_instance(self, override_settings, tmp_path):
        override_settings(
            ENDPOINT_STORE_BACKEND="json",
            ENDPOINT_STORE_PATH=str(tmp_path / "endpoints.json"),
        )
        assert factory_mod.get_endpoint_store() is factory_mod.get_endpoint_store()

    def test_encryption_key_wires_cipher(self, override_settings, tmp_path):
        from cryptography.fernet import Fernet

        override_settings(
            ENDPOINT_STORE_BACKEND="json",
            ENDPOINT_STORE_PATH=str(tmp_path / "endpoints.json"),
            API_KEY_ENCRYPTION_KEY=Fernet.generate_key().decode(),
        )
        assert factory_mod.get_endpoint_store()._cipher.enabled

    def test_unknown_backend(self, override_settings):
        override_settings(ENDPOINT_STORE_BACKEND="redis")
        with pytest.raises(ValueError, match="Unknown endpoint store backend"):
            factory_mod.get_endpoint_store()
