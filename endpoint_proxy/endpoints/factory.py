"""Factory for endpoint store backends."""

from endpoint_proxy.config.settings import get_settings
from endpoint_proxy.endpoints.store import EndpointStore, JSONEndpointStore
from endpoint_proxy.security.secrets import KeyCipher

_store: EndpointStore | None = None


def get_endpoint_store() -> EndpointStore:
    """Get the endpoint store singleton, building it from settings on first use."""
    global _store
    if _store is not None:
        return _store

    settings = get_settings()
    backend = settings.endpoint_store_backend
    cipher = KeyCipher(settings.api_key_encryption_key)

    if backend == "json":
        _store = JSONEndpointStore(settings.endpoint_store_path, cipher=cipher)
    elif backend == "sql":
        # Lazy import to avoid pulling in SQLAlchemy for other backends
        from endpoint_proxy.endpoints.sql_store import SQLEndpointStore
        _store = SQLEndpointStore(settings.database_url, cipher=cipher)
    elif backend == "dynamodb":
        from endpoint_proxy.endpoints.dynamodb_store import DynamoDBEndpointStore
        _store = DynamoDBEndpointStore(
            table_name=settings.dynamodb_table_name,
            region=settings.aws_region,
            cipher=cipher,
        )
    else:
        raise ValueError(f"Unknown endpoint store backend: {backend}")

    return _store
