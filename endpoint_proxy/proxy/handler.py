"""Provider dispatch and status recording."""

import logging

from endpoint_proxy.endpoints.models import EndpointConfig, EndpointStatus, utcnow
from endpoint_proxy.endpoints.store import EndpointStore
from endpoint_proxy.errors import ProxyError
from endpoint_proxy.logging.audit import RequestTimer, audit, get_audit_logger
from endpoint_proxy.providers.base import ProviderResponse
from endpoint_proxy.providers.registry import close_all_providers, get_provider


async def invoke(config: EndpointConfig, prompt: str, body: dict | None = None) -> ProviderResponse:
    """Route one request to the provider selected by config.api_type.

    Raises UnsupportedProviderError before any outbound call for an
    unknown tag, and UpstreamError for transport failures.
    """
    provider = get_provider(config.api_type)
    return await provider.forward(config, prompt, body)


async def record_status(store: EndpointStore, endpoint_id: str, succeeded: bool) -> None:
    """Best-effort status write. A failing store is logged, never raised."""
    status = EndpointStatus.OPERATIONAL if succeeded else EndpointStatus.ERROR
    try:
        await store.update_status(endpoint_id, status.value, utcnow())
    except Exception:
        get_audit_logger().exception(
            "Status update failed",
            extra={"audit_data": {"endpoint_id": endpoint_id, "status": status.value}},
        )


async def invoke_and_record(
    store: EndpointStore, config: EndpointConfig, prompt: str, body: dict | None = None
) -> ProviderResponse:
    """Invoke a stored endpoint and record the outcome on it."""
    fields = {"endpoint_id": config.id, "api_type": config.api_type}

    try:
        with RequestTimer() as timer:
            result = await invoke(config, prompt, body)
    except ProxyError as e:
        audit("Proxy request failed", logging.WARNING, **fields, error=e.message)
        await record_status(store, config.id, succeeded=False)
        raise
    except Exception:
        get_audit_logger().exception("Proxy request crashed", extra={"audit_data": fields})
        await record_status(store, config.id, succeeded=False)
        raise

    await record_status(store, config.id, succeeded=result.ok)
    audit(
        "Request proxied",
        **fields,
        upstream_status=result.status_code,
        latency_ms=timer.elapsed_ms,
    )
    return result


async def close_client() -> None:
    """Gracefully close all providers on shutdown."""
    await close_all_providers()
