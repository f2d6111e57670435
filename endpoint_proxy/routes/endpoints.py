"""CRUD routes for endpoint configurations."""

from dataclasses import replace

from fastapi import APIRouter, Depends, Response

from endpoint_proxy.config.settings import Settings, get_settings
from endpoint_proxy.endpoints.factory import get_endpoint_store
from endpoint_proxy.endpoints.models import (
    ApiType,
    EndpointConfig,
    EndpointStatus,
    generate_endpoint_id,
    generate_proxy_id,
    is_valid_proxy_id,
)
from endpoint_proxy.endpoints.store import EndpointStore, ProxyIdConflict
from endpoint_proxy.errors import NotFoundError, UnsupportedProviderError, ValidationError
from endpoint_proxy.logging.audit import audit
from endpoint_proxy.schemas import EndpointCreate, EndpointRead, EndpointUpdate

router = APIRouter(prefix="/endpoints", tags=["endpoints"])


async def issue_proxy_id(store: EndpointStore) -> str:
    """Mint a proxy id that no stored endpoint uses yet."""
    while True:
        proxy_id = generate_proxy_id()
        if await store.get_by_proxy_id(proxy_id) is None:
            return proxy_id


def _require_target_url(api_type: str, target_url: str) -> None:
    try:
        tag = ApiType(api_type)
    except ValueError:
        raise UnsupportedProviderError(api_type)
    if tag.uses_target_url and not target_url:
        raise ValidationError(f"targetUrl is required for {api_type} endpoints")


@router.get("", response_model=list[EndpointRead])
async def list_endpoints(
    store: EndpointStore = Depends(get_endpoint_store),
    settings: Settings = Depends(get_settings),
):
    return [EndpointRead.from_config(c, settings) for c in await store.list_all()]


@router.get("/{endpoint_id}", response_model=EndpointRead)
async def get_endpoint(
    endpoint_id: str,
    store: EndpointStore = Depends(get_endpoint_store),
    settings: Settings = Depends(get_settings),
):
    config = await store.get(endpoint_id)
    if config is None:
        raise NotFoundError()
    return EndpointRead.from_config(config, settings)


@router.post("", response_model=EndpointRead, status_code=201)
async def create_endpoint(
    payload: EndpointCreate,
    store: EndpointStore = Depends(get_endpoint_store),
    settings: Settings = Depends(get_settings),
):
    _require_target_url(payload.api_type.value, payload.target_url)

    if payload.proxy_id:
        if not is_valid_proxy_id(payload.proxy_id):
            raise ValidationError("proxyId must be at least 10 alphanumeric characters")
        if await store.get_by_proxy_id(payload.proxy_id) is not None:
            raise ValidationError("proxyId is already in use")
        proxy_id = payload.proxy_id
    else:
        proxy_id = await issue_proxy_id(store)

    config = EndpointConfig(
        id=generate_endpoint_id(),
        api_type=payload.api_type.value,
        name=payload.name,
        proxy_id=proxy_id,
        target_url=payload.target_url,
        api_key=payload.api_key,
        description=payload.description,
        allowed_origins=payload.allowed_origins,
        status=EndpointStatus.NOT_TESTED.value,
    )
    while True:
        try:
            await store.create(config)
            break
        except ProxyIdConflict:
            # Lost a race for the id between the check above and the insert
            if payload.proxy_id:
                raise ValidationError("proxyId is already in use")
            config = replace(config, proxy_id=await issue_proxy_id(store))

    audit("Endpoint created", endpoint_id=config.id, api_type=config.api_type)
    return EndpointRead.from_config(config, settings)


@router.put("/{endpoint_id}", response_model=EndpointRead)
async def update_endpoint(
    endpoint_id: str,
    payload: EndpointUpdate,
    store: EndpointStore = Depends(get_endpoint_store),
    settings: Settings = Depends(get_settings),
):
    current = await store.get(endpoint_id)
    if current is None:
        raise NotFoundError()

    changes = payload.changes()
    _require_target_url(
        changes.get("api_type", current.api_type),
        changes.get("target_url", current.target_url),
    )

    updated = await store.update(endpoint_id, changes) if changes else current
    if updated is None:
        raise NotFoundError()

    audit("Endpoint updated", endpoint_id=endpoint_id, fields=sorted(changes))
    return EndpointRead.from_config(updated, settings)


@router.delete("/{endpoint_id}", status_code=204)
async def delete_endpoint(endpoint_id: str, store: EndpointStore = Depends(get_endpoint_store)):
    if not await store.delete(endpoint_id):
        raise NotFoundError()
    audit("Endpoint deleted", endpoint_id=endpoint_id)
    return Response(status_code=204)
