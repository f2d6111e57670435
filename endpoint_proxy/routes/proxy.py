"""Test and proxy routes: the only paths that call upstream providers."""

import logging
from dataclasses import replace

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse

from endpoint_proxy.config.settings import Settings, get_settings
from endpoint_proxy.endpoints.factory import get_endpoint_store
from endpoint_proxy.endpoints.models import ApiType, EndpointConfig
from endpoint_proxy.endpoints.store import EndpointStore
from endpoint_proxy.errors import NotFoundError, OriginNotAllowedError, ValidationError
from endpoint_proxy.logging.audit import audit, bind_request_id
from endpoint_proxy.proxy.docs import describe_proxy, prefers_html, render_html
from endpoint_proxy.proxy.handler import invoke, invoke_and_record
from endpoint_proxy.routes.endpoints import issue_proxy_id
from endpoint_proxy.schemas import TestEndpointRequest

router = APIRouter(tags=["proxy"])


def _require_api_key(config: EndpointConfig) -> None:
    try:
        needs_key = ApiType(config.api_type).requires_api_key
    except ValueError:
        return  # unknown tags fail at dispatch, where the status gets recorded
    if needs_key and not config.api_key:
        raise ValidationError("API key is required")


def _with_proxy_url(body, proxy_id: str, settings: Settings) -> dict:
    extra = {"proxy_id": proxy_id, "proxy_url": settings.proxy_url_for(proxy_id)}
    if isinstance(body, dict):
        return {**body, **extra}
    # Non-object upstream bodies (e.g. Hugging Face lists) are nested
    return {"response": body, **extra}


@router.post("/test-endpoint")
async def test_endpoint(
    payload: TestEndpointRequest,
    store: EndpointStore = Depends(get_endpoint_store),
    settings: Settings = Depends(get_settings),
):
    """One-shot test against a live provider.

    With endpointId the stored configuration is used (apiKey, if given,
    overrides the stored key for this call only) and its status is
    recorded. Without it an ad-hoc configuration is built from the
    request, and a fresh proxy id is minted on success so the caller can
    keep it when saving the endpoint.
    """
    if not payload.prompt.strip():
        raise ValidationError("Prompt is required")

    upstream_body = {"prompt": payload.prompt}

    if payload.endpoint_id:
        config = await store.get(payload.endpoint_id)
        if config is None:
            raise NotFoundError()
        if payload.api_key:
            config = replace(config, api_key=payload.api_key)
        _require_api_key(config)
        result = await invoke_and_record(store, config, payload.prompt, upstream_body)
        proxy_id = config.proxy_id
    else:
        config = EndpointConfig(
            id="",
            api_type=payload.api_type.value,
            name="ad-hoc test",
            proxy_id="",
            target_url=payload.target_url,
            api_key=payload.api_key,
        )
        _require_api_key(config)
        result = await invoke(config, payload.prompt, upstream_body)
        proxy_id = await issue_proxy_id(store) if result.ok else ""

    audit(
        "Endpoint tested",
        endpoint_id=payload.endpoint_id or "",
        api_type=config.api_type,
        upstream_status=result.status_code,
    )

    if not result.ok:
        return JSONResponse(status_code=result.status_code, content=result.body)
    return _with_proxy_url(result.body, proxy_id, settings)


@router.post("/proxy/{proxy_id}")
async def proxy_request(
    proxy_id: str,
    request: Request,
    store: EndpointStore = Depends(get_endpoint_store),
):
    """Replay a request through a stored endpoint without exposing its key."""
    rid = bind_request_id(request.headers.get("x-request-id"))

    config = await store.get_by_proxy_id(proxy_id)
    if config is None:
        raise NotFoundError("Proxy configuration not found")

    origin = request.headers.get("origin")
    if not config.origin_allowed(origin):
        audit("Origin rejected", logging.WARNING, endpoint_id=config.id, origin=origin)
        raise OriginNotAllowedError()

    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    prompt = body.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValidationError("Prompt is required")
    _require_api_key(config)

    result = await invoke_and_record(store, config, prompt, body)
    return JSONResponse(
        status_code=result.status_code,
        content=result.body,
        headers={"X-Request-Id": rid},
    )


@router.get("/proxy/{proxy_id}")
async def proxy_docs(
    proxy_id: str,
    request: Request,
    store: EndpointStore = Depends(get_endpoint_store),
    settings: Settings = Depends(get_settings),
):
    """Usage documentation for a proxy URL, negotiated on the Accept header."""
    config = await store.get_by_proxy_id(proxy_id)
    if config is None:
        raise NotFoundError("Proxy configuration not found")

    doc = describe_proxy(config, settings)
    if prefers_html(request.headers.get("accept")):
        return HTMLResponse(render_html(doc))
    return doc
