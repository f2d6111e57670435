"""LLM Endpoint Proxy — FastAPI application entry point.

Register upstream LLM endpoint configurations, test them, and call them
through stable proxy URLs that keep the upstream API key server-side.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from endpoint_proxy.config.settings import get_settings
from endpoint_proxy.errors import ProxyError
from endpoint_proxy.logging.audit import setup_logging
from endpoint_proxy.proxy.handler import close_client
from endpoint_proxy.routes import endpoints, proxy

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    logger = setup_logging()
    settings = get_settings()
    if not settings.api_key_encryption_key:
        logger.warning("API_KEY_ENCRYPTION_KEY not set; upstream API keys are stored in plaintext")
    logger.info(
        "Endpoint proxy started",
        extra={"audit_data": {"store_backend": settings.endpoint_store_backend}},
    )
    yield
    await close_client()
    logger.info("Endpoint proxy stopped")


app = FastAPI(
    title="LLM Endpoint Proxy",
    description="Register, test and proxy LLM provider endpoints",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first['msg']}" if location else first["msg"]
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}


app.include_router(endpoints.router)
app.include_router(proxy.router)
