# FastAPI application factory with lifespan management.
# Entrypoint: python -m clientinfo  (or: uvicorn clientinfo.main:create_app --factory --port 3000)

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from starlette.staticfiles import StaticFiles

from clientinfo.config import Settings, get_settings
from clientinfo.exceptions import register_exception_handlers
from clientinfo.geolocation import GeolocationClient
from clientinfo.logging_config import configure_logging
from clientinfo.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from clientinfo.rate_limit import build_limiter
from clientinfo.routes import client_info, health
from clientinfo.routes import metrics as metrics_routes
from clientinfo.services.client_info import ClientInfoService

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup creates the outbound client; shutdown closes it and drops limiter state."""
    settings: Settings = app.state.settings

    geolocation = GeolocationClient(
        base_url=settings.geo_provider_url,
        timeout_seconds=settings.geo_timeout_seconds,
    )
    app.state.geolocation = geolocation
    app.state.client_info_service = ClientInfoService(
        geolocation, trust_proxy_headers=settings.trust_proxy_headers
    )

    logger.info(
        "server_started",
        url=f"http://localhost:{settings.port}",
        geo_provider=geolocation.base_url,
        rate_limit=settings.rate_limit,
    )

    yield

    # Runs after uvicorn has drained in-flight requests.
    await geolocation.aclose()
    app.state.limiter.reset()
    logger.info("server_stopped")


def _mount_static(app: FastAPI, settings: Settings) -> None:
    """Mount the static root last so API routes take precedence."""
    if not settings.static_dir.is_dir():
        logger.warning("static_dir_not_found", static_dir=str(settings.static_dir))
        return
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory. Invoked by: uvicorn clientinfo.main:create_app --factory"""
    settings = settings or get_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title="Client Info",
        description="Caller IP, user agent and coarse geolocation",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings

    app.state.limiter = build_limiter()

    # Middleware order (Starlette applies in reverse): SecurityHeaders → RequestContext
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(
        client_info.build_router(app.state.limiter, settings.rate_limit),
        tags=["client-info"],
    )
    app.include_router(metrics_routes.router, tags=["metrics"])
    _mount_static(app, settings)

    return app
