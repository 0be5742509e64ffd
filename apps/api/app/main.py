import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.routes.attestation import router as attestation_router
from app.api.routes.health import router as health_router
from app.core.client_assets import mount_client_assets
from app.core.config import settings
from app.core.errors import install_error_handlers
from app.core.http import http_boundary_middleware
from app.core.openapi import API_DESCRIPTION, install_custom_openapi
from app.modules.staging.service import get_staging_area
from app.observability.logging import configure_logging
from app.observability.request_logging import request_logging_middleware

logger = logging.getLogger("attestgate.app")


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    get_staging_area().ensure_dirs()
    logger.info(
        "gateway_started",
        extra={"event_name": "gateway_started", "backend": settings.normalized_mode or "auto"},
    )
    yield


app = FastAPI(
    title="Attestgate API",
    summary="Provenance signing and verification gateway for images",
    description=API_DESCRIPTION,
    version="0.1.0",
    license_info={"name": "Apache-2.0"},
    openapi_url="/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    servers=[
        {"url": f"http://localhost:{settings.app_port}", "description": "Local development"},
    ],
    lifespan=lifespan,
)
app.openapi = install_custom_openapi(app)  # type: ignore[method-assign]
install_error_handlers(app)
app.add_middleware(BaseHTTPMiddleware, dispatch=http_boundary_middleware)
app.add_middleware(BaseHTTPMiddleware, dispatch=request_logging_middleware)

app.include_router(health_router)
app.include_router(attestation_router)

if settings.static_path.is_dir():
    mount_client_assets(app, settings.static_path)
