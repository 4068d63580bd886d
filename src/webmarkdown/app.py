"""FastAPI application factory for the URL to Markdown service."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from . import __version__
from .api.routes import router as api_router
from .api.schemas import HealthResponse
from .config import get_settings
from .conversion import converter_from_settings
from .errors import ServiceError, request_validation_handler, service_error_handler
from .fetcher import build_client
from .logging import configure_logging
from .monitoring import ensure_metrics_server

STATIC_DIR = Path(__file__).resolve().parent / "static"

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.logging)
    converter = converter_from_settings(settings)

    if settings.monitoring.enabled:
        ensure_metrics_server(settings.monitoring.prometheus_port)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.http_client = build_client(settings.fetch)
        logger.info("service_started", service=settings.service_name, converter=converter.slug)
        try:
            yield
        finally:
            await app.state.http_client.aclose()
            logger.info("service_stopped", service=settings.service_name)

    app = FastAPI(
        title="webmarkdown",
        description="Convert any web page into clean Markdown.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.converter = converter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(api_router, prefix="/api")

    static_dir = Path(settings.static_dir) if settings.static_dir else STATIC_DIR
    app.mount("/static", StaticFiles(directory=static_dir), name="static")

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        return FileResponse(static_dir / "index.html")

    @app.get("/healthz", response_model=HealthResponse)
    async def root_health() -> HealthResponse:
        return HealthResponse()

    return app


app = create_app()
