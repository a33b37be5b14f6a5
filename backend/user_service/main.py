from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .clients.supabase import build_http_client
from .config import Settings, get_settings
from .errors import ServiceError
from .middleware import record_request_metrics
from .routes.users import router as users_router
from .telemetry.metrics import get_registry, set_base_labels


logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


async def _service_error_handler(request: Request, exc: ServiceError) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> PlainTextResponse:
    logger.error(
        "request_validation_failed",
        extra={"path": request.url.path, "errors": exc.errors()},
    )
    return PlainTextResponse(
        "Invalid request body", status_code=status.HTTP_400_BAD_REQUEST
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory for the user service.

    Settings are resolved once here, so a missing SUPABASE_URL or
    SUPABASE_API_KEY stops the process before it serves anything. Handlers
    read them back from ``app.state`` through dependencies.
    """
    settings = settings or get_settings()
    set_base_labels(settings.service, settings.env)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.http_client = build_http_client(settings)
        logger.info(
            "service_started",
            extra={"env": settings.env, "supabase_url": settings.SUPABASE_URL},
        )
        try:
            yield
        finally:
            await app.state.http_client.aclose()
            logger.info("service_stopped")

    app = FastAPI(title="user-service", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.CORS_ALLOW_ORIGINS),
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=["*"],
    )
    app.middleware("http")(record_request_metrics)

    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(users_router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return Response(generate_latest(get_registry()), media_type=CONTENT_TYPE_LATEST)

    return app
