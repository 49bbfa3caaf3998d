from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from passport.api.auth import router as auth_router
from passport.api.credentials import router as credentials_router
from passport.api.health import router as health_router
from passport.api.institutions import router as institutions_router
from passport.api.metrics_endpoint import router as metrics_router
from passport.core.config import Settings, load_settings
from passport.core.errors import PassportError
from passport.core.logging import setup_logging
from passport.middleware.metrics import MetricsMiddleware
from passport.middleware.request_context import (
    RequestContextMiddleware,
    install_request_context_filter,
)
from passport.services.container import ServiceContainer

logger = logging.getLogger(__name__)


async def passport_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, PassportError)
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def create_app(
    settings: Settings,
    *,
    container: ServiceContainer | None = None,
) -> FastAPI:
    """Build the application. Tests pass their own Settings/container."""
    services = container or ServiceContainer(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        try:
            yield
        finally:
            await services.aclose()

    app = FastAPI(
        title="skills-passport",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
    )
    app.state.container = services

    app.add_exception_handler(PassportError, passport_error_handler)

    allow_all = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        # Browsers reject credentialed requests against a wildcard origin.
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware execution order: last-added runs first (outermost layer).
    # RequestContext (outermost) → Metrics → CORS → route handler
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(institutions_router)
    app.include_router(credentials_router)

    logger.info(
        "skills-passport configured  env=%s content_store=%s ledger=%s accreditation=%s",
        settings.app_env,
        services.content_store.mode,
        services.ledger.mode,
        "required" if settings.require_accreditation else "off",
    )
    return app


def _build_default_app() -> FastAPI:
    settings = load_settings()
    # Configure logging before anything else runs.
    setup_logging(settings.log_level, json_format=settings.log_json)
    install_request_context_filter()
    return create_app(settings)


app = _build_default_app()
