"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from datacompliance.api.middleware import (
    ErrorHandlingMiddleware,
    RequestContextMiddleware,
    RequestLoggingMiddleware,
)
from datacompliance.api.routers import health_router, v1_router
from datacompliance.config.settings import Settings, get_settings
from datacompliance.core.logging import get_logger
from datacompliance.db.config import create_engine, create_session_factory
from datacompliance.service import DataComplianceService, build_service

logger = get_logger("datacompliance.api")


def create_app(
    settings: Settings | None = None,
    service: DataComplianceService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)
        service: Pre-built service; when omitted, one is built at startup
            from settings.DATABASE_URL

    Returns:
        Configured FastAPI application

    Example:
        # Testing
        app = create_app(settings=test_settings, service=service)

        # Run with uvicorn
        uvicorn datacompliance.api.app:create_app --factory
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Data Compliance API",
        description="Erasure, export and audit of users' personal data",
        version="0.1.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    # Store settings and service on app state for access in dependencies
    app.state.settings = settings
    app.state.service = service

    _configure_middleware(app, settings)
    _configure_routers(app)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the service at startup unless one was injected; dispose the engine at shutdown."""
    engine = None
    if app.state.service is None:
        settings: Settings = app.state.settings
        engine = create_engine(settings)
        app.state.service = build_service(settings, create_session_factory(engine))
        logger.info("service_initialized", environment=settings.ENVIRONMENT)

    yield

    if engine is not None:
        await engine.dispose()
        logger.info("database_connections_closed")


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Middleware order (outermost to innermost execution):
    1. RequestLoggingMiddleware - Logs all requests
    2. ErrorHandlingMiddleware - Converts exceptions to HTTP responses
    3. RequestContextMiddleware - Binds the actor and correlation ID

    Note: Middleware is added in reverse order because Starlette
    processes them from last-added to first-added.
    """
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.DEBUG)
    app.add_middleware(RequestLoggingMiddleware)


def _configure_routers(app: FastAPI) -> None:
    app.include_router(health_router)
    app.include_router(v1_router)
