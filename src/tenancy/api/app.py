"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tenancy import __version__
from tenancy.api.middleware import (
    AuthenticationMiddleware,
    ErrorHandlingMiddleware,
    RequestContextMiddleware,
    RequestLoggingMiddleware,
)
from tenancy.api.routers import health_router, v1_router
from tenancy.config.settings import Settings, get_settings
from tenancy.config.validation import validate_or_raise
from tenancy.core.cache import CacheTaskRunner
from tenancy.core.logging import get_logger, setup_logging
from tenancy.core.redis import close_redis
from tenancy.db.config import close_db, init_db

logger = get_logger("tenancy.api")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application

    Example:
        # Testing
        app = create_app(Settings(ENVIRONMENT="test", API_SECRET_KEY=SecretStr("test")))

        # Run with uvicorn
        uvicorn tenancy.api.app:create_app --factory
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Tenancy API",
        description="Multi-tenant administration: tenants, quotas, billing, settings",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    app.state.settings = settings
    app.state.cache_runner = CacheTaskRunner()

    _configure_middleware(app, settings)
    _configure_routers(app, settings)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging, configuration check, database check. Shutdown: drain and close."""
    settings: Settings = app.state.settings
    setup_logging(
        log_level=settings.log_level,
        json_format=settings.ENVIRONMENT == "production",
    )
    validate_or_raise(settings)
    logger.info("api_starting", version=__version__, environment=settings.ENVIRONMENT)

    try:
        await init_db()
        logger.info("database_ready")
    except Exception as e:
        logger.warning("database_check_failed", error=str(e))

    yield

    logger.info("api_stopping")
    await app.state.cache_runner.drain()
    try:
        await close_db()
    except Exception as e:
        logger.warning("database_shutdown_failed", error=str(e))
    try:
        await close_redis()
    except Exception as e:
        logger.warning("redis_shutdown_failed", error=str(e))


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Execution order, outermost first:
    1. RequestLoggingMiddleware
    2. ErrorHandlingMiddleware
    3. CORSMiddleware (when origins are configured)
    4. AuthenticationMiddleware
    5. RequestContextMiddleware

    Starlette runs the last added middleware first, so they are added in
    reverse.
    """
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(AuthenticationMiddleware)

    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)


def _configure_routers(app: FastAPI, settings: Settings) -> None:
    app.include_router(health_router)
    app.include_router(v1_router, prefix=settings.API_PREFIX)


# Usage: uvicorn tenancy.api.app:app
app = create_app()
