"""FastAPI application factory for the Garage API.

This module creates and configures the FastAPI application with:
- Lifespan management for startup/shutdown events
- Middleware configuration (CORS, request ID, logging)
- Exception handlers
- API routers
"""

import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis

from garage.config import Settings, get_settings
from garage.core.exceptions import GarageError, ValidationError
from garage.core.database import Database
from garage.core.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)
from garage.core.password import PasswordHasher
from garage.schemas.common import HealthCheckResponse
from garage.services.cache import CacheService

# Initialize logger for this module
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events.

    Handles initialization and cleanup of:
    - Logging configuration
    - Database connection pool (and table creation when enabled)
    - Redis client for the item cache
    - Password hashing threads

    Args:
        app: The FastAPI application instance

    Yields:
        None: Control back to the application
    """
    settings: Settings = app.state.settings

    # ========================================
    # Startup
    # ========================================
    configure_logging(settings)
    startup_logger = get_logger(__name__)

    app.state.db = Database.from_settings(settings)
    if settings.database_create_tables:
        await app.state.db.create_tables()

    # Redis is optional: without it every cached read falls through
    app.state.redis = Redis.from_url(settings.redis_url) if settings.redis_url else None

    app.state.password_hasher = PasswordHasher.from_settings(settings)

    # Log startup
    startup_logger.info(
        "Application starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.app_env.value,
        debug=settings.debug,
        cache_enabled=settings.cache_enabled,
    )

    yield

    # ========================================
    # Shutdown
    # ========================================
    app.state.password_hasher.close()

    if app.state.redis is not None:
        await app.state.redis.aclose()

    await app.state.db.close()

    startup_logger.info("Application shutting down", app_name=settings.app_name)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the application factory function that creates a fully configured
    FastAPI instance with all middleware, routes, and exception handlers.

    Args:
        settings: Optional settings override for testing

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Manage users, cars and parts. Single car and part lookups are "
            "served through a Redis cache; writes require a bearer token."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Store settings in app state for access in lifespan and dependencies
    app.state.settings = settings
    app.state.redis = None

    # ========================================
    # Middleware
    # ========================================
    configure_middleware(app, settings)

    # ========================================
    # Exception Handlers
    # ========================================
    configure_exception_handlers(app)

    # ========================================
    # Routes
    # ========================================
    configure_routes(app)

    return app


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware.

    Args:
        app: The FastAPI application instance
        settings: Application settings
    """
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next: Any) -> Any:
        """Log each request under its X-Request-ID."""
        # Generate or extract request ID
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id

        bind_request_context(request_id)

        request_logger = get_logger("garage.request")
        start_time = time.perf_counter()

        request_logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            query=str(request.query_params) if request.query_params else None,
        )

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000

            request_logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            # Add request ID to response headers
            response.headers["X-Request-ID"] = request_id

            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            request_logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                error=str(exc),
            )
            raise

        finally:
            clear_request_context()


def configure_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers.

    Args:
        app: The FastAPI application instance
    """
    exception_logger = get_logger("garage.exceptions")

    @app.exception_handler(GarageError)
    async def garage_exception_handler(
        request: Request, exc: GarageError
    ) -> JSONResponse:
        """Handle Garage custom exceptions with structured error response."""
        request_id = getattr(request.state, "request_id", None)

        # Log at appropriate level based on status code
        if exc.status_code >= 500:
            exception_logger.error(
                "Application error",
                error_code=exc.code,
                error_message=exc.message,
                status_code=exc.status_code,
                path=request.url.path,
            )
        else:
            exception_logger.warning(
                "Client error",
                error_code=exc.code,
                error_message=exc.message,
                status_code=exc.status_code,
                path=request.url.path,
            )

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(request_id=request_id),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed input with the same error format as other 400s."""
        request_id = getattr(request.state, "request_id", None)
        error = ValidationError(
            message="Request validation failed",
            details={"errors": jsonable_encoder(exc.errors())},
        )

        exception_logger.warning(
            "Client error",
            error_code=error.code,
            status_code=error.status_code,
            path=request.url.path,
        )

        return JSONResponse(
            status_code=error.status_code,
            content=error.to_dict(request_id=request_id),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions with a consistent error response."""
        request_id = getattr(request.state, "request_id", None)

        exception_logger.exception(
            "Unhandled exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "An unexpected error occurred",
                    "request_id": request_id,
                }
            },
        )


def configure_routes(app: FastAPI) -> None:
    """Configure application routes.

    Args:
        app: The FastAPI application instance
    """

    @app.get(
        "/health/live",
        tags=["Health"],
        summary="Liveness probe",
        description="Returns OK if the service is running",
    )
    async def liveness() -> dict[str, str]:
        """Liveness probe for container orchestration."""
        return {"status": "ok"}

    @app.get(
        "/health/ready",
        tags=["Health"],
        response_model=HealthCheckResponse,
        summary="Readiness probe",
        description="Returns OK if the service is ready to accept requests",
    )
    async def readiness(request: Request) -> HealthCheckResponse:
        """Readiness probe checking dependent services.

        The cache is optional, so an unreachable Redis degrades the service
        instead of failing it.
        """
        db_ok = await request.app.state.db.ping()

        redis = request.app.state.redis
        if redis is None:
            redis_check = "disabled"
        else:
            redis_check = "ok" if await CacheService(redis).ping() else "error"

        if not db_ok:
            overall_status = "error"
        elif redis_check == "error":
            overall_status = "degraded"
        else:
            overall_status = "ok"

        return HealthCheckResponse(
            status=overall_status,
            checks={
                "database": "ok" if db_ok else "error",
                "redis": redis_check,
            },
        )

    # Root endpoint
    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Returns API information",
    )
    async def root(request: Request) -> dict[str, str]:
        """API root endpoint with service information."""
        settings = request.app.state.settings
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health/live",
        }

    # Include API v1 router
    from garage.api.v1.router import router as v1_router

    app.include_router(v1_router, prefix="/api/v1")


# Create the application instance
app = create_app()


def cli() -> None:
    """CLI entry point for running the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "garage.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    cli()
