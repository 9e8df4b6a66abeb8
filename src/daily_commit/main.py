"""
FastAPI application entry point for the Daily Commit service.
"""

from typing import Optional

import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from daily_commit.api.error_handlers import EXCEPTION_HANDLERS
from daily_commit.api.middleware import RequestTracingMiddleware
from daily_commit.api.routes import router
from daily_commit.config import Settings, settings as default_settings, validate_environment
from daily_commit.logging_config import configure_logging
from daily_commit.runtime import JobRuntime

logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    runtime: Optional[JobRuntime] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (defaults to the module-level instance)
        runtime: Pre-built runtime (tests); built from settings when omitted

    Returns:
        Configured FastAPI app with ``app.state.runtime`` set
    """
    settings = settings or default_settings
    runtime = runtime or JobRuntime.build(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Rewrites a text file in a git repository, commits and pushes it",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.runtime = runtime

    # Request tracing middleware (must be first for request_id in all logs)
    app.add_middleware(RequestTracingMiddleware)

    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    app.include_router(router, tags=["job"])

    @app.on_event("startup")
    async def startup():
        """Application startup - report configuration completeness."""
        logger.info(
            "Application startup",
            version=settings.APP_VERSION,
            environment=settings.ENVIRONMENT,
            credential_store_url=settings.CREDENTIAL_STORE_URL,
            workdir=settings.WORKDIR,
        )
        env_check = validate_environment(settings)
        if not env_check.valid:
            logger.error("Missing required environment variables", missing=env_check.missing)
        for warning in env_check.warnings:
            logger.warning("Configuration warning", warning=warning)
        logger.info("Application startup complete")

    @app.on_event("shutdown")
    async def shutdown():
        """Application shutdown - flush metrics and close clients."""
        logger.info("Application shutdown")
        await app.state.runtime.lifecycle.force_send_metrics()
        await app.state.runtime.aclose()
        logger.info("Application shutdown complete")

    if settings.PROMETHEUS_ENABLED:
        Instrumentator().instrument(app).expose(app)

    @app.get("/")
    async def root():
        """Root endpoint with API documentation links."""
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
            "commit": "/commit",
            "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
        }

    return app


# Configure structured logging before the app is built
configure_logging(default_settings.LOG_LEVEL, default_settings.ENVIRONMENT)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "daily_commit.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not default_settings.is_production,
    )
