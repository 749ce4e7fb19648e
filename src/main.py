"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from api.exception_handlers import setup_exception_handlers
from api.middleware.request_context import RequestContextMiddleware
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import settings
from core.logging import setup_logging
from infrastructure.database.session import engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    logger.info(
        "application_started",
        environment=settings.app_env,
        email_transport="smtp" if settings.smtp_host else "log_only",
    )
    yield
    await engine.dispose()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Notification Dispatch Engine\n\n"
            "Turns business activity events into in-app notifications and "
            "emails for the right people.\n\n"
            "### Pipeline\n"
            "- **Resolve**: work out recipients from the event and project data\n"
            "- **Gate**: apply each recipient's notification preferences\n"
            "- **Route**: pick in-app and/or email channels\n"
            "- **Deliver**: store notifications and send emails, "
            "one outcome per recipient and channel"
        ),
        version="1.0.0",
        debug=settings.debug,
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "events",
                "description": "Activity event ingestion and dispatch",
            },
        ],
    )

    # Request tracking (ids + timing)
    app.add_middleware(RequestContextMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
