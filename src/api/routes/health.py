"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from api.v1.dependencies import get_email_provider
from core.config import settings
from infrastructure.database.session import get_async_session
from infrastructure.email.provider import IEmailProvider
from infrastructure.email.smtp_provider import SMTPEmailProvider

router = APIRouter(tags=["health"])

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None
    email_transport: str | None = None


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """
    Basic health check for load balancers.

    Returns service status without checking dependencies.
    """
    return HealthResponse(
        status="healthy",
        version=VERSION,
        timestamp=datetime.now(UTC).isoformat(),
        environment=settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(
    db: AsyncSession = Depends(get_async_session),
    email_provider: IEmailProvider = Depends(get_email_provider),
) -> HealthResponse:
    """
    Detailed health check including database connectivity.

    Also reports which email transport is active: ``smtp`` when a host is
    configured, ``log_only`` when emails are only written to the log.
    """
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    transport = "smtp" if isinstance(email_provider, SMTPEmailProvider) else "log_only"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        version=VERSION,
        timestamp=datetime.now(UTC).isoformat(),
        environment=settings.app_env,
        database=db_status,
        email_transport=transport,
    )
