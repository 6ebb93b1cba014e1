"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from infrastructure.database.session import get_async_session

router = APIRouter(tags=["health"])

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None
    webhook: str | None = None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _database_status(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        return f"unhealthy: {type(e).__name__}"
    return "healthy"


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Answer without touching any dependency."""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        timestamp=_now(),
        environment=settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Readiness check",
)
async def detailed_health_check(
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """
    Database connectivity and webhook configuration.

    An unconfigured webhook secret means every Telegram update is refused
    with 503, so it degrades the status like an unreachable database.
    """
    database = await _database_status(db)
    webhook = "configured" if settings.telegram_webhook_secret else "unconfigured"
    ready = database == "healthy" and webhook == "configured"

    return HealthResponse(
        status="healthy" if ready else "degraded",
        version=VERSION,
        timestamp=_now(),
        environment=settings.app_env,
        database=database,
        webhook=webhook,
    )
