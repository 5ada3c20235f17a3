"""Health check endpoints."""

from fastapi import APIRouter

from workshop_pay.config import get_settings
from workshop_pay.core.database import AsyncCassandraConnection


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness() -> dict[str, str | bool]:
    """Readiness probe - reports whether the registrant store is reachable.

    Always 200: the service keeps serving without a database and fails the
    affected requests individually.
    """
    settings = get_settings()
    database = AsyncCassandraConnection.is_connected()
    return {
        "status": "ready" if database else "degraded",
        "database": database,
        "environment": settings.environment,
        "webhook_verification": settings.webhook_verification_enabled,
    }


@router.get("")
async def health() -> dict[str, str]:
    """General health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
