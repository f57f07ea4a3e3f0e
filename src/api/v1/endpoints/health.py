"""Health check endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from core.cache import RedisCache
from core.database import get_db
from core.config import get_settings
from core.dependencies import get_cache
from schemas.common import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
):
    """Check system health."""
    settings = get_settings()
    services = {"api": "ok"}

    # Check database
    try:
        await db.execute(text("SELECT 1"))
        services["database"] = "ok"
    except Exception:
        services["database"] = "error"

    services["redis"] = "ok" if await cache.ping() else "error"

    return HealthResponse(
        status="ok" if all(v == "ok" for v in services.values()) else "degraded",
        version=settings.VERSION,
        services=services,
    )
