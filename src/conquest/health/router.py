"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from conquest.config import get_settings
from conquest.database import get_session
from conquest.db.models import VersionMaster
from conquest.redis_client import redis_status

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Readiness check: database, active master version and Redis."""
    checks: dict[str, object] = {}

    try:
        result = await db.execute(select(VersionMaster.master_version).where(VersionMaster.status == 1))
        version = result.scalars().first()
        checks["database"] = "ok"
        checks["master_version"] = version if version is not None else "missing"
    except SQLAlchemyError as exc:
        checks["database"] = f"error: {exc}"

    checks["redis"] = await redis_status()

    all_ok = checks.get("database") == "ok" and checks.get("redis") == "ok"
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
