"""Health check endpoints."""

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import ORJSONResponse
from sqlalchemy import text

from invested.config import get_settings


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> ORJSONResponse:
    """Readiness probe - ready once the database answers."""
    settings = get_settings()
    session_factory = getattr(request.app.state, "session_factory", None)

    database = "unavailable"
    if session_factory is not None:
        try:
            async with session_factory() as session:
                await session.execute(text("SELECT 1"))
            database = "ok"
        except Exception as e:
            logger.warning("readiness_database_check_failed", error=str(e))

    ready = database == "ok"
    return ORJSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "not_ready",
            "database": database,
            "environment": settings.environment,
            "debug": settings.debug,
        },
    )


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
