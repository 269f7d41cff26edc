import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from corewatch.core.config import settings
from corewatch.core.exceptions import ServiceUnavailableError
from corewatch.db.session import get_session_factory
from corewatch.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthResponse)
async def health_check():
    """Liveness check. Reports which sink this gateway instance uses."""
    return HealthResponse(message="healthy", sink=settings.GATEWAY_SINK)


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Readiness check for the configured sink.

    The store sink needs a working database connection; the relay sink needs
    the shared ingest secret and never opens a session.
    """
    if settings.GATEWAY_SINK == "relay":
        if not settings.COREWATCH_INGEST_SECRET:
            logger.error("Readiness check failed: COREWATCH_INGEST_SECRET is not set")
            raise ServiceUnavailableError(detail="Service not ready")
        return HealthResponse(message="ready", sink="relay")

    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception:
        logger.error("Readiness check failed: database connection error")
        raise ServiceUnavailableError(detail="Service not ready") from None
    return HealthResponse(message="ready", sink="store")
