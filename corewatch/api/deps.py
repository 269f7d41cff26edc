from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from corewatch.core.config import settings
from corewatch.core.exceptions import UnauthorizedError
from corewatch.core.security import is_authorized
from corewatch.db.session import get_session_factory
from corewatch.services.base import SqlAlchemyStore
from corewatch.services.event_service import EventService
from corewatch.services.relay_service import RelayConfig, RelayService

EventSink = EventService | RelayService


async def get_event_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> EventService:
    """Dependency providing the persistence sink."""
    return EventService(SqlAlchemyStore(session_factory))


async def get_sink(
    request: Request,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> EventSink:
    """Dependency providing this gateway's one configured sink.

    The relay sink shares the app's HTTP client when the lifespan opened one.
    """
    if settings.GATEWAY_SINK == "relay":
        transport = getattr(request.app.state, "http_client", None)
        return RelayService(RelayConfig.from_settings(settings), transport=transport)
    return EventService(SqlAlchemyStore(session_factory))


async def verify_ingest_secret(
    authorization: str | None = Header(None),
) -> None:
    """Dependency to authenticate collector requests via the shared bearer secret."""
    if not is_authorized(authorization, settings.COREWATCH_INGEST_SECRET):
        raise UnauthorizedError("Invalid ingest credentials")
