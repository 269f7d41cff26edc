import logging
import time
from collections.abc import Callable
from typing import Any

from corewatch.core.exceptions import StorageFailure
from corewatch.models.event import Event
from corewatch.schemas.event import ValidEvent
from corewatch.services.base import RecordId, Store

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class EventService:
    """Persistence sink: writes validated events with a server receipt time."""

    def __init__(self, store: Store, clock: Callable[[], int] = now_ms):
        self.store = store
        self.clock = clock

    @staticmethod
    def build_fields(event: ValidEvent, received_at_ms: int) -> dict[str, Any]:
        """Shape the stored record. Absent optional fields are omitted."""
        fields: dict[str, Any] = {"event": event.event}
        for name in ("url", "referrer", "user_agent", "ip"):
            value = getattr(event, name)
            if value is not None:
                fields[name] = value
        fields["received_at_ms"] = received_at_ms
        return fields

    async def persist(self, event: ValidEvent) -> RecordId:
        """Write one record and return the store's identifier.

        The receipt time always comes from this sink's clock. Any store error
        is raised as StorageFailure with the original error chained.
        """
        fields = self.build_fields(event, self.clock())
        try:
            record_id = await self.store.insert(Event.__tablename__, fields)
        except Exception as exc:
            logger.warning("Insert into %s failed: %s", Event.__tablename__, exc)
            raise StorageFailure() from exc
        logger.debug("Persisted event %s as %s", event.event, record_id)
        return record_id
