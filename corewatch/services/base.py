from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from corewatch.db.base import Base
from corewatch.models.event import Event

RecordId = str


class Store(Protocol):
    """Append-only storage collaborator used by the persistence sink."""

    async def insert(self, table: str, fields: dict[str, Any]) -> RecordId: ...


class SqlAlchemyStore:
    """Store backed by async SQLAlchemy sessions.

    Each insert runs in its own session and is committed before the id is
    returned. A failed commit raises and the session rolls back on close.
    """

    models: dict[str, type[Base]] = {Event.__tablename__: Event}

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def insert(self, table: str, fields: dict[str, Any]) -> RecordId:
        """Insert one row into ``table``, commit, and return its generated id."""
        model = self.models[table]
        async with self.session_factory() as session:
            db_obj = model(**fields)
            session.add(db_obj)
            await session.flush()
            record_id = str(db_obj.id)  # type: ignore[attr-defined]
            await session.commit()
        return record_id
