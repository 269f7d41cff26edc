import uuid

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from corewatch.db.base import Base


def generate_record_id() -> str:
    return uuid.uuid4().hex


class Event(Base):
    """Stored event record. Append-only, immutable once written."""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_record_id)
    event: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    referrer: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    ip: Mapped[str | None] = mapped_column(String(128), nullable=True)
    received_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
