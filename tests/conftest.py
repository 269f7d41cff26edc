import os
from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set test env vars before importing corewatch modules
TEST_INGEST_SECRET = "test-ingest-secret"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["COREWATCH_INGEST_SECRET"] = TEST_INGEST_SECRET
os.environ["GATEWAY_SINK"] = "store"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"

# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestingSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class RecordingStore:
    """In-memory Store that records every insert and hands out sequential ids."""

    def __init__(self, error: Exception | None = None):
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.error = error

    async def insert(self, table: str, fields: dict[str, Any]) -> str:
        self.calls.append((table, fields))
        if self.error is not None:
            raise self.error
        return f"rec_{len(self.calls)}"


class CollectorStub:
    """httpx.MockTransport handler that records requests and returns a fixed reply.

    ``reply`` may be an int status code or an exception to raise.
    """

    def __init__(self, reply: int | Exception = 200, body: bytes = b""):
        self.reply = reply
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.reply, Exception):
            raise self.reply
        return httpx.Response(self.reply, content=self.body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture(autouse=True)
async def setup_database():
    from corewatch.core.limiter import limiter
    from corewatch.db.base import Base
    from corewatch.models.event import Event  # noqa: F401

    # Disable rate limiting in tests
    limiter.enabled = False

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def gateway_sink(monkeypatch) -> Callable[[str], None]:
    """Switch the gateway's configured sink for one test."""
    from corewatch.core.config import settings

    def _set(sink: str) -> None:
        monkeypatch.setattr(settings, "GATEWAY_SINK", sink)

    return _set


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session for inspecting what the app committed."""
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def session_factory() -> async_sessionmaker[AsyncSession]:
    return TestingSessionLocal


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    from corewatch.db.session import get_session_factory
    from corewatch.main import app

    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def ingest_headers() -> dict:
    return {"Authorization": f"Bearer {TEST_INGEST_SECRET}"}


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def failing_store() -> RecordingStore:
    return RecordingStore(error=RuntimeError("disk I/O error at /var/lib/corewatch.db"))


@pytest.fixture
def make_collector() -> Callable[..., CollectorStub]:
    return CollectorStub


class CommitFailingSession(AsyncSession):
    """Session whose commit fails after the row has been flushed."""

    async def commit(self) -> None:
        raise RuntimeError("commit failed: disk full at /var/lib/corewatch.db")


@pytest.fixture
def commit_failing_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=CommitFailingSession, expire_on_commit=False)


class UnreachableDatabaseSession(AsyncSession):
    """Session whose every statement fails the way a lost connection does."""

    async def execute(self, *args, **kwargs):
        raise ConnectionRefusedError(
            "Connection refused to db.internal.corp:5432 - password auth failed"
        )


@pytest.fixture
def unreachable_database(client: AsyncClient) -> async_sessionmaker[AsyncSession]:
    """Serve the app's sessions from a database that refuses every statement."""
    from corewatch.db.session import get_session_factory
    from corewatch.main import app

    factory = async_sessionmaker(engine, class_=UnreachableDatabaseSession)
    app.dependency_overrides[get_session_factory] = lambda: factory
    return factory
