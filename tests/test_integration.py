"""Integration tests: gateway relay path -> collector endpoint -> database."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from corewatch.api.deps import get_sink
from corewatch.core.config import settings
from corewatch.main import app
from corewatch.models.event import Event
from corewatch.services.relay_service import RelayConfig, RelayService

COLLECTOR_URL = "http://collector/event"


@pytest.fixture
async def collector_http(client: AsyncClient):
    """HTTP client whose requests land on this app's collector endpoint."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://collector") as ac:
        yield ac


@pytest.mark.asyncio
async def test_relay_round_trip(
    client: AsyncClient,
    collector_http: AsyncClient,
    db_session: AsyncSession,
    gateway_sink,
    monkeypatch,
):
    """A relayed event ends up stored by the collector."""
    gateway_sink("relay")
    monkeypatch.setattr(settings, "COREWATCH_INGEST_URL", COLLECTOR_URL)
    monkeypatch.setattr(app.state, "http_client", collector_http, raising=False)

    for name in ["click", "view", "click"]:
        response = await client.post(
            "/api/v1/events/track",
            json={"event": name, "url": "https://example.com/page1", "referrer": "https://google.com"},
        )
        assert response.status_code == 200

    rows = (await db_session.execute(select(Event).order_by(Event.received_at_ms))).scalars().all()
    assert sorted(row.event for row in rows) == ["click", "click", "view"]
    assert all(row.url == "https://example.com/page1" for row in rows)
    assert all(row.referrer == "https://google.com" for row in rows)
    assert len({row.id for row in rows}) == 3


@pytest.mark.asyncio
async def test_relay_with_wrong_secret_is_rejected(
    client: AsyncClient,
    collector_http: AsyncClient,
    db_session: AsyncSession,
):
    config = RelayConfig(secret="not-the-secret", destination=COLLECTOR_URL)
    app.dependency_overrides[get_sink] = lambda: RelayService(config, transport=collector_http)

    response = await client.post("/api/v1/events/track", json={"event": "click"})

    assert response.status_code == 502
    assert response.json() == {"detail": "Collector rejected event (status 401)"}
    assert (await db_session.execute(select(Event))).scalars().all() == []
