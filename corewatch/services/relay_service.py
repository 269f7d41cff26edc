"""Relay sink: forwards validated events to the Corewatch collector.

Wire contract::

    GET <destination>?event=<name>&url=<url>&referrer=<referrer>
    authorization: Bearer <secret>

Any 2xx response means the collector accepted the event. There is exactly one
attempt per call and no retry.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from corewatch.core.config import DEFAULT_INGEST_URL, Settings, settings
from corewatch.core.exceptions import ConfigurationError, RejectedByCollector, TransportFailure
from corewatch.core.security import bearer_header
from corewatch.schemas.event import ValidEvent

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {"cache-control": "no-store", "pragma": "no-cache"}


class Transport(Protocol):
    async def send(self, request: httpx.Request) -> httpx.Response: ...


@dataclass(frozen=True)
class RelayConfig:
    secret: str | None
    destination: str | None = None

    @property
    def endpoint(self) -> str:
        return self.destination or DEFAULT_INGEST_URL

    @classmethod
    def from_settings(cls, source: Settings = settings) -> "RelayConfig":
        return cls(secret=source.COREWATCH_INGEST_SECRET, destination=source.COREWATCH_INGEST_URL)


class RelayService:
    """Relay sink bound to one configuration and (optionally) one transport."""

    def __init__(self, config: RelayConfig, transport: Transport | None = None):
        self.config = config
        self.transport = transport

    def build_request(self, event: ValidEvent, secret: str) -> httpx.Request:
        params = {"event": event.event.strip()}
        if event.url:
            params["url"] = event.url
        if event.referrer:
            params["referrer"] = event.referrer
        headers = {"authorization": bearer_header(secret), **NO_CACHE_HEADERS}
        return httpx.Request("GET", self.config.endpoint, params=params, headers=headers)

    async def _send(self, request: httpx.Request) -> httpx.Response:
        if self.transport is not None:
            return await self.transport.send(request)
        async with httpx.AsyncClient() as client:
            return await client.send(request)

    async def relay(self, event: ValidEvent) -> None:
        """Send one event to the collector.

        Raises:
            ConfigurationError: no shared secret is configured. Nothing is sent.
            TransportFailure: the request could not be completed.
            RejectedByCollector: the collector answered with a non-2xx status.
        """
        secret = self.config.secret
        if not secret:
            raise ConfigurationError("COREWATCH_INGEST_SECRET is not set")

        request = self.build_request(event, secret)
        try:
            response = await self._send(request)
        except (httpx.TransportError, OSError) as exc:
            message = str(exc) or type(exc).__name__
            logger.warning("Relay to %s failed: %s", request.url.host, message)
            raise TransportFailure(message) from exc

        if not response.is_success:
            logger.warning("Collector rejected event %s: %s", event.event, response.status_code)
            raise RejectedByCollector(response.status_code)
