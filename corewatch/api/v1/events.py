import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from corewatch.api.deps import EventSink, get_sink
from corewatch.core.config import settings
from corewatch.core.limiter import limiter
from corewatch.schemas.event import TrackResponse, validate_for_relay, validate_for_store
from corewatch.services.relay_service import RelayService

logger = logging.getLogger(__name__)

router = APIRouter()


def request_context(request: Request) -> dict[str, str]:
    """User agent and client IP of the inbound request, when known.

    Keys are the lowest-priority aliases, so any value the caller sent
    under either spelling wins over the request's own.
    """
    context = {}
    user_agent = request.headers.get("user-agent")
    if user_agent:
        context["user_agent"] = user_agent
    if request.client and request.client.host:
        context["callerIp"] = request.client.host
    return context


@router.post("/track", response_model=TrackResponse)
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
async def track_event(
    request: Request,
    payload: dict[str, Any] = Body(...),
    sink: EventSink = Depends(get_sink),
):
    """Validate one event and hand it to this gateway's configured sink.

    With ``GATEWAY_SINK=store`` the event is persisted and its record id
    returned. With ``GATEWAY_SINK=relay`` it is forwarded to the collector and
    only acceptance is reported.
    """
    if isinstance(sink, RelayService):
        await sink.relay(validate_for_relay(payload))
        return TrackResponse(accepted=True)

    raw = {**request_context(request), **payload}
    record_id = await sink.persist(validate_for_store(raw))
    return TrackResponse(accepted=True, id=record_id)
