"""Collector endpoint: the receiving side of the relay wire contract."""

import logging

from fastapi import APIRouter, Depends, Query, Request

from corewatch.api.deps import get_event_service, verify_ingest_secret
from corewatch.api.v1.events import request_context
from corewatch.schemas.event import TrackResponse, validate_for_store
from corewatch.services.event_service import EventService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/event",
    response_model=TrackResponse,
    dependencies=[Depends(verify_ingest_secret)],
)
async def collect_event(
    request: Request,
    event: str = Query(...),
    url: str | None = Query(None),
    referrer: str | None = Query(None),
    event_service: EventService = Depends(get_event_service),
):
    """Accept a relayed event. Authenticated via ``Authorization: Bearer``."""
    raw = {"event": event, "url": url, "referrer": referrer, **request_context(request)}
    record_id = await event_service.persist(validate_for_store(raw))
    return TrackResponse(accepted=True, id=record_id)
