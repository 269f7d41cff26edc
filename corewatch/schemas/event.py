"""Inbound event schemas and the gateway validator.

Both sinks share the same nominal bounds but enforce them differently: the
persistence path silently truncates over-length context fields, while the
relay path rejects over-length ``url``/``referrer`` outright. Keep the two
policies separate; merging them would change which inputs are accepted.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from corewatch.core.exceptions import EventValidationError

EVENT_NAME_MAX_LENGTH = 64
URL_MAX_LENGTH = 2048
REFERRER_MAX_LENGTH = 2048
USER_AGENT_MAX_LENGTH = 512
IP_MAX_LENGTH = 128

# Names used in error messages, keyed by pydantic error location.
_FIELD_LABELS = {
    "event": "event",
    "url": "url",
    "referrer": "referrer",
    "userAgent": "userAgent",
    "user_agent": "userAgent",
    "ip": "ip",
    "callerIp": "ip",
}


class LengthPolicy(str, Enum):
    TRUNCATE = "truncate"  # persistence path
    REJECT = "reject"  # relay path


class RelayEventIn(BaseModel):
    """Raw event as accepted by the relay path. Unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", strict=True, populate_by_name=True)

    event: str
    url: str | None = None
    referrer: str | None = None


class EventIn(RelayEventIn):
    """Raw event as accepted by the persistence path."""

    user_agent: str | None = Field(
        None, validation_alias=AliasChoices("userAgent", "user_agent")
    )
    ip: str | None = Field(None, validation_alias=AliasChoices("ip", "callerIp"))


class ValidEvent(BaseModel):
    """A normalized event that passed validation. Immutable."""

    model_config = ConfigDict(frozen=True)

    event: str
    url: str | None = None
    referrer: str | None = None
    user_agent: str | None = None
    ip: str | None = None


class TrackResponse(BaseModel):
    """Response for a tracked event. ``id`` is only set by the persistence sink."""

    accepted: bool = True
    id: str | None = None


SchemaT = TypeVar("SchemaT", bound=RelayEventIn)


def _parse(raw: Any, schema: type[SchemaT]) -> SchemaT:
    if not isinstance(raw, Mapping):
        raise EventValidationError("Invalid input")
    try:
        return schema.model_validate(dict(raw))
    except PydanticValidationError as exc:
        loc = exc.errors()[0]["loc"]
        field = _FIELD_LABELS.get(str(loc[0]), str(loc[0])) if loc else "input"
        raise EventValidationError(f"Invalid {field}") from None


def _normalize_name(name: str) -> str:
    """Trim and bound the event name.

    All lengths in this module are counted in Unicode code points (``len``),
    not UTF-16 code units, so a character outside the BMP counts once.
    """
    name = name.strip()
    if not 1 <= len(name) <= EVENT_NAME_MAX_LENGTH:
        raise EventValidationError("Invalid event")
    return name


def _bound(value: str | None, limit: int, field: str, policy: LengthPolicy) -> str | None:
    if value is None or len(value) <= limit:
        return value
    if policy is LengthPolicy.REJECT:
        raise EventValidationError(f"Invalid {field}")
    return value[:limit]


def validate_event(raw: Any, policy: LengthPolicy = LengthPolicy.TRUNCATE) -> ValidEvent:
    """Validate and normalize a raw event mapping.

    ``TRUNCATE`` accepts the full persistence field set and cuts over-length
    values. ``REJECT`` accepts only ``event``, ``url`` and ``referrer`` (the
    relay wire fields) and fails on over-length values.

    Raises:
        EventValidationError: the input is not a mapping, ``event`` is missing
            or out of bounds, or a context field has the wrong type (or is too
            long under ``REJECT``).
    """
    if policy is LengthPolicy.REJECT:
        relay_in = _parse(raw, RelayEventIn)
        return ValidEvent(
            event=_normalize_name(relay_in.event),
            url=_bound(relay_in.url, URL_MAX_LENGTH, "url", policy),
            referrer=_bound(relay_in.referrer, REFERRER_MAX_LENGTH, "referrer", policy),
        )

    event_in = _parse(raw, EventIn)
    return ValidEvent(
        event=_normalize_name(event_in.event),
        url=_bound(event_in.url, URL_MAX_LENGTH, "url", policy),
        referrer=_bound(event_in.referrer, REFERRER_MAX_LENGTH, "referrer", policy),
        user_agent=_bound(event_in.user_agent, USER_AGENT_MAX_LENGTH, "userAgent", policy),
        ip=_bound(event_in.ip, IP_MAX_LENGTH, "ip", policy),
    )


def validate_for_store(raw: Any) -> ValidEvent:
    return validate_event(raw, LengthPolicy.TRUNCATE)


def validate_for_relay(raw: Any) -> ValidEvent:
    return validate_event(raw, LengthPolicy.REJECT)
