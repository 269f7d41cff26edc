from typing import Literal

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str


class HealthResponse(MessageResponse):
    """Health/readiness response naming the active sink."""

    sink: Literal["store", "relay"]
