"""WebSocket message schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from carelink.schemas.emergency import EmergencyOut, EmergencyStatus


class Viewport(BaseModel):
    """Geographic viewport bounds for filtering updates."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        """Check if coordinates are within this viewport."""
        return (
            self.min_lat <= lat <= self.max_lat
            and self.min_lng <= lng <= self.max_lng
        )


class SubscribeMessage(BaseModel):
    """Client subscription message to set viewport and status filters."""

    type: Literal["subscribe"] = "subscribe"
    viewport: Viewport | None = None
    statuses: list[EmergencyStatus] | None = None


class EmergencySnapshotMessage(BaseModel):
    """Server message with the current deduplicated emergency list."""

    type: Literal["emergency_snapshot"] = "emergency_snapshot"
    sequence: int  # clients drop snapshots older than the last one applied
    data: list[EmergencyOut]
    timestamp: datetime


class PingMessage(BaseModel):
    """Ping message for keep-alive."""

    type: Literal["ping"] = "ping"


class PongMessage(BaseModel):
    """Pong response for keep-alive."""

    type: Literal["pong"] = "pong"


class ErrorMessage(BaseModel):
    """Error message from server."""

    type: Literal["error"] = "error"
    message: str
