"""WebSocket connection manager for broadcasting emergency snapshots."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from fastapi import WebSocket

from carelink.schemas.emergency import EmergencyOut
from carelink.websocket.schemas import EmergencySnapshotMessage, Viewport

logger = logging.getLogger(__name__)


@dataclass
class ClientSubscription:
    """Tracks a dashboard client's subscription preferences."""

    websocket: WebSocket
    user_id: str | None = None
    viewport: Viewport | None = None
    statuses: set[str] = field(default_factory=set)
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def matches(self, emergency: EmergencyOut) -> bool:
        """Check if an emergency matches this subscription's filters."""
        if self.statuses and emergency.status not in self.statuses:
            return False

        # Reports without coordinates are always shown
        if self.viewport and emergency.latitude is not None and emergency.longitude is not None:
            if not self.viewport.contains(emergency.latitude, emergency.longitude):
                return False

        return True


class ConnectionManager:
    """
    Manages WebSocket connections and broadcasts emergency snapshots.

    Every broadcast carries the full deduplicated list (filtered per client),
    so a client only ever needs the latest snapshot it has received.
    Designed for single-instance deployment.
    """

    def __init__(self):
        self._connections: dict[WebSocket, ClientSubscription] = {}
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        """Number of active connections."""
        return len(self._connections)

    async def connect(self, websocket: WebSocket, user_id: str | None = None) -> None:
        """Accept a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self._connections[websocket] = ClientSubscription(websocket=websocket, user_id=user_id)
        logger.info(
            f"WebSocket connected for {user_id or 'unknown user'}. "
            f"Total connections: {self.connection_count}"
        )

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a disconnected WebSocket."""
        async with self._lock:
            subscription = self._connections.pop(websocket, None)
        if subscription is None:
            return

        duration = (datetime.now(UTC) - subscription.connected_at).total_seconds()
        logger.info(
            f"WebSocket disconnected for {subscription.user_id or 'unknown user'} "
            f"after {duration:.0f}s. Total connections: {self.connection_count}"
        )

    async def update_subscription(
        self,
        websocket: WebSocket,
        viewport: Viewport | None = None,
        statuses: list[str] | None = None,
    ) -> None:
        """Update a client's subscription preferences."""
        async with self._lock:
            if websocket in self._connections:
                sub = self._connections[websocket]
                if viewport is not None:
                    sub.viewport = viewport
                if statuses is not None:
                    sub.statuses = set(statuses)
                logger.debug(f"Updated subscription: viewport={viewport}, statuses={statuses}")

    def _message_for(
        self,
        subscription: ClientSubscription,
        emergencies: list[EmergencyOut],
        sequence: int,
        timestamp: datetime,
    ) -> EmergencySnapshotMessage:
        return EmergencySnapshotMessage(
            sequence=sequence,
            data=[e for e in emergencies if subscription.matches(e)],
            timestamp=timestamp,
        )

    async def broadcast(self, emergencies: list[EmergencyOut], sequence: int) -> None:
        """
        Send a snapshot to every subscriber.

        Empty snapshots are sent too so clients see deletions.
        """
        async with self._lock:
            if not self._connections:
                return

            timestamp = datetime.now(UTC)
            tasks = [
                self._send_safe(
                    websocket, self._message_for(subscription, emergencies, sequence, timestamp)
                )
                for websocket, subscription in list(self._connections.items())
            ]

            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(
                f"Broadcast snapshot #{sequence} ({len(emergencies)} emergencies) "
                f"to {len(tasks)} subscribers"
            )

    async def send_snapshot(
        self, websocket: WebSocket, emergencies: list[EmergencyOut], sequence: int
    ) -> None:
        """Send a snapshot to a single client, e.g. right after it subscribes."""
        async with self._lock:
            subscription = self._connections.get(websocket)
        if subscription is None:
            return

        message = self._message_for(subscription, emergencies, sequence, datetime.now(UTC))
        await self._send_safe(websocket, message)

    async def _send_safe(self, websocket: WebSocket, message: EmergencySnapshotMessage) -> None:
        """Send message to websocket, handling errors gracefully."""
        try:
            await websocket.send_json(message.model_dump(mode="json"))
        except Exception as e:
            logger.warning(f"Failed to send to websocket: {e}")
            # Schedule disconnect (don't do it here to avoid deadlock)
            asyncio.create_task(self.disconnect(websocket))


# Global singleton instance
manager = ConnectionManager()
