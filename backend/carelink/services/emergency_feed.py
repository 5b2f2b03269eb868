"""Realtime emergency feed: re-fetch, re-deduplicate and broadcast on change."""

import itertools
import logging
from datetime import timedelta

from fastapi import WebSocket
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carelink.config import get_settings
from carelink.models import Emergency
from carelink.schemas.emergency import EmergencyOut
from carelink.services.deduplication import deduplicate
from carelink.services.emergency_store import EmergencyStore
from carelink.websocket.manager import ConnectionManager
from carelink.websocket.manager import manager as ws_manager

logger = logging.getLogger(__name__)
settings = get_settings()


def dedupe_for_display(rows: list[Emergency]) -> list[EmergencyOut]:
    """Deduplicate stored emergencies with the configured window and precision."""
    emergencies = [EmergencyOut.model_validate(row) for row in rows]
    return deduplicate(
        emergencies,
        window=timedelta(seconds=settings.dedup_window_seconds),
        precision=settings.dedup_coordinate_precision,
    )


class EmergencyFeed:
    """
    Pushes the deduplicated emergency list to dashboard subscribers.

    The list is recomputed from storage on every publish; there is no
    incremental state. Each publish takes a sequence number before fetching,
    so clients can keep the newest snapshot when publishes overlap.
    """

    def __init__(self, manager: ConnectionManager | None = None):
        self.manager = manager or ws_manager
        self._sequence = itertools.count(1)

    async def snapshot(self, db: AsyncSession) -> list[EmergencyOut]:
        rows = await EmergencyStore(db).list_all()
        return dedupe_for_display(rows)

    async def publish(self, db: AsyncSession) -> int | None:
        """
        Broadcast the current snapshot to all subscribers.

        Returns the snapshot sequence, or None when nothing was sent.
        """
        if self.manager.connection_count == 0:
            return None

        sequence = next(self._sequence)
        try:
            emergencies = await self.snapshot(db)
        except SQLAlchemyError as e:
            # A failed fetch is "no data": keep the clients' last snapshot.
            logger.error(f"Failed to fetch emergencies for snapshot #{sequence}: {e}")
            return None

        await self.manager.broadcast(emergencies, sequence)
        return sequence

    async def send_initial(self, db: AsyncSession, websocket: WebSocket) -> None:
        """Send the current snapshot to one newly subscribed client."""
        sequence = next(self._sequence)
        try:
            emergencies = await self.snapshot(db)
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch initial snapshot: {e}")
            return

        await self.manager.send_snapshot(websocket, emergencies, sequence)


# Global singleton instance
feed = EmergencyFeed()
