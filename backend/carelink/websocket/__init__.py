"""WebSocket module for real-time emergency snapshots."""

from carelink.websocket.manager import ClientSubscription, ConnectionManager

__all__ = ["ClientSubscription", "ConnectionManager"]
