"""WebSocket router for real-time emergency snapshots."""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from carelink.auth.session import decode_token, session_from_claims
from carelink.config import get_settings
from carelink.database import async_session_maker
from carelink.services.emergency_feed import feed
from carelink.websocket.manager import manager
from carelink.websocket.schemas import ErrorMessage, PongMessage, SubscribeMessage

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


def _websocket_token(websocket: WebSocket) -> str | None:
    # Browsers cannot set headers on WebSocket upgrades, so accept a query param too
    token = websocket.query_params.get("token")
    if token:
        return token
    return websocket.cookies.get(settings.auth_access_cookie_name)


@router.websocket("/ws/emergencies")
async def websocket_emergencies(websocket: WebSocket):
    """
    WebSocket endpoint for the healthcare dashboard.

    Only healthcare providers may connect; other callers are closed with
    code 1008.

    Protocol:
    - Client connects with `?token=<access token>` (or the access cookie)
    - Client sends subscribe message with optional viewport and status filters
    - Server replies with the current snapshot, then pushes a new snapshot
      after every change to the emergencies table
    - Server sends pong in response to ping for keep-alive

    Message formats:
    Client -> Server:
        {"type": "subscribe", "viewport": {"min_lat": 12.9, "max_lat": 13.1, "min_lng": 77.5, "max_lng": 77.7}, "statuses": ["pending"]}
        {"type": "ping"}

    Server -> Client:
        {"type": "emergency_snapshot", "sequence": 7, "data": [...], "timestamp": "2026-01-18T10:30:00Z"}
        {"type": "pong"}
        {"type": "error", "message": "..."}
    """
    token = _websocket_token(websocket)
    claims = decode_token(token) if token else None
    session = session_from_claims(claims) if claims else None
    if session is None or not session.is_provider:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(websocket, user_id=session.user_id)

    try:
        while True:
            raw_message = await websocket.receive_text()

            try:
                data = json.loads(raw_message)
                msg_type = data.get("type")

                if msg_type == "subscribe":
                    msg = SubscribeMessage.model_validate(data)
                    await manager.update_subscription(
                        websocket,
                        viewport=msg.viewport,
                        statuses=msg.statuses,
                    )
                    logger.info(
                        f"Subscription updated: viewport={msg.viewport}, statuses={msg.statuses}"
                    )
                    async with async_session_maker() as db:
                        await feed.send_initial(db, websocket)

                elif msg_type == "ping":
                    await websocket.send_json(PongMessage().model_dump())

                else:
                    error = ErrorMessage(message=f"Unknown message type: {msg_type}")
                    await websocket.send_json(error.model_dump())

            except json.JSONDecodeError:
                error = ErrorMessage(message="Invalid JSON")
                await websocket.send_json(error.model_dump())
            except Exception as e:
                logger.exception(f"Error processing message: {e}")
                error = ErrorMessage(message=str(e))
                await websocket.send_json(error.model_dump())

    except WebSocketDisconnect:
        await manager.disconnect(websocket)
    except Exception as e:
        logger.exception(f"WebSocket error: {e}")
        await manager.disconnect(websocket)
