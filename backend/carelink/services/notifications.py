"""Client for the SMS notification relay.

Delivery itself is delegated: this service only posts to an SMS gateway
endpoint. When the relay URL is not configured the message is logged and
dropped.
"""

import asyncio
import logging
from typing import Any

import httpx

from carelink.config import get_settings
from carelink.models import Emergency

logger = logging.getLogger(__name__)
settings = get_settings()


class NotificationError(Exception):
    """Base exception for notification relay errors."""

    pass


class NotificationClient:
    """
    Posts SMS messages to the configured relay.

    Features:
    - Exponential backoff retry on network and 5xx errors (3 attempts)
    - Log-only mode when the relay is not configured
    """

    def __init__(
        self,
        sms_relay_url: str | None = settings.sms_relay_url,
        max_retries: int = 3,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.sms_relay_url = sms_relay_url
        self.max_retries = max_retries
        self.timeout = timeout
        self.transport = transport

    async def _post_with_retry(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST JSON with exponential backoff retry."""
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                    response = await client.post(url, json=payload)
                    response.raise_for_status()
                    return response.json() if response.content else {}

            except httpx.HTTPStatusError as e:
                last_error = e
                if e.response.status_code >= 500:
                    wait_time = 2**attempt
                    logger.warning(f"Relay error {e.response.status_code}, retry in {wait_time}s")
                    await asyncio.sleep(wait_time)
                else:
                    raise NotificationError(f"HTTP error: {e}") from e

            except httpx.RequestError as e:
                last_error = e
                wait_time = 2**attempt
                logger.warning(f"Request error: {e}, retry in {wait_time}s")
                await asyncio.sleep(wait_time)

        raise NotificationError(f"Failed after {self.max_retries} retries: {last_error}")

    async def send_sms(self, to: str, message: str) -> dict[str, Any] | None:
        """Send an SMS through the relay; None when no relay is configured."""
        if not self.sms_relay_url:
            logger.info(f"SMS relay not configured, dropping message to {to}")
            return None
        return await self._post_with_retry(self.sms_relay_url, {"to": to, "message": message})


def ambulance_request_message(emergency: Emergency) -> str:
    """SMS text sent to the ambulance dispatch line."""
    parts = [f"AMBULANCE REQUESTED: {emergency.emergency_type}"]
    if emergency.location:
        parts.append(f"at {emergency.location}")
    if emergency.latitude is not None and emergency.longitude is not None:
        parts.append(f"({emergency.latitude:.6f}, {emergency.longitude:.6f})")
    if emergency.contact_number:
        parts.append(f"contact {emergency.contact_number}")
    return " ".join(parts)


async def notify_ambulance_request(
    emergency: Emergency, client: NotificationClient | None = None
) -> bool:
    """
    Text the dispatch line about a report that asked for an ambulance.

    Failures are logged, never raised: the report is already stored.
    """
    if not emergency.requires_ambulance or not settings.ambulance_dispatch_number:
        return False

    client = client or NotificationClient()
    try:
        result = await client.send_sms(
            settings.ambulance_dispatch_number, ambulance_request_message(emergency)
        )
    except NotificationError as e:
        logger.error(f"Ambulance notification for emergency {emergency.id} failed: {e}")
        return False
    return result is not None
