"""Delivery of event batches to the ingestion endpoint."""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)

TRACK_PATH = "/api/analytics/track"


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of sending one batch. Failed batches are not retried."""

    ok: bool
    inserted: int = 0
    error: str | None = None


class EventTransport(Protocol):
    async def send(self, events: list[dict[str, Any]]) -> DeliveryResult:
        """Send one batch; must not raise."""
        ...


class HttpxEventTransport:
    """Posts event batches as a JSON array using httpx.

    Usage:
        transport = HttpxEventTransport("https://api.example.com")
        result = await transport.send([{"eventType": "page_view"}])

    An injected client is used as is; batches still go to base_url.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}{TRACK_PATH}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, events: list[dict[str, Any]]) -> DeliveryResult:
        try:
            response = await self._client.post(self.url, json=events)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to send {len(events)} analytics events: {e}")
            return DeliveryResult(ok=False, error=str(e) or type(e).__name__)
        if not isinstance(body, dict):
            logger.warning(f"Unexpected ingestion response for {len(events)} analytics events")
            return DeliveryResult(ok=False, error="Unexpected response body")
        try:
            inserted = int(body.get("inserted", 0))
        except (TypeError, ValueError):
            inserted = 0
        return DeliveryResult(ok=True, inserted=inserted)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
