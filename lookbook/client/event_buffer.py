"""Client-side analytics event buffer.

Collects events in memory and delivers them in batches on a timer, when the
queue reaches its size threshold, or when the page is hidden or closed.
Delivery is best effort: a failed batch is dropped, never re-queued.

The buffer is constructed explicitly and owned by the application root:

    buffer = EventBuffer(HttpxEventTransport(api_url), context_provider=page_context)
    buffer.start()
    await buffer.track(events.page_view("/"))
    ...
    await buffer.close()
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from lookbook.client.events import TrackedEvent
from lookbook.client.transport import DeliveryResult, EventTransport

logger = logging.getLogger(__name__)

DEFAULT_FLUSH_INTERVAL = 5.0
DEFAULT_MAX_QUEUE_SIZE = 10


@dataclass(frozen=True)
class ClientContext:
    """Page context attached to every queued event."""

    url: str | None = None
    referrer: str | None = None
    user_id: str | None = None
    session_id: str | None = None


class EventBuffer:
    """Batching, fire-and-forget event queue."""

    def __init__(
        self,
        transport: EventTransport,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL,
        max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE,
        context_provider: Callable[[], ClientContext] | None = None,
    ) -> None:
        self.transport = transport
        self.flush_interval = flush_interval
        self.max_queue_size = max_queue_size
        self._context_provider = context_provider
        self._queue: list[dict[str, Any]] = []
        self._enabled = True
        self._timer: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        """Number of queued, not yet sent events."""
        return len(self._queue)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        """Kill switch: while disabled, track() is a no-op."""
        self._enabled = enabled

    def _build_entry(self, event: TrackedEvent) -> dict[str, Any]:
        entry = event.to_payload()
        context = self._context_provider() if self._context_provider else ClientContext()
        entry["timestamp"] = datetime.now(timezone.utc).isoformat()
        entry["url"] = context.url
        entry["referrer"] = context.referrer
        if context.user_id:
            entry["userId"] = context.user_id
        if context.session_id:
            entry["sessionId"] = context.session_id
        return entry

    async def track(self, event: TrackedEvent) -> None:
        """Queue an event; flushes immediately once the queue is full.

        Never raises. An event that cannot be queued is dropped.
        """
        if not self._enabled:
            return
        try:
            entry = self._build_entry(event)
        except Exception:
            logger.debug("Dropping analytics event that could not be queued", exc_info=True)
            return

        self._queue.append(entry)
        if len(self._queue) >= self.max_queue_size:
            await self.flush()

    async def flush(self) -> DeliveryResult:
        """Send everything queued so far as one batch.

        The queue is swapped out before the first await, so events tracked
        while a send is in flight go to the next batch.
        """
        if not self._queue:
            return DeliveryResult(ok=True)

        batch, self._queue = self._queue, []
        try:
            result = await self.transport.send(batch)
        except Exception as e:
            logger.warning(f"Analytics transport raised while sending {len(batch)} events: {e}")
            return DeliveryResult(ok=False, error=str(e) or type(e).__name__)

        if not result.ok:
            logger.warning(f"Discarding {len(batch)} analytics events after failed delivery")
        return result

    def start(self) -> None:
        """Start the periodic flush timer on the running event loop."""
        if self._timer is None or self._timer.done():
            self._timer = asyncio.get_running_loop().create_task(self._run_timer())

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.flush_interval)
            await self.flush()

    async def on_page_hidden(self) -> DeliveryResult:
        """Lifecycle hook for visibility loss or unload."""
        return await self.flush()

    async def close(self) -> DeliveryResult:
        """Stop the timer and deliver whatever is still queued."""
        if self._timer is not None:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None
        return await self.flush()
