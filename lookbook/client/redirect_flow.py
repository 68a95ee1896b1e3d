"""Client side of the affiliate redirect.

State machine:
    LOADING -> ERROR | REDIRECTING
    REDIRECTING -> NAVIGATED (countdown expiry or continue_now)
    REDIRECTING -> CANCELLED (cancel)
    LOADING | REDIRECTING -> CLOSED (close)

ERROR, NAVIGATED, CANCELLED and CLOSED are terminal.
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Callable

import httpx

from lookbook.client import events
from lookbook.client.event_buffer import EventBuffer
from lookbook.core.urls import split_url

logger = logging.getLogger(__name__)

LOAD_FAILED = "Unable to load product information"
INVALID_REDIRECT_URL = "Invalid redirect URL"
DEFAULT_COUNTDOWN_SECONDS = 3


class RedirectState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    REDIRECTING = "redirecting"
    NAVIGATED = "navigated"
    CANCELLED = "cancelled"
    CLOSED = "closed"


async def _call(callback: Callable[..., Any] | None, *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class RedirectFlow:
    """Fetches the redirect decision, records the click and runs the countdown.

    Usage:
        flow = RedirectFlow("prod_001", http, buffer, navigate=open_url, go_back=history_back)
        await flow.load()
        await flow.wait()  # until navigated, cancelled or errored
    """

    def __init__(
        self,
        product_id: str,
        http: httpx.AsyncClient,
        buffer: EventBuffer,
        navigate: Callable[[str], Any],
        go_back: Callable[[], Any] | None = None,
        on_tick: Callable[[int], Any] | None = None,
        tick_seconds: float = 1.0,
    ) -> None:
        self.product_id = product_id
        self.http = http
        self.buffer = buffer
        self._navigate_cb = navigate
        self._go_back_cb = go_back
        self._on_tick = on_tick
        self.tick_seconds = tick_seconds

        self.state = RedirectState.LOADING
        self.message: str | None = None
        self.not_found = False
        self.redirect_url: str | None = None
        self.retailer: str | None = None
        self.product_name: str | None = None
        self.seconds_remaining = 0
        self._countdown: asyncio.Task | None = None
        self._done = asyncio.Event()

    def _fail(self, message: str, not_found: bool = False) -> None:
        if self.state != RedirectState.LOADING:
            return
        self.state = RedirectState.ERROR
        self.message = message
        self.not_found = not_found
        self._done.set()

    async def load(self) -> RedirectState:
        """Resolve the decision; on success record the click and start the countdown."""
        if self.state != RedirectState.LOADING:
            return self.state

        try:
            response = await self.http.get(f"/go/{self.product_id}")
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Redirect lookup for {self.product_id} failed: {e}")
            self._fail(LOAD_FAILED)
            return self.state

        if self.state != RedirectState.LOADING:
            # closed while the lookup was in flight
            return self.state

        if not isinstance(body, dict):
            logger.warning(f"Redirect lookup for {self.product_id} returned a non-object body")
            self._fail(LOAD_FAILED)
            return self.state

        if response.status_code != 200 or body.get("state") != RedirectState.REDIRECTING.value:
            not_found = response.status_code == 404 or body.get("kind") == "not_found"
            self._fail(body.get("message") or LOAD_FAILED, not_found=not_found)
            return self.state

        redirect_url = body.get("redirectUrl")
        parts = split_url(redirect_url)
        if parts is None or parts.scheme.lower() != "https":
            self._fail(INVALID_REDIRECT_URL)
            return self.state

        product = body.get("product")
        if not isinstance(product, dict):
            product = {}
        self.redirect_url = redirect_url
        self.retailer = parts.hostname
        self.product_name = product.get("name") or self.product_id
        self.seconds_remaining = int(body.get("countdownSeconds") or DEFAULT_COUNTDOWN_SECONDS)
        self.state = RedirectState.REDIRECTING

        await self.buffer.track(
            events.affiliate_click(body.get("productId") or self.product_id, self.product_name, parts.hostname)
        )
        self._countdown = asyncio.get_running_loop().create_task(self._run_countdown())
        return self.state

    async def _run_countdown(self) -> None:
        while self.seconds_remaining > 0:
            await _call(self._on_tick, self.seconds_remaining)
            await asyncio.sleep(self.tick_seconds)
            self.seconds_remaining -= 1
        await self._navigate()

    async def _navigate(self) -> None:
        if self.state != RedirectState.REDIRECTING:
            return
        self.state = RedirectState.NAVIGATED
        self._done.set()
        await _call(self._navigate_cb, self.redirect_url)

    def _stop_countdown(self) -> None:
        task = self._countdown
        self._countdown = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def continue_now(self) -> None:
        """Skip the remaining countdown and navigate immediately."""
        if self.state != RedirectState.REDIRECTING:
            return
        self._stop_countdown()
        await self._navigate()

    async def cancel(self) -> None:
        """Abort the redirect and return to the previous view."""
        if self.state != RedirectState.REDIRECTING:
            return
        self._stop_countdown()
        self.state = RedirectState.CANCELLED
        self._done.set()
        await _call(self._go_back_cb)

    async def close(self) -> None:
        """Teardown: no countdown fires and no navigation happens afterwards.

        Unlike cancel(), the go_back callback is not invoked.
        """
        self._stop_countdown()
        if self.state in (RedirectState.LOADING, RedirectState.REDIRECTING):
            self.state = RedirectState.CLOSED
            self._done.set()

    async def wait(self) -> RedirectState:
        """Wait until the flow reaches a terminal state."""
        await self._done.wait()
        return self.state
