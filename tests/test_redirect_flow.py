"""Tests for the client-side affiliate redirect flow."""

import asyncio

import httpx
import pytest

from lookbook.client.event_buffer import EventBuffer
from lookbook.client.redirect_flow import INVALID_REDIRECT_URL, LOAD_FAILED, RedirectFlow, RedirectState
from lookbook.client.transport import DeliveryResult

REDIRECTING_BODY = {
    "state": "redirecting",
    "productId": "prod_001",
    "redirectUrl": "https://www.net-a-porter.com/en-us/shop/product/1?utm_content=prod_001",
    "retailer": "net-a-porter.com",
    "retailerName": "Net-A-Porter",
    "countdownSeconds": 3,
    "product": {"id": "prod_001", "name": "Wool Wrap Coat"},
}


class RecordingTransport:
    def __init__(self):
        self.batches = []

    async def send(self, batch):
        self.batches.append(batch)
        return DeliveryResult(ok=True, inserted=len(batch))


def _http(status_code=200, body=None, error=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if error is not None:
            raise error
        return httpx.Response(status_code, json=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://api.lookbook.test")


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def buffer(transport):
    return EventBuffer(transport)


@pytest.mark.asyncio
async def test_countdown_navigates_and_records_click(buffer, transport):
    navigated = []
    ticks = []
    flow = RedirectFlow(
        "prod_001",
        _http(body=REDIRECTING_BODY),
        buffer,
        navigate=navigated.append,
        on_tick=ticks.append,
        tick_seconds=0.001,
    )

    assert await flow.load() == RedirectState.REDIRECTING
    assert flow.retailer == "www.net-a-porter.com"
    assert flow.product_name == "Wool Wrap Coat"

    assert await asyncio.wait_for(flow.wait(), timeout=2) == RedirectState.NAVIGATED
    assert navigated == [REDIRECTING_BODY["redirectUrl"]]
    assert ticks == [3, 2, 1]

    await buffer.flush()
    [click] = transport.batches[0]
    assert click["eventType"] == "affiliate_click"
    assert click["resourceId"] == "prod_001"
    assert click["metadata"] == {"productName": "Wool Wrap Coat", "retailer": "www.net-a-porter.com"}


@pytest.mark.asyncio
async def test_continue_now_skips_countdown(buffer):
    navigated = []

    async def navigate(url):
        navigated.append(url)

    flow = RedirectFlow("prod_001", _http(body=REDIRECTING_BODY), buffer, navigate=navigate, tick_seconds=60)
    await flow.load()

    await flow.continue_now()

    assert flow.state == RedirectState.NAVIGATED
    assert navigated == [REDIRECTING_BODY["redirectUrl"]]

    # A second request is ignored
    await flow.continue_now()
    assert len(navigated) == 1


@pytest.mark.asyncio
async def test_cancel_goes_back_without_navigating(buffer):
    navigated = []
    went_back = []
    flow = RedirectFlow(
        "prod_001",
        _http(body=REDIRECTING_BODY),
        buffer,
        navigate=navigated.append,
        go_back=lambda: went_back.append(True),
        tick_seconds=0.01,
    )
    await flow.load()

    await flow.cancel()
    await asyncio.sleep(0.05)

    assert flow.state == RedirectState.CANCELLED
    assert went_back == [True]
    assert navigated == []


@pytest.mark.asyncio
async def test_close_stops_pending_countdown(buffer):
    navigated = []
    went_back = []
    flow = RedirectFlow(
        "prod_001",
        _http(body=REDIRECTING_BODY),
        buffer,
        navigate=navigated.append,
        go_back=lambda: went_back.append(True),
        tick_seconds=0.01,
    )
    await flow.load()

    await flow.close()

    assert await asyncio.wait_for(flow.wait(), timeout=1) == RedirectState.CLOSED
    await asyncio.sleep(0.1)
    await flow.continue_now()

    assert navigated == []
    assert went_back == []
    assert flow.state == RedirectState.CLOSED


@pytest.mark.asyncio
async def test_close_before_load_is_terminal(buffer):
    navigated = []
    flow = RedirectFlow("prod_001", _http(body=REDIRECTING_BODY), buffer, navigate=navigated.append)

    await flow.close()

    assert await flow.load() == RedirectState.CLOSED
    assert await asyncio.wait_for(flow.wait(), timeout=1) == RedirectState.CLOSED
    assert navigated == []
    assert buffer.pending == 0


@pytest.mark.asyncio
async def test_not_found(buffer, transport):
    body = {"state": "error", "productId": "prod_x", "kind": "not_found", "message": "Product not found"}
    navigated = []
    flow = RedirectFlow("prod_x", _http(404, body), buffer, navigate=navigated.append)

    assert await flow.load() == RedirectState.ERROR

    assert flow.not_found is True
    assert flow.message == "Product not found"
    assert navigated == []
    assert buffer.pending == 0


@pytest.mark.asyncio
async def test_untrusted_retailer_is_terminal(buffer):
    body = {
        "state": "error",
        "productId": "prod_009",
        "kind": "untrusted_retailer",
        "message": "This retailer is not on the trusted list",
    }
    navigated = []
    flow = RedirectFlow("prod_009", _http(422, body), buffer, navigate=navigated.append)

    await flow.load()
    await flow.continue_now()

    assert flow.state == RedirectState.ERROR
    assert flow.not_found is False
    assert flow.message == "This retailer is not on the trusted list"
    assert navigated == []
    assert buffer.pending == 0


@pytest.mark.asyncio
async def test_non_https_redirect_url_is_refused(buffer):
    body = dict(REDIRECTING_BODY, redirectUrl="http://evil-deals.example/x")
    navigated = []
    flow = RedirectFlow("prod_001", _http(body=body), buffer, navigate=navigated.append)

    await flow.load()

    assert flow.state == RedirectState.ERROR
    assert flow.message == INVALID_REDIRECT_URL
    assert buffer.pending == 0


@pytest.mark.asyncio
async def test_backslash_redirect_url_is_refused(buffer):
    body = dict(REDIRECTING_BODY, redirectUrl="https://evil-deals.example\\@zara.com/x")
    navigated = []
    flow = RedirectFlow("prod_001", _http(body=body), buffer, navigate=navigated.append)

    await flow.load()

    assert flow.state == RedirectState.ERROR
    assert flow.message == INVALID_REDIRECT_URL
    assert buffer.pending == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [["redirecting"], "redirecting", 42])
async def test_non_object_body_is_a_load_failure(buffer, body):
    flow = RedirectFlow("prod_001", _http(body=body), buffer, navigate=lambda url: None)

    assert await flow.load() == RedirectState.ERROR
    assert flow.message == LOAD_FAILED
    assert flow.not_found is False


@pytest.mark.asyncio
async def test_network_failure(buffer):
    flow = RedirectFlow(
        "prod_001",
        _http(error=httpx.ConnectError("connection refused")),
        buffer,
        navigate=lambda url: None,
    )

    assert await flow.load() == RedirectState.ERROR
    assert flow.message == LOAD_FAILED


@pytest.mark.asyncio
async def test_flow_against_redirect_endpoint(client, db_session, add_product):
    from lookbook.domain.services.retailer_whitelist import RetailerWhitelistService

    await RetailerWhitelistService(db_session).ensure_defaults()
    await add_product("prod_002", name="Silk Slip Dress", affiliate_url="https://www.revolve.com/silk-slip-dress")
    transport = RecordingTransport()
    navigated = []

    flow = RedirectFlow("prod_002", client, EventBuffer(transport), navigate=navigated.append, tick_seconds=0.001)
    await flow.load()
    await asyncio.wait_for(flow.wait(), timeout=2)

    assert navigated[0].startswith("https://www.revolve.com/silk-slip-dress?")
    assert flow.product_name == "Silk Slip Dress"
