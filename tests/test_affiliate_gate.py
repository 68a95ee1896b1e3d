"""Tests for the affiliate redirect gate."""

from urllib.parse import parse_qs, urlsplit

import pytest

from lookbook.domain.services.affiliate_gate import (
    INVALID_REDIRECT_URL,
    MISSING_PURCHASE_LINK,
    PRODUCT_NOT_FOUND,
    UNTRUSTED_RETAILER,
    AffiliateGate,
    DecisionState,
    ErrorKind,
    add_tracking_params,
    is_valid_url,
)
from lookbook.domain.services.retailer_whitelist import RetailerWhitelistService


@pytest.fixture
async def whitelist(db_session):
    service = RetailerWhitelistService(db_session)
    await service.ensure_defaults()
    return service


def test_add_tracking_params_keeps_existing_query():
    url = add_tracking_params("https://www.zara.com/coat?color=black&size=m#reviews", "prod_001")
    parts = urlsplit(url)
    query = parse_qs(parts.query)

    assert parts.scheme == "https"
    assert parts.netloc == "www.zara.com"
    assert parts.path == "/coat"
    assert parts.fragment == "reviews"
    assert query["color"] == ["black"]
    assert query["size"] == ["m"]
    assert query["utm_source"] == ["lookbook_mimi"]
    assert query["utm_medium"] == ["affiliate"]
    assert query["utm_campaign"] == ["product_redirect"]
    assert query["utm_content"] == ["prod_001"]
    assert query["ref"] == ["lookbook"]


def test_add_tracking_params_overwrites_tracking_keys():
    url = add_tracking_params("https://asos.com/dress?utm_source=other&ref=x", "prod_002")
    query = parse_qs(urlsplit(url).query)
    assert query["utm_source"] == ["lookbook_mimi"]
    assert query["ref"] == ["lookbook"]


def test_add_tracking_params_rebuilds_clean_netloc():
    url = add_tracking_params("HTTPS://WWW.Zara.com:8443/coat", "prod_001")

    assert url.startswith("https://www.zara.com:8443/coat?")

    with pytest.raises(ValueError):
        add_tracking_params("https://evil-deals.example\\@zara.com/x", "prod_001")


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://zara.com/x", True),
        ("http://evil-deals.example/x", True),
        ("javascript:alert(1)", False),
        ("zara.com/coat", False),
        ("https://", False),
        ("", False),
        (None, False),
        ("   ", False),
        ("https://evil-deals.example\\@zara.com/x", False),
        ("https://zara.com@evil-deals.example/x", False),
    ],
)
def test_is_valid_url(url, expected):
    assert is_valid_url(url) is expected


@pytest.mark.asyncio
async def test_unknown_product_is_not_found(db_session, whitelist):
    decision = await AffiliateGate(db_session).evaluate("prod_missing")

    assert decision.state == DecisionState.ERROR
    assert decision.kind == ErrorKind.NOT_FOUND
    assert decision.message == PRODUCT_NOT_FOUND
    assert decision.redirect_url is None


@pytest.mark.asyncio
async def test_product_without_purchase_link(db_session, whitelist, add_product):
    await add_product("prod_004", affiliate_url=None)

    decision = await AffiliateGate(db_session).evaluate("prod_004")

    assert decision.kind == ErrorKind.MISSING_URL
    assert decision.message == MISSING_PURCHASE_LINK


@pytest.mark.asyncio
async def test_malformed_purchase_link(db_session, whitelist, add_product):
    await add_product("prod_005", affiliate_url="not-a-link")

    decision = await AffiliateGate(db_session).evaluate("prod_005")

    assert decision.kind == ErrorKind.INVALID_URL
    assert decision.message == INVALID_REDIRECT_URL


@pytest.mark.asyncio
async def test_untrusted_retailer_never_redirects(db_session, whitelist, add_product):
    await add_product("prod_009", affiliate_url="http://evil-deals.example/x")

    decision = await AffiliateGate(db_session).evaluate("prod_009")

    assert decision.state == DecisionState.ERROR
    assert decision.kind == ErrorKind.UNTRUSTED_RETAILER
    assert decision.message == UNTRUSTED_RETAILER
    assert decision.redirect_url is None
    assert decision.is_redirect is False


@pytest.mark.asyncio
async def test_plain_http_on_trusted_domain_is_refused(db_session, whitelist, add_product):
    await add_product("prod_010", affiliate_url="http://www.zara.com/coat")

    decision = await AffiliateGate(db_session).evaluate("prod_010")

    assert decision.kind == ErrorKind.UNTRUSTED_RETAILER


@pytest.mark.asyncio
async def test_trusted_retailer_redirects_with_tracking(db_session, whitelist, add_product):
    await add_product(
        "prod_001",
        category="Outerwear",
        affiliate_url="https://www.net-a-porter.com/en-us/shop/product/1?color=camel",
        slug="wool-wrap-coat",
    )

    decision = await AffiliateGate(db_session).evaluate("prod_001")

    assert decision.state == DecisionState.REDIRECTING
    assert decision.is_redirect
    assert decision.retailer == "net-a-porter.com"
    assert decision.retailer_name == "Net-A-Porter"
    assert decision.countdown_seconds == 3
    query = parse_qs(urlsplit(decision.redirect_url).query)
    assert query["color"] == ["camel"]
    assert query["utm_content"] == ["prod_001"]

    # Slug resolves to the same product
    by_slug = await AffiliateGate(db_session).evaluate("wool-wrap-coat")
    assert by_slug.product_id == "prod_001"
    assert by_slug.is_redirect


@pytest.mark.asyncio
async def test_deactivated_retailer_stops_redirects(db_session, whitelist, add_product):
    await add_product("prod_003", affiliate_url="https://www.shopbop.com/jeans")
    assert (await AffiliateGate(db_session).evaluate("prod_003")).is_redirect

    await whitelist.toggle_retailer("shopbop.com")

    decision = await AffiliateGate(db_session).evaluate("prod_003")
    assert decision.kind == ErrorKind.UNTRUSTED_RETAILER


@pytest.mark.asyncio
async def test_redirect_endpoint_not_found(client, whitelist):
    response = await client.get("/go/prod_missing")

    assert response.status_code == 404
    body = response.json()
    assert body["state"] == "error"
    assert body["kind"] == "not_found"
    assert body["message"] == PRODUCT_NOT_FOUND
    assert body["redirectUrl"] is None


@pytest.mark.asyncio
async def test_redirect_endpoint_untrusted(client, whitelist, add_product):
    await add_product("prod_009", affiliate_url="http://evil-deals.example/x")

    response = await client.get("/go/prod_009")

    assert response.status_code == 422
    body = response.json()
    assert body["kind"] == "untrusted_retailer"
    assert body["redirectUrl"] is None
    assert body["product"]["id"] == "prod_009"


@pytest.mark.asyncio
async def test_redirect_endpoint_success(client, whitelist, add_product):
    await add_product("prod_002", affiliate_url="https://www.revolve.com/silk-slip-dress/dp/REFO-WD1")

    response = await client.get("/go/prod_002")

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "redirecting"
    assert body["productId"] == "prod_002"
    assert body["retailer"] == "revolve.com"
    assert body["retailerName"] == "Revolve"
    assert body["countdownSeconds"] == 3
    assert body["redirectUrl"].startswith("https://www.revolve.com/silk-slip-dress/dp/REFO-WD1?")
    assert "utm_content=prod_002" in body["redirectUrl"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "affiliate_url",
    [
        "https://evil-deals.example\\@zara.com/x",
        "https://evil-deals.example\\zara.com/x",
        "https://zara.com@evil-deals.example/x",
    ],
)
async def test_ambiguous_purchase_link_never_redirects(db_session, whitelist, add_product, affiliate_url):
    await add_product("prod_666", affiliate_url=affiliate_url)

    decision = await AffiliateGate(db_session).evaluate("prod_666")

    assert decision.state == DecisionState.ERROR
    assert decision.kind == ErrorKind.INVALID_URL
    assert decision.redirect_url is None


@pytest.mark.asyncio
async def test_redirect_endpoint_refuses_backslash_host(client, whitelist, add_product):
    await add_product("prod_666", affiliate_url="https://evil-deals.example\\@zara.com/x")

    response = await client.get("/go/prod_666")

    assert response.status_code == 422
    body = response.json()
    assert body["state"] == "error"
    assert body["redirectUrl"] is None
