"""Tests for admin authentication and the analytics dashboard endpoints."""

from datetime import timedelta

import pytest

from lookbook.core.auth import create_access_token

ADMIN_ENDPOINTS = [
    "/admin/analytics/overview",
    "/admin/analytics/users",
    "/admin/analytics/user-behavior",
    "/admin/analytics/products",
    "/admin/analytics/products/prod_001",
    "/admin/analytics/moodboards",
    "/admin/analytics/recent-activity",
    "/api/analytics/timeseries",
    "/api/analytics/categories",
    "/api/analytics/funnel",
    "/api/analytics/trends",
]


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ADMIN_ENDPOINTS)
async def test_dashboard_requires_token(client, path):
    response = await client.get(path)

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client, admin_user):
    response = await client.get(
        "/admin/analytics/overview",
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_expired_token_is_rejected(client, admin_user):
    token = create_access_token({"sub": str(admin_user.id)}, expires_delta=timedelta(minutes=-5))

    response = await client.get(
        "/api/analytics/funnel",
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_for_unknown_admin_is_rejected(client, admin_user):
    token = create_access_token({"sub": "9999"})

    response = await client.get(
        "/api/analytics/trends",
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ADMIN_ENDPOINTS)
async def test_dashboard_with_token(client, admin_headers, path):
    response = await client.get(path, headers=admin_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("time_range", ["7", "abc", "0d", "400d", "30d'--"])
async def test_malformed_time_range(client, admin_headers, time_range):
    response = await client.get(
        "/api/analytics/timeseries",
        params={"timeRange": time_range},
        headers=admin_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_overview_response_shape(client, admin_headers, add_event):
    await add_event("page_view", user_id="u1")
    await add_event("affiliate_click", user_id="u1", product_id="prod_001")

    response = await client.get(
        "/admin/analytics/overview",
        params={"timeRange": "7d"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json() == {
        "totalVisitors": 1,
        "totalPageViews": 1,
        "totalProductViews": 0,
        "totalMoodboardViews": 0,
        "totalSearches": 0,
        "totalFavorites": 0,
        "totalAffiliateClicks": 1,
        "timeRange": "7d",
    }


@pytest.mark.asyncio
async def test_timeseries_response(client, admin_headers, add_event):
    await add_event("product_view", days_ago=0)

    response = await client.get(
        "/api/analytics/timeseries",
        params={"timeRange": "7d"},
        headers=admin_headers,
    )

    body = response.json()
    assert body["timeRange"] == "7d"
    assert len(body["data"]) == 8
    assert set(body["data"][0]) == {"date", "views", "clicks", "searches", "favorites", "visitors"}
    assert body["data"][-1]["views"] == 1


@pytest.mark.asyncio
async def test_funnel_response(client, admin_headers, add_event):
    await add_event("page_view", user_id="u1")
    await add_event("product_view", user_id="u1")

    response = await client.get("/api/analytics/funnel", headers=admin_headers)

    stages = response.json()
    assert [stage["stage"] for stage in stages] == ["Visitors", "Product Views", "Favorites", "Affiliate Clicks"]
    assert stages[0] == {"stage": "Visitors", "count": 1, "conversionRate": 100.0, "dropOffRate": 0.0}


@pytest.mark.asyncio
async def test_trends_response(client, admin_headers, add_event):
    await add_event("product_view", days_ago=1)

    response = await client.get("/api/analytics/trends", params={"timeRange": "7d"}, headers=admin_headers)

    views = response.json()[0]
    assert views["metric"] == "Views"
    assert views["current"] == 1
    assert views["previous"] == 0
    assert views["changePercentage"] is None
    assert views["trend"] == "up"


@pytest.mark.asyncio
async def test_ingested_events_reach_the_dashboard(client, admin_headers, add_product):
    await add_product("prod_001", category="Outerwear")
    batch = [
        {"userId": "u1", "eventType": "affiliate_click", "productId": "prod_001"},
        {"userId": "u2", "eventType": "affiliate_click", "resourceType": "product", "resourceId": "prod_001"},
    ]
    assert (await client.post("/api/analytics/track", json=batch)).status_code == 200

    response = await client.get("/api/analytics/categories", headers=admin_headers)

    assert response.json()["data"] == [{"category": "Outerwear", "count": 2, "percentage": 100.0}]


@pytest.mark.asyncio
async def test_login_flow(client, admin_user):
    response = await client.post(
        "/admin/auth/login",
        json={"email": "mimi@lookbook.test", "password": "correct-horse"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["role"] == "admin"

    me = await client.get(
        "/admin/auth/me",
        headers={"Authorization": f"Bearer {body['access_token']}"},
    )
    assert me.status_code == 200
    assert me.json()["email"] == "mimi@lookbook.test"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email,password",
    [("mimi@lookbook.test", "wrong-password"), ("nobody@lookbook.test", "correct-horse")],
)
async def test_login_rejects_bad_credentials(client, admin_user, email, password):
    response = await client.post("/admin/auth/login", json={"email": email, "password": password})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"
