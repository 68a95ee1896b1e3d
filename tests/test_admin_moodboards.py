"""Tests for admin moodboard curation."""

import pytest


@pytest.fixture
async def products(add_product):
    for product_id in ("prod_001", "prod_002", "prod_003"):
        await add_product(product_id)


def _placed(body) -> list[str]:
    return [product["id"] for product in body["products"]]


@pytest.mark.asyncio
async def test_admin_moodboards_require_token(client):
    assert (await client.get("/admin/moodboards")).status_code == 401
    assert (await client.post("/admin/moodboards", json={})).status_code == 401
    assert (await client.put("/admin/moodboards/mb_autumn", json={})).status_code == 401
    assert (await client.delete("/admin/moodboards/mb_autumn")).status_code == 401


@pytest.mark.asyncio
async def test_create_moodboard_places_products_in_order(client, admin_headers, products):
    response = await client.post(
        "/admin/moodboards",
        json={
            "id": "mb_autumn",
            "title": "Autumn Layers",
            "slug": "autumn-layers",
            "description": "Coats and knits",
            "productIds": ["prod_003", "prod_001", "prod_003"],
        },
        headers=admin_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["slug"] == "autumn-layers"
    assert body["description"] == "Coats and knits"
    assert _placed(body) == ["prod_003", "prod_001"]
    assert body["productCount"] == 2

    public = await client.get("/moodboards/autumn-layers")
    assert _placed(public.json()) == ["prod_003", "prod_001"]


@pytest.mark.asyncio
async def test_create_moodboard_conflicts(client, admin_headers, products, add_moodboard):
    await add_moodboard("mb_autumn", "Autumn Layers")

    same_id = await client.post(
        "/admin/moodboards",
        json={"id": "mb_autumn", "title": "Again", "slug": "again"},
        headers=admin_headers,
    )
    same_slug = await client.post(
        "/admin/moodboards",
        json={"id": "mb_other", "title": "Other", "slug": "mb-autumn"},
        headers=admin_headers,
    )

    assert same_id.status_code == 409
    assert same_slug.status_code == 409


@pytest.mark.asyncio
async def test_create_moodboard_with_unknown_product(client, admin_headers, products):
    response = await client.post(
        "/admin/moodboards",
        json={"id": "mb_autumn", "title": "Autumn", "slug": "autumn", "productIds": ["prod_001", "prod_999"]},
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert "prod_999" in response.json()["detail"]
    assert (await client.get("/admin/moodboards/mb_autumn", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_update_replaces_products_and_keeps_omitted_fields(client, admin_headers, products, add_moodboard):
    await add_moodboard("mb_autumn", "Autumn Layers", product_ids=["prod_001", "prod_002"], description="Knits")

    renamed = await client.put(
        "/admin/moodboards/mb_autumn",
        json={"title": "Late Autumn", "isPublished": False},
        headers=admin_headers,
    )
    assert renamed.status_code == 200
    assert renamed.json()["title"] == "Late Autumn"
    assert renamed.json()["description"] == "Knits"
    assert _placed(renamed.json()) == ["prod_001", "prod_002"]
    assert (await client.get("/moodboards/mb_autumn")).status_code == 404

    replaced = await client.put(
        "/admin/moodboards/mb_autumn",
        json={"productIds": ["prod_002", "prod_003"], "description": None},
        headers=admin_headers,
    )
    assert _placed(replaced.json()) == ["prod_002", "prod_003"]
    assert replaced.json()["description"] is None

    cleared = await client.put(
        "/admin/moodboards/mb_autumn",
        json={"productIds": []},
        headers=admin_headers,
    )
    assert cleared.json()["products"] == []

    listing = await client.get("/admin/moodboards", headers=admin_headers)
    assert [(item["id"], item["productCount"]) for item in listing.json()] == [("mb_autumn", 0)]


@pytest.mark.asyncio
async def test_update_rejects_unknown_product_and_taken_slug(client, admin_headers, products, add_moodboard):
    await add_moodboard("mb_autumn", "Autumn Layers", product_ids=["prod_001"])
    await add_moodboard("mb_city", "City Basics")

    unknown = await client.put(
        "/admin/moodboards/mb_autumn",
        json={"productIds": ["prod_404"]},
        headers=admin_headers,
    )
    taken = await client.put(
        "/admin/moodboards/mb_autumn",
        json={"slug": "mb-city"},
        headers=admin_headers,
    )
    missing = await client.put("/admin/moodboards/mb_nowhere", json={"title": "X"}, headers=admin_headers)

    assert unknown.status_code == 422
    assert taken.status_code == 409
    assert missing.status_code == 404

    current = await client.get("/admin/moodboards/mb_autumn", headers=admin_headers)
    assert current.json()["slug"] == "mb-autumn"
    assert _placed(current.json()) == ["prod_001"]


@pytest.mark.asyncio
async def test_delete_moodboard_keeps_products(client, admin_headers, products, add_moodboard):
    await add_moodboard("mb_autumn", "Autumn Layers", product_ids=["prod_001"])

    assert (await client.delete("/admin/moodboards/mb_autumn", headers=admin_headers)).status_code == 204
    assert (await client.delete("/admin/moodboards/mb_autumn", headers=admin_headers)).status_code == 404
    assert (await client.get("/moodboards/mb_autumn")).status_code == 404
    assert (await client.get("/products/prod_001")).status_code == 200


@pytest.mark.asyncio
async def test_deleting_a_product_removes_its_placements(client, admin_headers, products, add_moodboard):
    await add_moodboard("mb_autumn", "Autumn Layers", product_ids=["prod_001", "prod_002"])

    assert (await client.delete("/admin/products/prod_001", headers=admin_headers)).status_code == 204

    response = await client.get("/moodboards/mb_autumn")
    assert _placed(response.json()) == ["prod_002"]
