"""Tests for the public product and admin catalog endpoints."""

import pytest


@pytest.mark.asyncio
async def test_get_product_by_id_or_slug(client, add_product):
    await add_product("prod_001", category="Outerwear", name="Wool Wrap Coat", slug="wool-wrap-coat")

    by_id = await client.get("/products/prod_001")
    by_slug = await client.get("/products/wool-wrap-coat")

    assert by_id.status_code == 200
    assert by_slug.json()["id"] == "prod_001"
    assert by_id.json()["name"] == "Wool Wrap Coat"
    assert by_id.json()["category"] == "Outerwear"


@pytest.mark.asyncio
async def test_unpublished_product_is_hidden(client, add_product):
    await add_product("prod_draft", is_published=False)

    response = await client.get("/products/prod_draft")

    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found"


@pytest.mark.asyncio
async def test_admin_catalog_requires_token(client):
    assert (await client.get("/admin/products")).status_code == 401
    assert (await client.post("/admin/products", json={})).status_code == 401


@pytest.mark.asyncio
async def test_admin_product_lifecycle(client, admin_headers):
    created = await client.post(
        "/admin/products",
        json={
            "id": "prod_020",
            "name": "Linen Shirt",
            "slug": "linen-shirt",
            "category": "Tops",
            "price": "89.00",
            "affiliateUrl": "https://www.mango.com/linen-shirt",
        },
        headers=admin_headers,
    )
    assert created.status_code == 201
    assert created.json()["affiliateUrl"] == "https://www.mango.com/linen-shirt"

    conflict = await client.post(
        "/admin/products",
        json={"id": "prod_021", "name": "Other", "slug": "linen-shirt"},
        headers=admin_headers,
    )
    assert conflict.status_code == 409

    updated = await client.put(
        "/admin/products/prod_020",
        json={"category": "Shirts", "isPublished": False},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["category"] == "Shirts"
    assert updated.json()["name"] == "Linen Shirt"
    assert (await client.get("/products/prod_020")).status_code == 404

    listing = await client.get("/admin/products", headers=admin_headers)
    assert [product["id"] for product in listing.json()] == ["prod_020"]

    assert (await client.delete("/admin/products/prod_020", headers=admin_headers)).status_code == 204
    assert (await client.delete("/admin/products/prod_020", headers=admin_headers)).status_code == 404
    assert (await client.put("/admin/products/prod_020", json={}, headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_deleting_a_product_keeps_its_events(client, admin_headers, add_product, add_event):
    await add_product("prod_001", category="Outerwear")
    await add_event("affiliate_click", product_id="prod_001")

    assert (await client.delete("/admin/products/prod_001", headers=admin_headers)).status_code == 204

    response = await client.get("/api/analytics/categories", headers=admin_headers)
    assert response.json()["data"] == [{"category": "Unknown", "count": 1, "percentage": 100.0}]
