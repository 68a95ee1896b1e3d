#!/usr/bin/env python
"""Seed the default trusted retailers and a small demo catalog with one moodboard.

Usage:
    python scripts/seed_catalog.py            # retailers + demo products + moodboard
    python scripts/seed_catalog.py --retailers-only
"""

import argparse
import asyncio
import os
import sys
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from lookbook.domain.services.catalog_service import MoodboardService
from lookbook.domain.services.retailer_whitelist import RetailerWhitelistService
from lookbook.persistence.database import AsyncSessionLocal
from lookbook.persistence.repositories.product_repository import ProductRepository

DEMO_PRODUCTS = [
    {
        "id": "prod_001",
        "name": "Wool Wrap Coat",
        "slug": "wool-wrap-coat",
        "brand": "Toteme",
        "category": "Outerwear",
        "price": Decimal("690.00"),
        "affiliate_url": "https://www.net-a-porter.com/en-us/shop/product/toteme/wool-wrap-coat",
    },
    {
        "id": "prod_002",
        "name": "Silk Slip Dress",
        "slug": "silk-slip-dress",
        "brand": "Reformation",
        "category": "Dresses",
        "price": Decimal("248.00"),
        "affiliate_url": "https://www.revolve.com/silk-slip-dress/dp/REFO-WD1",
    },
    {
        "id": "prod_003",
        "name": "Straight Leg Jeans",
        "slug": "straight-leg-jeans",
        "brand": "Agolde",
        "category": "Denim",
        "price": Decimal("198.00"),
        "affiliate_url": "https://www.shopbop.com/straight-leg-jeans-agolde/vp/v=1/1500000.htm",
    },
]

DEMO_MOODBOARD = {
    "id": "mb_001",
    "title": "City Weekend",
    "slug": "city-weekend",
    "description": "A coat, a dress and denim for two days in town",
}
DEMO_MOODBOARD_PRODUCTS = ["prod_001", "prod_002", "prod_003"]


async def seed_catalog(retailers_only: bool = False) -> None:
    async with AsyncSessionLocal() as session:
        inserted = await RetailerWhitelistService(session).ensure_defaults()
        print(f"Trusted retailers inserted: {inserted}")

        if retailers_only:
            return

        repo = ProductRepository(session)
        for product in DEMO_PRODUCTS:
            if await repo.get_by_id(product["id"]):
                print(f"Product already exists: {product['id']}")
                continue
            created = await repo.create(**product)
            print(f"Created product: {created.id} ({created.name})")

        moodboards = MoodboardService(session)
        if await moodboards.get(DEMO_MOODBOARD["id"], published_only=False):
            print(f"Moodboard already exists: {DEMO_MOODBOARD['id']}")
            return
        result = await moodboards.create(DEMO_MOODBOARD_PRODUCTS, **DEMO_MOODBOARD)
        print(f"Created moodboard: {result.moodboard.id} with {len(result.products)} products")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed retailers and demo products")
    parser.add_argument("--retailers-only", action="store_true", help="Only seed the retailer whitelist")
    args = parser.parse_args()
    asyncio.run(seed_catalog(retailers_only=args.retailers_only))


if __name__ == "__main__":
    main()
