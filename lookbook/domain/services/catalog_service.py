"""Moodboard curation for the admin back office."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.persistence.models.catalog import Moodboard, Product
from lookbook.persistence.repositories.moodboard_repository import MoodboardRepository
from lookbook.persistence.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised for invalid moodboard operations."""


class DuplicateMoodboardError(CatalogError):
    """A moodboard with the same id or slug exists."""


class UnknownProductsError(CatalogError):
    """Some product ids do not exist."""

    def __init__(self, product_ids: list[str]):
        self.product_ids = product_ids
        super().__init__(f"Unknown product ids: {', '.join(product_ids)}")


@dataclass(frozen=True)
class MoodboardWithProducts:
    moodboard: Moodboard
    products: list[Product]


def _dedupe(product_ids: list[str]) -> list[str]:
    """Keep the first placement of each product."""
    return list(dict.fromkeys(product_ids))


class MoodboardService:
    """Creates, edits and removes moodboards and their product placements."""

    def __init__(self, session: AsyncSession):
        """Initialize moodboard service."""
        self.session = session
        self.moodboards = MoodboardRepository(session)
        self.products = ProductRepository(session)

    async def _check_products(self, product_ids: list[str]) -> None:
        found = {product.id for product in await self.products.list_by_ids(product_ids)}
        missing = [product_id for product_id in product_ids if product_id not in found]
        if missing:
            raise UnknownProductsError(missing)

    async def get(self, identifier: str, published_only: bool = True) -> MoodboardWithProducts | None:
        """Moodboard by id or slug with its products in placement order."""
        moodboard = await self.moodboards.get_by_id_or_slug(identifier, published_only=published_only)
        if moodboard is None:
            return None
        products = await self.moodboards.list_products(moodboard.id, published_only=published_only)
        return MoodboardWithProducts(moodboard=moodboard, products=products)

    async def create(self, product_ids: list[str], **fields: Any) -> MoodboardWithProducts:
        """Create a moodboard with its placements in one transaction.

        Raises:
            UnknownProductsError: If a product id does not exist
            DuplicateMoodboardError: If the id or slug is taken
        """
        product_ids = _dedupe(product_ids)
        await self._check_products(product_ids)

        existing = await self.moodboards.get_by_id_or_slug(fields["id"], published_only=False)
        if existing is None:
            existing = await self.moodboards.get_by_id_or_slug(fields["slug"], published_only=False)
        if existing is not None:
            raise DuplicateMoodboardError("A moodboard with this id or slug already exists")

        moodboard = Moodboard(**fields)
        self.session.add(moodboard)
        try:
            await self.session.flush()
            await self.moodboards.set_products(moodboard.id, product_ids)
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateMoodboardError("A moodboard with this id or slug already exists") from exc
        await self.session.refresh(moodboard)

        logger.info(
            "Moodboard created",
            extra={"moodboard_id": moodboard.id, "product_count": len(product_ids)},
        )
        return MoodboardWithProducts(
            moodboard=moodboard,
            products=await self.moodboards.list_products(moodboard.id, published_only=False),
        )

    async def update(
        self,
        moodboard_id: str,
        product_ids: list[str] | None = None,
        **changes: Any,
    ) -> MoodboardWithProducts | None:
        """Update fields; a given product list replaces the placements.

        Raises:
            UnknownProductsError: If a product id does not exist
            DuplicateMoodboardError: If the new slug is taken
        """
        moodboard = await self.moodboards.get_by_id(moodboard_id)
        if moodboard is None:
            return None

        if product_ids is not None:
            product_ids = _dedupe(product_ids)
            await self._check_products(product_ids)

        for key, value in changes.items():
            setattr(moodboard, key, value)
        moodboard.updated_at = datetime.utcnow()

        try:
            if product_ids is not None:
                await self.moodboards.set_products(moodboard.id, product_ids)
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateMoodboardError("A moodboard with this slug already exists") from exc
        await self.session.refresh(moodboard)

        return MoodboardWithProducts(
            moodboard=moodboard,
            products=await self.moodboards.list_products(moodboard.id, published_only=False),
        )

    async def delete(self, moodboard_id: str) -> bool:
        """Delete a moodboard. Its analytics events are kept."""
        deleted = await self.moodboards.delete(moodboard_id)
        if deleted:
            logger.info("Moodboard deleted", extra={"moodboard_id": moodboard_id})
        return deleted
