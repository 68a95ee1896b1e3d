"""Moodboard repository."""

from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.persistence.models.catalog import Moodboard, MoodboardProduct, Product
from lookbook.persistence.repositories.base import BaseRepository


class MoodboardRepository(BaseRepository[Moodboard]):
    """Repository for moodboards and their product placements."""

    def __init__(self, session: AsyncSession):
        """Initialize moodboard repository."""
        super().__init__(Moodboard, session)

    async def get_by_id_or_slug(
        self,
        identifier: str,
        published_only: bool = True,
    ) -> Moodboard | None:
        """Resolve a moodboard from either its id or its slug."""
        stmt = select(Moodboard).where(or_(Moodboard.id == identifier, Moodboard.slug == identifier))
        if published_only:
            stmt = stmt.where(Moodboard.is_published.is_(True))
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def search(
        self,
        search: str | None = None,
        skip: int = 0,
        limit: int = 12,
        published_only: bool = True,
    ) -> tuple[list[Moodboard], int]:
        """List moodboards, newest first, optionally filtered by title.

        Returns:
            Tuple of (page of moodboards, total matches)
        """
        conditions = []
        if search and search.strip():
            conditions.append(Moodboard.title.icontains(search.strip(), autoescape=True))
        if published_only:
            conditions.append(Moodboard.is_published.is_(True))

        count_stmt = select(func.count(Moodboard.id)).where(*conditions)
        total = int((await self.session.execute(count_stmt)).scalar() or 0)

        stmt = (
            select(Moodboard)
            .where(*conditions)
            .order_by(Moodboard.created_at.desc(), Moodboard.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_products(
        self,
        moodboard_id: str,
        published_only: bool = True,
    ) -> list[Product]:
        """Products placed on a moodboard, in placement order."""
        stmt = (
            select(Product)
            .join(MoodboardProduct, MoodboardProduct.product_id == Product.id)
            .where(MoodboardProduct.moodboard_id == moodboard_id)
            .order_by(MoodboardProduct.sort_order, Product.id)
        )
        if published_only:
            stmt = stmt.where(Product.is_published.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def product_counts(self, moodboard_ids: list[str]) -> dict[str, int]:
        """Number of placed products per moodboard."""
        if not moodboard_ids:
            return {}
        stmt = (
            select(MoodboardProduct.moodboard_id, func.count(MoodboardProduct.product_id))
            .where(MoodboardProduct.moodboard_id.in_(moodboard_ids))
            .group_by(MoodboardProduct.moodboard_id)
        )
        result = await self.session.execute(stmt)
        return {moodboard_id: int(count) for moodboard_id, count in result.all()}

    async def set_products(self, moodboard_id: str, product_ids: list[str]) -> None:
        """Replace the placements of a moodboard; list order becomes sort order.

        Does not commit.
        """
        await self.session.execute(
            delete(MoodboardProduct).where(MoodboardProduct.moodboard_id == moodboard_id)
        )
        if product_ids:
            await self.session.execute(
                insert(MoodboardProduct),
                [
                    {"moodboard_id": moodboard_id, "product_id": product_id, "sort_order": index}
                    for index, product_id in enumerate(product_ids)
                ],
            )

    async def delete(self, id: str) -> bool:
        """Delete a moodboard together with its placements."""
        instance = await self.get_by_id(id)
        if instance is None:
            return False

        await self.session.execute(delete(MoodboardProduct).where(MoodboardProduct.moodboard_id == id))
        await self.session.delete(instance)
        await self.session.commit()
        return True
