"""Product repository."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from sqlalchemy import case, delete, distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.persistence.models.catalog import MoodboardProduct, Product
from lookbook.persistence.repositories.base import BaseRepository

MAX_SEARCH_TERMS = 8


class ProductSort(str, Enum):
    """Catalog orderings."""

    RELEVANCE = "relevance"
    NEWEST = "newest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"


@dataclass(frozen=True)
class ProductFilters:
    """Catalog listing filters. Every value reaches SQL as a bound parameter."""

    search: str | None = None
    category: str | None = None
    brand: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    sort_by: ProductSort | None = None

    @property
    def terms(self) -> list[str]:
        if not self.search:
            return []
        return self.search.split()[:MAX_SEARCH_TERMS]


def _matches(term: str):
    """Case-insensitive substring match on name, brand or description.

    autoescape makes "%" and "_" in the term match literally.
    """
    return or_(
        Product.name.icontains(term, autoescape=True),
        Product.brand.icontains(term, autoescape=True),
        Product.description.icontains(term, autoescape=True),
    )


class ProductRepository(BaseRepository[Product]):
    """Repository for catalog products."""

    def __init__(self, session: AsyncSession):
        """Initialize product repository."""
        super().__init__(Product, session)

    async def get_by_id_or_slug(
        self,
        identifier: str,
        published_only: bool = True,
    ) -> Product | None:
        """Resolve a product from either its id or its slug.

        Args:
            identifier: Product id (e.g. "prod_001") or slug
            published_only: Hide unpublished products (public reads)

        Returns:
            Matching product or None
        """
        stmt = select(Product).where(or_(Product.id == identifier, Product.slug == identifier))
        if published_only:
            stmt = stmt.where(Product.is_published.is_(True))
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    def _filter_conditions(self, filters: ProductFilters, published_only: bool) -> list:
        conditions = [_matches(term) for term in filters.terms]
        if filters.category:
            conditions.append(Product.category == filters.category)
        if filters.brand:
            conditions.append(Product.brand == filters.brand)
        if filters.min_price is not None:
            conditions.append(Product.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Product.price <= filters.max_price)
        if published_only:
            conditions.append(Product.is_published.is_(True))
        return conditions

    def _ordering(self, filters: ProductFilters) -> list:
        sort_by = filters.sort_by
        if sort_by is None:
            sort_by = ProductSort.RELEVANCE if filters.terms else ProductSort.NEWEST

        if sort_by == ProductSort.PRICE_LOW:
            return [Product.price.asc().nulls_last(), Product.id]
        if sort_by == ProductSort.PRICE_HIGH:
            return [Product.price.desc().nulls_last(), Product.id]
        if sort_by == ProductSort.RELEVANCE and filters.terms:
            # Products whose name carries a term rank ahead of brand/description hits
            name_hits = sum(
                case((Product.name.icontains(term, autoescape=True), 1), else_=0)
                for term in filters.terms
            )
            return [name_hits.desc(), Product.created_at.desc(), Product.id]
        return [Product.created_at.desc(), Product.id]

    async def search(
        self,
        filters: ProductFilters,
        skip: int = 0,
        limit: int = 12,
        published_only: bool = True,
    ) -> tuple[list[Product], int]:
        """List catalog products matching the filters.

        Every search term must appear in the name, brand or description.

        Returns:
            Tuple of (page of products, total matches)
        """
        conditions = self._filter_conditions(filters, published_only)

        count_stmt = select(func.count(Product.id)).where(*conditions)
        total = int((await self.session.execute(count_stmt)).scalar() or 0)

        stmt = (
            select(Product)
            .where(*conditions)
            .order_by(*self._ordering(filters))
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_by_ids(self, product_ids: list[str], published_only: bool = False) -> list[Product]:
        """Fetch products by id. Unknown ids are skipped."""
        if not product_ids:
            return []
        stmt = select(Product).where(Product.id.in_(product_ids))
        if published_only:
            stmt = stmt.where(Product.is_published.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def distinct_values(self, column_name: str) -> list[str]:
        """Sorted distinct non-empty values of "category" or "brand" among published products."""
        column = {"category": Product.category, "brand": Product.brand}[column_name]
        stmt = (
            select(distinct(column))
            .where(column.is_not(None), column != "", Product.is_published.is_(True))
            .order_by(column)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, id: str) -> bool:
        """Delete a product and its moodboard placements. Its analytics events are kept."""
        instance = await self.get_by_id(id)
        if instance is None:
            return False

        await self.session.execute(delete(MoodboardProduct).where(MoodboardProduct.product_id == id))
        await self.session.delete(instance)
        await self.session.commit()
        return True
