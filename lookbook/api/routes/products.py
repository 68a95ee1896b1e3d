"""Public product routes."""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.api.schemas.catalog import Pagination, ProductListResponse, ProductResponse
from lookbook.persistence.database import get_db
from lookbook.persistence.repositories.product_repository import (
    ProductFilters,
    ProductRepository,
    ProductSort,
)

router = APIRouter()


@router.get("", response_model=ProductListResponse)
async def list_products(
    db: Annotated[AsyncSession, Depends(get_db)],
    search: str | None = Query(None, max_length=200, description="Words matched in name, brand or description"),
    category: str | None = Query(None, max_length=100),
    brand: str | None = Query(None, max_length=255),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    sort_by: ProductSort | None = Query(None, alias="sortBy"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
) -> ProductListResponse:
    """Browse published products with search, filters and pagination."""
    if min_price is not None and max_price is not None and min_price > max_price:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="minPrice must not exceed maxPrice",
        )

    filters = ProductFilters(
        search=search,
        category=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
    )
    products, total = await ProductRepository(db).search(filters, skip=(page - 1) * limit, limit=limit)
    return ProductListResponse(
        data=[ProductResponse.model_validate(product) for product in products],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/categories", response_model=list[str])
async def list_categories(db: Annotated[AsyncSession, Depends(get_db)]) -> list[str]:
    """Distinct categories of published products."""
    return await ProductRepository(db).distinct_values("category")


@router.get("/brands", response_model=list[str])
async def list_brands(db: Annotated[AsyncSession, Depends(get_db)]) -> list[str]:
    """Distinct brands of published products."""
    return await ProductRepository(db).distinct_values("brand")


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProductResponse:
    """Get a published product by id or slug."""
    product = await ProductRepository(db).get_by_id_or_slug(product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )
    return ProductResponse.model_validate(product)
