"""Admin product management routes."""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.api.deps import get_current_admin
from lookbook.api.schemas.catalog import ProductCreate, ProductResponse, ProductUpdate
from lookbook.persistence.database import get_db
from lookbook.persistence.models.admin_user import AdminUser
from lookbook.persistence.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[ProductResponse])
async def list_products(
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
    skip: int = 0,
    limit: int = 100,
) -> list[ProductResponse]:
    """List products, published or not."""
    products = await ProductRepository(db).list(skip=skip, limit=min(max(limit, 1), 500))
    return [ProductResponse.model_validate(product) for product in products]


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
) -> ProductResponse:
    """Create a product."""
    repo = ProductRepository(db)
    try:
        product = await repo.create(**product_data.model_dump())
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A product with this id or slug already exists",
        )
    logger.info("Product created", extra={"product_id": product.id})
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
) -> ProductResponse:
    """Update a product; omitted fields are left unchanged."""
    changes = product_data.model_dump(exclude_unset=True)
    changes["updated_at"] = datetime.utcnow()
    try:
        product = await ProductRepository(db).update(product_id, **changes)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A product with this slug already exists",
        )
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
) -> None:
    """Delete a product. Its analytics events are kept."""
    deleted = await ProductRepository(db).delete(product_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )
    logger.info("Product deleted", extra={"product_id": product_id})
