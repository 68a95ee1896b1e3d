"""Admin moodboard management routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.api.deps import get_current_admin
from lookbook.api.routes.moodboards import moodboard_detail, moodboard_summaries
from lookbook.api.schemas.catalog import MoodboardCreate, MoodboardDetail, MoodboardSummary, MoodboardUpdate
from lookbook.domain.services.catalog_service import (
    DuplicateMoodboardError,
    MoodboardService,
    UnknownProductsError,
)
from lookbook.persistence.database import get_db
from lookbook.persistence.models.admin_user import AdminUser
from lookbook.persistence.repositories.moodboard_repository import MoodboardRepository

router = APIRouter()

NULLABLE_FIELDS = {"description", "cover_image"}


@router.get("", response_model=list[MoodboardSummary])
async def list_moodboards(
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
    search: str | None = Query(None, max_length=200),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[MoodboardSummary]:
    """List moodboards, published or not."""
    repo = MoodboardRepository(db)
    moodboards, _total = await repo.search(search=search, skip=skip, limit=limit, published_only=False)
    counts = await repo.product_counts([moodboard.id for moodboard in moodboards])
    return moodboard_summaries(moodboards, counts)


@router.get("/{moodboard_id}", response_model=MoodboardDetail)
async def get_moodboard(
    moodboard_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
) -> MoodboardDetail:
    """Get a moodboard with every placed product, published or not."""
    result = await MoodboardService(db).get(moodboard_id, published_only=False)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Moodboard not found",
        )
    return moodboard_detail(result)


@router.post("", response_model=MoodboardDetail, status_code=status.HTTP_201_CREATED)
async def create_moodboard(
    moodboard_data: MoodboardCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
) -> MoodboardDetail:
    """Create a moodboard from an ordered list of product ids."""
    fields = moodboard_data.model_dump(exclude={"product_ids"})
    try:
        result = await MoodboardService(db).create(moodboard_data.product_ids, **fields)
    except UnknownProductsError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except DuplicateMoodboardError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return moodboard_detail(result)


@router.put("/{moodboard_id}", response_model=MoodboardDetail)
async def update_moodboard(
    moodboard_id: str,
    moodboard_data: MoodboardUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
) -> MoodboardDetail:
    """Update a moodboard; productIds, when given, replaces its products."""
    changes = {
        key: value
        for key, value in moodboard_data.model_dump(exclude_unset=True, exclude={"product_ids"}).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    product_ids = moodboard_data.product_ids
    try:
        result = await MoodboardService(db).update(moodboard_id, product_ids=product_ids, **changes)
    except UnknownProductsError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except DuplicateMoodboardError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Moodboard not found",
        )
    return moodboard_detail(result)


@router.delete("/{moodboard_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_moodboard(
    moodboard_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
) -> None:
    """Delete a moodboard. Its analytics events are kept."""
    if not await MoodboardService(db).delete(moodboard_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Moodboard not found",
        )
