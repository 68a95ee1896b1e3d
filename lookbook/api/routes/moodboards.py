"""Public moodboard routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.api.schemas.catalog import (
    MoodboardDetail,
    MoodboardListResponse,
    MoodboardSummary,
    Pagination,
    ProductResponse,
)
from lookbook.domain.services.catalog_service import MoodboardService, MoodboardWithProducts
from lookbook.persistence.database import get_db
from lookbook.persistence.models.catalog import Moodboard
from lookbook.persistence.repositories.moodboard_repository import MoodboardRepository

router = APIRouter()


def moodboard_summaries(moodboards: list[Moodboard], counts: dict[str, int]) -> list[MoodboardSummary]:
    summaries = []
    for moodboard in moodboards:
        summary = MoodboardSummary.model_validate(moodboard)
        summary.product_count = counts.get(moodboard.id, 0)
        summaries.append(summary)
    return summaries


def moodboard_detail(result: MoodboardWithProducts) -> MoodboardDetail:
    detail = MoodboardDetail.model_validate(result.moodboard)
    detail.products = [ProductResponse.model_validate(product) for product in result.products]
    detail.product_count = len(result.products)
    return detail


@router.get("", response_model=MoodboardListResponse)
async def list_moodboards(
    db: Annotated[AsyncSession, Depends(get_db)],
    search: str | None = Query(None, max_length=200, description="Matched against the title"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
) -> MoodboardListResponse:
    """Published moodboards, newest first."""
    repo = MoodboardRepository(db)
    moodboards, total = await repo.search(search=search, skip=(page - 1) * limit, limit=limit)
    counts = await repo.product_counts([moodboard.id for moodboard in moodboards])
    return MoodboardListResponse(
        data=moodboard_summaries(moodboards, counts),
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/{moodboard_id}", response_model=MoodboardDetail)
async def get_moodboard(
    moodboard_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MoodboardDetail:
    """Published moodboard by id or slug, with its published products."""
    result = await MoodboardService(db).get(moodboard_id)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Moodboard not found",
        )
    return moodboard_detail(result)
