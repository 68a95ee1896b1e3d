"""Admin analytics dashboard endpoints.

Overview, user behavior, product, moodboard and activity-feed views over a
rolling `timeRange` window. All endpoints require an admin bearer token.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from lookbook.api.analytics_deps import AnalyticsServiceDep, AnalyticsWindowDep
from lookbook.domain.models.analytics import (
    MoodboardAnalyticsResponse,
    OverviewMetrics,
    ProductAnalyticsResponse,
    ProductDetailAnalyticsResponse,
    RecentActivityResponse,
    UserBehaviorResponse,
)
from lookbook.persistence.repositories.analytics_repository import AnalyticsRepositoryError

logger = logging.getLogger(__name__)

router = APIRouter()


def _query_failed(what: str) -> HTTPException:
    logger.exception(f"Failed to fetch {what}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to fetch {what}",
    )


@router.get("/overview", response_model=OverviewMetrics)
async def get_overview(
    service: AnalyticsServiceDep,
    window: AnalyticsWindowDep,
) -> OverviewMetrics:
    """Visitor count and per-type event totals."""
    try:
        return await service.overview(window)
    except AnalyticsRepositoryError:
        raise _query_failed("analytics overview")


@router.get("/users", response_model=UserBehaviorResponse)
@router.get("/user-behavior", response_model=UserBehaviorResponse, include_in_schema=False)
async def get_user_behavior(
    service: AnalyticsServiceDep,
    window: AnalyticsWindowDep,
) -> UserBehaviorResponse:
    """New vs returning users and traffic sources."""
    try:
        return await service.user_behavior(window)
    except AnalyticsRepositoryError:
        raise _query_failed("user behavior data")


@router.get("/products", response_model=ProductAnalyticsResponse)
async def get_product_analytics(
    service: AnalyticsServiceDep,
    window: AnalyticsWindowDep,
    limit: Annotated[int, Query()] = 10,
) -> ProductAnalyticsResponse:
    """Top products by views and top search terms."""
    try:
        return await service.product_analytics(window, limit=limit)
    except AnalyticsRepositoryError:
        raise _query_failed("product analytics")


@router.get("/products/{product_id}", response_model=ProductDetailAnalyticsResponse)
async def get_product_analytics_by_id(
    product_id: str,
    service: AnalyticsServiceDep,
    window: AnalyticsWindowDep,
) -> ProductDetailAnalyticsResponse:
    """Engagement metrics for one product."""
    try:
        return await service.product_by_id(product_id, window)
    except AnalyticsRepositoryError:
        raise _query_failed("product analytics")


@router.get("/moodboards", response_model=MoodboardAnalyticsResponse)
async def get_moodboard_analytics(
    service: AnalyticsServiceDep,
    window: AnalyticsWindowDep,
    limit: Annotated[int, Query()] = 10,
) -> MoodboardAnalyticsResponse:
    """Top moodboards by views."""
    try:
        return await service.moodboard_analytics(window, limit=limit)
    except AnalyticsRepositoryError:
        raise _query_failed("moodboard analytics")


@router.get("/recent-activity", response_model=RecentActivityResponse)
async def get_recent_activity(
    service: AnalyticsServiceDep,
    limit: Annotated[int, Query()] = 20,
) -> RecentActivityResponse:
    """Latest events, newest first."""
    try:
        return await service.recent_activity(limit=limit)
    except AnalyticsRepositoryError:
        raise _query_failed("recent activity")
