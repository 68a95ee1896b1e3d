"""Chart data endpoints for the analytics dashboard.

Results are cached per (query, timeRange) for a few minutes; newly ingested
events appear once the cached entry expires.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from lookbook.api.analytics_deps import AnalyticsServiceDep, AnalyticsWindowDep
from lookbook.domain.models.analytics import (
    CategoryDistributionResponse,
    FunnelStage,
    TimeseriesResponse,
    TrendMetric,
)
from lookbook.persistence.repositories.analytics_repository import AnalyticsRepositoryError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/timeseries", response_model=TimeseriesResponse)
async def get_timeseries(
    service: AnalyticsServiceDep,
    window: AnalyticsWindowDep,
) -> TimeseriesResponse:
    """Daily views, clicks, searches, favorites and visitors."""
    try:
        return await service.timeseries(window)
    except AnalyticsRepositoryError:
        logger.exception("Timeseries query failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch timeseries")


@router.get("/categories", response_model=CategoryDistributionResponse)
async def get_categories(
    service: AnalyticsServiceDep,
    window: AnalyticsWindowDep,
) -> CategoryDistributionResponse:
    """Affiliate click distribution by product category."""
    try:
        return await service.categories(window)
    except AnalyticsRepositoryError:
        logger.exception("Category distribution query failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch categories")


@router.get("/funnel", response_model=list[FunnelStage])
async def get_funnel(
    service: AnalyticsServiceDep,
    window: AnalyticsWindowDep,
) -> list[FunnelStage]:
    """Visitors -> Product Views -> Favorites -> Affiliate Clicks."""
    try:
        return await service.funnel(window)
    except AnalyticsRepositoryError:
        logger.exception("Funnel query failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch funnel")


@router.get("/trends", response_model=list[TrendMetric])
async def get_trends(
    service: AnalyticsServiceDep,
    window: AnalyticsWindowDep,
) -> list[TrendMetric]:
    """Current vs previous window for Views, Clicks, Favorites, Visitors."""
    try:
        return await service.trends(window)
    except AnalyticsRepositoryError:
        logger.exception("Trends query failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch trends")
