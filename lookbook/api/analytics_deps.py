"""Shared dependencies for analytics endpoints.

Resolves the `timeRange` query parameter into the rolling window every
analytics query is parameterized by.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.api.deps import get_current_admin
from lookbook.domain.services.analytics_service import (
    AnalyticsService,
    AnalyticsWindow,
    InvalidTimeRangeError,
    parse_time_range,
)
from lookbook.persistence.database import get_db
from lookbook.persistence.models.admin_user import AdminUser


async def get_analytics_window(
    time_range: Annotated[str | None, Query(alias="timeRange")] = None,
) -> AnalyticsWindow:
    """Dependency that parses ?timeRange=7d|30d|90d.

    Raises:
        HTTPException: 422 for a malformed or out-of-bounds range
    """
    try:
        return parse_time_range(time_range)
    except InvalidTimeRangeError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


async def get_analytics_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
) -> AnalyticsService:
    """Admin-only analytics service for the current request."""
    return AnalyticsService(db)


AnalyticsWindowDep = Annotated[AnalyticsWindow, Depends(get_analytics_window)]
AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]
