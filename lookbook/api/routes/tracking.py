"""Public analytics ingestion route."""

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.domain.models.tracked_event import IncomingEvent
from lookbook.domain.services.event_ingestion_service import (
    EventIngestionService,
    EventValidationError,
    RequestContext,
)
from lookbook.infrastructure.rate_limiter import get_client_ip, rate_limit
from lookbook.persistence.database import get_db
from lookbook.persistence.repositories.analytics_repository import AnalyticsRepositoryError

logger = logging.getLogger(__name__)

router = APIRouter()


class TrackResponse(BaseModel):
    """Ingestion acknowledgement."""

    success: bool = True
    inserted: int


@router.post("/track", response_model=TrackResponse)
async def track_events(
    request: Request,
    _rate_limit: Annotated[None, Depends(rate_limit("analytics_track"))],
    payload: Annotated[IncomingEvent | list[IncomingEvent], Body()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TrackResponse:
    """Store a single event or a batch of events from the storefront.

    The batch is stored as a unit. Client IP and user agent are taken from
    the request, never from the payload.
    """
    context = RequestContext(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        referer=request.headers.get("Referer"),
    )

    try:
        result = await EventIngestionService(db).ingest(payload, context)
    except EventValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    except AnalyticsRepositoryError:
        logger.exception("Failed to store analytics events")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store events",
        )

    return TrackResponse(inserted=result.inserted)
