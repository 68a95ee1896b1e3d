"""Server-side logging of public catalog reads.

A storefront client may tag a GET with X-Event-Type and X-User-Id, plus
optional X-Product-Id, X-Moodboard-Id and X-Session-Id. Once the read has
succeeded, the tagged event is stored like any ingested event. Untagged
reads are not logged.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.domain.models.tracked_event import IncomingEvent
from lookbook.domain.services.event_ingestion_service import (
    EventIngestionService,
    EventValidationError,
    RequestContext,
)
from lookbook.infrastructure.rate_limiter import get_client_ip
from lookbook.persistence.database import get_db
from lookbook.persistence.models.analytics_event import ResourceType
from lookbook.persistence.repositories.analytics_repository import AnalyticsRepositoryError
from lookbook.settings import settings

logger = logging.getLogger(__name__)

EVENT_TYPE_HEADER = "X-Event-Type"
USER_ID_HEADER = "X-User-Id"


def event_from_headers(request: Request) -> IncomingEvent | None:
    """Build the tagged event, or None for an untagged request."""
    headers = request.headers
    event_type = headers.get(EVENT_TYPE_HEADER)
    user_id = headers.get(USER_ID_HEADER)
    if not event_type or not user_id:
        return None

    product_id = headers.get("X-Product-Id") or None
    moodboard_id = headers.get("X-Moodboard-Id") or None
    if product_id:
        resource_type = ResourceType.PRODUCT.value
    elif moodboard_id:
        resource_type = ResourceType.MOODBOARD.value
    else:
        resource_type = None

    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"

    return IncomingEvent(
        user_id=user_id,
        event_type=event_type,
        resource_type=resource_type,
        resource_id=product_id or moodboard_id,
        product_id=product_id,
        moodboard_id=moodboard_id,
        session_id=headers.get("X-Session-Id") or None,
        url=url,
    )


async def log_read_event(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Dependency storing a tagged read after the route has succeeded.

    Nothing is stored when the route raises an HTTP error. A rejected or
    failed write is logged and never turns the read into an error.
    """
    yield

    if request.method != "GET" or not settings.log_read_events:
        return
    event = event_from_headers(request)
    if event is None:
        return

    context = RequestContext(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        referer=request.headers.get("Referer"),
    )
    try:
        await EventIngestionService(db).ingest(event, context)
    except EventValidationError as e:
        logger.debug(f"Ignoring tagged read on {request.url.path}: {e}")
    except AnalyticsRepositoryError:
        logger.warning(f"Failed to log read event for {request.url.path}", exc_info=True)
