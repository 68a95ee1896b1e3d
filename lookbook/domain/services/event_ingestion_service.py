"""Analytics event ingestion.

Normalizes raw client records and persists a batch as one unit. Client IP
and user agent always come from the request, never from the payload.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.domain.models.tracked_event import IncomingEvent
from lookbook.persistence.models.analytics_event import EventType, ResourceType
from lookbook.persistence.repositories.analytics_repository import AnalyticsEventRepository

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"

_VALID_EVENT_TYPES = {event_type.value for event_type in EventType}
_VALID_RESOURCE_TYPES = {resource_type.value for resource_type in ResourceType}


class EventValidationError(ValueError):
    """Raised when a batch contains a record that cannot be stored."""


@dataclass(frozen=True)
class RequestContext:
    """Server-observed facts about the ingestion request."""

    ip_address: str | None = None
    user_agent: str | None = None
    referer: str | None = None


@dataclass(frozen=True)
class IngestResult:
    """Outcome of a successful ingestion."""

    inserted: int


def _clip(value: str | None, length: int) -> str | None:
    if value is None:
        return None
    value = str(value)
    return value[:length] if len(value) > length else value


def normalize_event(event: IncomingEvent, context: RequestContext) -> dict[str, Any]:
    """Turn one raw record into an analytics_events row.

    Args:
        event: Raw record from the client
        context: Server-observed request facts

    Returns:
        Column values for insertion

    Raises:
        EventValidationError: If the event type is missing or unknown
    """
    event_type = event.event_type or event.event
    if not event_type or event_type not in _VALID_EVENT_TYPES:
        raise EventValidationError(f"Unknown event type: {event_type!r}")

    resource_type = event.resource_type if event.resource_type in _VALID_RESOURCE_TYPES else None

    # resourceId doubles as the product/moodboard reference when the
    # dedicated field is absent, so category joins see client events
    product_id = event.product_id
    moodboard_id = event.moodboard_id
    if product_id is None and resource_type == ResourceType.PRODUCT.value:
        product_id = event.resource_id
    if moodboard_id is None and resource_type == ResourceType.MOODBOARD.value:
        moodboard_id = event.resource_id

    metadata = event.metadata if event.metadata is not None else event.event_data

    return {
        "user_id": _clip(event.user_id or ANONYMOUS_USER, 100),
        "event_type": event_type,
        "resource_type": resource_type,
        "resource_id": _clip(event.resource_id, 100),
        "resource_name": _clip(event.resource_name, 255),
        "product_id": _clip(product_id, 100),
        "moodboard_id": _clip(moodboard_id, 100),
        "event_metadata": metadata,
        "session_id": _clip(event.session_id, 100),
        "ip_address": _clip(context.ip_address, 64),
        "user_agent": _clip(context.user_agent, 500),
        "referrer": event.referrer or context.referer,
        "url": event.url,
    }


class EventIngestionService:
    """Validates and stores batches of storefront events."""

    def __init__(self, session: AsyncSession):
        """Initialize ingestion service."""
        self.repo = AnalyticsEventRepository(session)

    async def ingest(
        self,
        events: IncomingEvent | list[IncomingEvent],
        context: RequestContext,
    ) -> IngestResult:
        """Normalize and persist a single event or a batch.

        The batch is all-or-nothing: one invalid record rejects every record,
        and a storage failure persists none of them.

        Raises:
            EventValidationError: If any record is invalid
            AnalyticsRepositoryError: If the batch cannot be stored
        """
        batch = events if isinstance(events, list) else [events]
        records = [normalize_event(event, context) for event in batch]
        inserted = await self.repo.bulk_insert(records)
        logger.debug(f"Ingested {inserted} analytics events")
        return IngestResult(inserted=inserted)
