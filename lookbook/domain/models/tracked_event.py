"""Incoming analytics event as posted by storefront clients."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class IncomingEvent(BaseModel):
    """One raw event record from POST /api/analytics/track.

    Every field is optional at this layer; normalization fills defaults and
    rejects records without a known event type.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str | None = Field(default=None, alias="userId")
    event_type: str | None = Field(default=None, alias="eventType")
    # Legacy field name used by older clients
    event: str | None = None
    resource_type: str | None = Field(default=None, alias="resourceType")
    resource_id: str | None = Field(default=None, alias="resourceId")
    resource_name: str | None = Field(default=None, alias="resourceName")
    product_id: str | None = Field(default=None, alias="productId")
    moodboard_id: str | None = Field(default=None, alias="moodboardId")
    metadata: dict[str, Any] | None = None
    event_data: dict[str, Any] | None = Field(default=None, alias="eventData")
    session_id: str | None = Field(default=None, alias="sessionId")
    referrer: str | None = None
    url: str | None = None
    timestamp: str | None = None
