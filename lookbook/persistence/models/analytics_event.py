"""Analytics event model for storefront engagement tracking."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, Index, Integer, JSON, String, Text

from lookbook.persistence.database import Base


class EventType(str, Enum):
    """Storefront interaction event types."""

    PAGE_VIEW = "page_view"
    PRODUCT_VIEW = "product_view"
    MOODBOARD_VIEW = "moodboard_view"
    MOODBOARD_FILTER = "moodboard_filter"
    MOODBOARD_PRODUCT_CLICK = "moodboard_product_click"
    SEARCH = "search"
    FAVORITE_ADD = "favorite_add"
    FAVORITE_REMOVE = "favorite_remove"
    AFFILIATE_CLICK = "affiliate_click"
    FILTER_CHANGE = "filter_change"
    SORT_CHANGE = "sort_change"


class ResourceType(str, Enum):
    """Resources an event can refer to."""

    PRODUCT = "product"
    MOODBOARD = "moodboard"


class AnalyticsEvent(Base):
    """Append-only storefront analytics fact.

    product_id and moodboard_id are plain references without foreign keys:
    products and moodboards may be deleted while their events persist.
    """

    __tablename__ = "analytics_events"

    id = Column(Integer, primary_key=True, index=True)

    # Pseudonymous correlation key supplied by the client
    user_id = Column(String(100), nullable=False, default="anonymous", index=True)
    event_type = Column(String(50), nullable=False, index=True)

    resource_type = Column(String(20), nullable=True)
    resource_id = Column(String(100), nullable=True)
    resource_name = Column(String(255), nullable=True)
    product_id = Column(String(100), nullable=True, index=True)
    moodboard_id = Column(String(100), nullable=True, index=True)

    # Free-form payload, e.g. {query, resultsCount, category}
    event_metadata = Column("metadata", JSON, nullable=True)

    # Request context
    session_id = Column(String(100), nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    referrer = Column(Text, nullable=True)
    url = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("ix_analytics_events_type_date", "event_type", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AnalyticsEvent(id={self.id}, event_type={self.event_type}, user_id={self.user_id})>"
