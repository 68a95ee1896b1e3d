"""Database models."""

from lookbook.persistence.models.admin_user import AdminUser
from lookbook.persistence.models.analytics_event import AnalyticsEvent, EventType, ResourceType
from lookbook.persistence.models.catalog import Moodboard, MoodboardProduct, Product
from lookbook.persistence.models.trusted_retailer import RetailerCategory, TrustedRetailer

__all__ = [
    "AdminUser",
    "AnalyticsEvent",
    "EventType",
    "Moodboard",
    "MoodboardProduct",
    "Product",
    "ResourceType",
    "RetailerCategory",
    "TrustedRetailer",
]
