"""Repositories."""

from lookbook.persistence.repositories.admin_user_repository import AdminUserRepository
from lookbook.persistence.repositories.analytics_repository import (
    AnalyticsEventRepository,
    AnalyticsRepositoryError,
)
from lookbook.persistence.repositories.base import BaseRepository
from lookbook.persistence.repositories.product_repository import ProductRepository
from lookbook.persistence.repositories.retailer_repository import RetailerRepository

__all__ = [
    "AdminUserRepository",
    "AnalyticsEventRepository",
    "AnalyticsRepositoryError",
    "BaseRepository",
    "ProductRepository",
    "RetailerRepository",
]
