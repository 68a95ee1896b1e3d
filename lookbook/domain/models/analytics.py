"""Dashboard analytics result shapes.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import date as day_type, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Overview ---

class OverviewMetrics(CamelModel):
    total_visitors: int = 0
    total_page_views: int = 0
    total_product_views: int = 0
    total_moodboard_views: int = 0
    total_searches: int = 0
    total_favorites: int = 0
    total_affiliate_clicks: int = 0
    time_range: str


# --- Charts ---

class TimeseriesPoint(CamelModel):
    date: day_type
    views: int = 0
    clicks: int = 0
    searches: int = 0
    favorites: int = 0
    visitors: int = 0


class TimeseriesResponse(CamelModel):
    time_range: str
    data: list[TimeseriesPoint] = []


class CategoryShare(CamelModel):
    category: str
    count: int
    percentage: float


class CategoryDistributionResponse(CamelModel):
    time_range: str
    data: list[CategoryShare] = []


class FunnelStage(CamelModel):
    stage: str
    count: int
    conversion_rate: float
    drop_off_rate: float


class TrendMetric(CamelModel):
    metric: str
    current: int
    previous: int
    change: int
    change_percentage: float | None = None  # None when previous is 0
    trend: Literal["up", "down", "flat"]


# --- Users ---

class TrafficSource(CamelModel):
    source: str
    visitors: int
    percentage: float


class UserBehaviorResponse(CamelModel):
    new_users: int = 0
    returning_users: int = 0
    traffic_sources: list[TrafficSource] = []
    time_range: str


# --- Products & moodboards ---

class ProductEngagement(CamelModel):
    id: str
    name: str
    slug: str | None = None
    views: int = 0
    favorites: int = 0
    clicks: int = 0
    unique_users: int = 0
    conversion_rate: float = 0.0  # clicks / views * 100


class SearchTermStat(CamelModel):
    term: str
    count: int
    unique_searchers: int


class ProductAnalyticsResponse(CamelModel):
    top_products: list[ProductEngagement] = []
    top_searches: list[SearchTermStat] = []
    time_range: str


class ProductDetailMetrics(CamelModel):
    views: int = 0
    unique_viewers: int = 0
    favorites: int = 0
    clicks: int = 0
    conversion_rate: float = 0.0


class DailyCount(CamelModel):
    date: day_type
    count: int


class ProductDetailAnalyticsResponse(CamelModel):
    product_id: str
    metrics: ProductDetailMetrics
    views_by_day: list[DailyCount] = []
    clicks_by_day: list[DailyCount] = []
    time_range: str


class MoodboardEngagement(CamelModel):
    id: str
    title: str
    slug: str | None = None
    views: int = 0
    clicks: int = 0
    unique_users: int = 0
    click_through_rate: float = 0.0  # product clicks / views * 100


class MoodboardAnalyticsResponse(CamelModel):
    top_moodboards: list[MoodboardEngagement] = []
    time_range: str


# --- Activity feed ---

class ActivityItem(CamelModel):
    id: int
    type: str
    user_id: str
    resource_type: str | None = None
    resource_id: str | None = None
    resource_name: str | None = None
    product_id: str | None = None
    moodboard_id: str | None = None
    event_data: dict[str, Any] | None = None
    timestamp: datetime


class RecentActivityResponse(CamelModel):
    events: list[ActivityItem] = []
