"""Dashboard analytics aggregation.

All figures are computed at read time from the append-only event log over a
rolling window of the last N days. Chart queries (timeseries, categories,
funnel, trends) are served through the aggregation cache.
"""

import logging
import re
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

import pytz
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.domain.models.analytics import (
    ActivityItem,
    CategoryDistributionResponse,
    CategoryShare,
    DailyCount,
    FunnelStage,
    MoodboardAnalyticsResponse,
    MoodboardEngagement,
    OverviewMetrics,
    ProductAnalyticsResponse,
    ProductDetailAnalyticsResponse,
    ProductDetailMetrics,
    ProductEngagement,
    RecentActivityResponse,
    SearchTermStat,
    TimeseriesPoint,
    TimeseriesResponse,
    TrafficSource,
    TrendMetric,
    UserBehaviorResponse,
)
from lookbook.infrastructure.aggregation_cache import AggregationCache, aggregation_cache
from lookbook.persistence.models.analytics_event import EventType
from lookbook.persistence.repositories.analytics_repository import AnalyticsEventRepository
from lookbook.settings import settings

logger = logging.getLogger(__name__)

_TIME_RANGE_RE = re.compile(r"^(\d{1,3})d$")

FUNNEL_STAGES = ("Visitors", "Product Views", "Favorites", "Affiliate Clicks")
TOP_SEARCH_TERMS = 10


class InvalidTimeRangeError(ValueError):
    """Raised for a timeRange that is not of the form "<N>d"."""


@dataclass(frozen=True)
class AnalyticsWindow:
    """Rolling window of the last `days` days ending at `now` (naive UTC).

    Attributes:
        time_range: Canonical "<N>d" label, also the cache key component
        days: Window length in days
        now: Window end
    """

    time_range: str
    days: int
    now: datetime

    @property
    def since(self) -> datetime:
        return self.now - timedelta(days=self.days)

    @property
    def previous_start(self) -> datetime:
        """Start of the preceding window of equal length."""
        return self.now - timedelta(days=2 * self.days)


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching stored timestamps."""
    return datetime.now(pytz.utc).replace(tzinfo=None)


def parse_time_range(
    value: str | None,
    max_days: int | None = None,
    now: datetime | None = None,
) -> AnalyticsWindow:
    """Parse "7d" / "30d" / "90d" style ranges.

    Any "<N>d" with 1 <= N <= max_days is accepted; None means the default.

    Raises:
        InvalidTimeRangeError: If the value is malformed or out of bounds
    """
    max_days = max_days or settings.analytics_max_days
    raw = (value or settings.analytics_default_time_range).strip().lower()
    match = _TIME_RANGE_RE.match(raw)
    if not match:
        raise InvalidTimeRangeError(f"Invalid timeRange {value!r}; expected e.g. 7d, 30d or 90d")
    days = int(match.group(1))
    if not 1 <= days <= max_days:
        raise InvalidTimeRangeError(f"timeRange must be between 1d and {max_days}d")
    return AnalyticsWindow(time_range=f"{days}d", days=days, now=now or utc_now())


def percentage(part: int, whole: int) -> float:
    """part / whole * 100 rounded to one decimal, 0.0 when whole is 0."""
    if not whole:
        return 0.0
    return round(part / whole * 100, 1)


def build_funnel(steps: list[tuple[str, int]]) -> list[FunnelStage]:
    """Turn ordered (stage, count) pairs into funnel stages.

    Each stage converts from the one before it; the first stage is always
    100% converted with no drop-off.
    """
    stages = []
    for index, (label, count) in enumerate(steps):
        if index == 0:
            conversion = 100.0
        else:
            conversion = percentage(count, steps[index - 1][1])
        stages.append(
            FunnelStage(
                stage=label,
                count=count,
                conversion_rate=conversion,
                drop_off_rate=round(100 - conversion, 1),
            )
        )
    return stages


def compute_trend(metric: str, current: int, previous: int) -> TrendMetric:
    """Compare the current window against the previous one."""
    change = current - previous
    change_percentage = round(change / previous * 100, 1) if previous else None
    if change > 0:
        trend = "up"
    elif change < 0:
        trend = "down"
    else:
        trend = "flat"
    return TrendMetric(
        metric=metric,
        current=current,
        previous=previous,
        change=change,
        change_percentage=change_percentage,
        trend=trend,
    )


def fill_gaps(rows: list[dict[str, Any]], start: date, end: date) -> list[TimeseriesPoint]:
    """Return one point per day in [start, end], zero-filled where absent."""
    by_day = {row["date"]: row for row in rows}
    points = []
    day = start
    while day <= end:
        row = by_day.get(day)
        points.append(TimeseriesPoint(**row) if row else TimeseriesPoint(date=day))
        day += timedelta(days=1)
    return points


def _search_term(metadata: Any) -> str | None:
    if not isinstance(metadata, dict):
        return None
    term = metadata.get("term") or metadata.get("query")
    if not isinstance(term, str):
        return None
    term = term.strip()
    return term or None


class AnalyticsService:
    """Read-side service backing the admin analytics dashboard.

    Usage:
        service = AnalyticsService(db)
        funnel = await service.funnel(parse_time_range("7d"))
    """

    def __init__(self, session: AsyncSession, cache: AggregationCache | None = None):
        """Initialize analytics service."""
        self.repo = AnalyticsEventRepository(session)
        self.cache = cache if cache is not None else aggregation_cache

    async def overview(self, window: AnalyticsWindow) -> OverviewMetrics:
        """Distinct visitors and per-type event counts."""
        visitors = await self.repo.count_distinct_users(window.since)
        counts = await self.repo.count_by_event_type(window.since)
        return OverviewMetrics(
            total_visitors=visitors,
            total_page_views=counts.get(EventType.PAGE_VIEW.value, 0),
            total_product_views=counts.get(EventType.PRODUCT_VIEW.value, 0),
            total_moodboard_views=counts.get(EventType.MOODBOARD_VIEW.value, 0),
            total_searches=counts.get(EventType.SEARCH.value, 0),
            total_favorites=counts.get(EventType.FAVORITE_ADD.value, 0),
            total_affiliate_clicks=counts.get(EventType.AFFILIATE_CLICK.value, 0),
            time_range=window.time_range,
        )

    async def timeseries(self, window: AnalyticsWindow) -> TimeseriesResponse:
        """Daily activity, one row per day from the window start to today."""

        async def compute() -> dict:
            rows = await self.repo.daily_activity(window.since)
            points = fill_gaps(rows, window.since.date(), window.now.date())
            response = TimeseriesResponse(time_range=window.time_range, data=points)
            return response.model_dump(mode="json", by_alias=True)

        payload = await self.cache.get_or_compute("timeseries", window.time_range, compute)
        return TimeseriesResponse.model_validate(payload)

    async def categories(self, window: AnalyticsWindow) -> CategoryDistributionResponse:
        """Affiliate click share per product category."""

        async def compute() -> dict:
            rows = await self.repo.affiliate_clicks_by_category(window.since)
            total = sum(count for _, count in rows)
            data = [
                CategoryShare(category=category, count=count, percentage=percentage(count, total))
                for category, count in rows
            ]
            response = CategoryDistributionResponse(time_range=window.time_range, data=data)
            return response.model_dump(mode="json", by_alias=True)

        payload = await self.cache.get_or_compute("categories", window.time_range, compute)
        return CategoryDistributionResponse.model_validate(payload)

    async def funnel(self, window: AnalyticsWindow) -> list[FunnelStage]:
        """Visitors -> Product Views -> Favorites -> Affiliate Clicks."""

        async def compute() -> list[dict]:
            counts = [
                await self.repo.count_distinct_users(window.since),
                await self.repo.count_events(EventType.PRODUCT_VIEW, window.since),
                await self.repo.count_events(EventType.FAVORITE_ADD, window.since),
                await self.repo.count_events(EventType.AFFILIATE_CLICK, window.since),
            ]
            stages = build_funnel(list(zip(FUNNEL_STAGES, counts)))
            return [stage.model_dump(mode="json", by_alias=True) for stage in stages]

        payload = await self.cache.get_or_compute("funnel", window.time_range, compute)
        return [FunnelStage.model_validate(item) for item in payload]

    async def trends(self, window: AnalyticsWindow) -> list[TrendMetric]:
        """Current window versus the preceding window of equal length."""

        async def compute() -> list[dict]:
            current = (window.since, window.now)
            previous = (window.previous_start, window.since)
            trends = []
            for metric, event_type in (
                ("Views", EventType.PRODUCT_VIEW),
                ("Clicks", EventType.AFFILIATE_CLICK),
                ("Favorites", EventType.FAVORITE_ADD),
            ):
                trends.append(
                    compute_trend(
                        metric,
                        await self.repo.count_events(event_type, *current),
                        await self.repo.count_events(event_type, *previous),
                    )
                )
            trends.append(
                compute_trend(
                    "Visitors",
                    await self.repo.count_distinct_users(*current),
                    await self.repo.count_distinct_users(*previous),
                )
            )
            return [trend.model_dump(mode="json", by_alias=True) for trend in trends]

        payload = await self.cache.get_or_compute("trends", window.time_range, compute)
        return [TrendMetric.model_validate(item) for item in payload]

    async def user_behavior(self, window: AnalyticsWindow) -> UserBehaviorResponse:
        """New vs returning users and traffic sources.

        A user counts as new when their earliest recorded event falls inside
        the window.
        """
        visitors = await self.repo.count_distinct_users(window.since)
        new_users = min(await self.repo.count_new_users(window.since), visitors)

        sources: Counter[str] = Counter()
        for referrer, count in await self.repo.referrer_counts(window.since):
            sources[referrer or "Direct"] += count
        total = sum(sources.values())
        traffic = [
            TrafficSource(source=source, visitors=count, percentage=percentage(count, total))
            for source, count in sorted(sources.items(), key=lambda item: (-item[1], item[0]))
        ]
        return UserBehaviorResponse(
            new_users=new_users,
            returning_users=visitors - new_users,
            traffic_sources=traffic,
            time_range=window.time_range,
        )

    async def product_analytics(self, window: AnalyticsWindow, limit: int = 10) -> ProductAnalyticsResponse:
        """Top products by views plus the most frequent search terms."""
        limit = min(max(limit, 1), 50)
        rows = await self.repo.product_engagement(window.since, limit)
        top_products = [
            ProductEngagement(**row, conversion_rate=percentage(row["clicks"], row["views"]))
            for row in rows
        ]

        term_counts: Counter[str] = Counter()
        searchers: dict[str, set[str]] = defaultdict(set)
        for metadata, user_id in await self.repo.search_payloads(window.since):
            term = _search_term(metadata)
            if term is None:
                continue
            term_counts[term] += 1
            searchers[term].add(user_id)
        top_terms = sorted(term_counts.items(), key=lambda item: (-item[1], item[0]))[:TOP_SEARCH_TERMS]

        return ProductAnalyticsResponse(
            top_products=top_products,
            top_searches=[
                SearchTermStat(term=term, count=count, unique_searchers=len(searchers[term]))
                for term, count in top_terms
            ],
            time_range=window.time_range,
        )

    async def product_by_id(self, product_id: str, window: AnalyticsWindow) -> ProductDetailAnalyticsResponse:
        """Engagement metrics and daily views/clicks for one product."""
        metrics = await self.repo.product_metrics(product_id, window.since)
        views_by_day = await self.repo.product_daily_counts(product_id, EventType.PRODUCT_VIEW, window.since)
        clicks_by_day = await self.repo.product_daily_counts(product_id, EventType.AFFILIATE_CLICK, window.since)
        return ProductDetailAnalyticsResponse(
            product_id=product_id,
            metrics=ProductDetailMetrics(
                **metrics,
                conversion_rate=percentage(metrics["clicks"], metrics["views"]),
            ),
            views_by_day=[DailyCount(date=day, count=count) for day, count in views_by_day],
            clicks_by_day=[DailyCount(date=day, count=count) for day, count in clicks_by_day],
            time_range=window.time_range,
        )

    async def moodboard_analytics(self, window: AnalyticsWindow, limit: int = 10) -> MoodboardAnalyticsResponse:
        """Top moodboards by views with product click-through rate."""
        limit = min(max(limit, 1), 50)
        rows = await self.repo.moodboard_engagement(window.since, limit)
        return MoodboardAnalyticsResponse(
            top_moodboards=[
                MoodboardEngagement(**row, click_through_rate=percentage(row["clicks"], row["views"]))
                for row in rows
            ],
            time_range=window.time_range,
        )

    async def recent_activity(self, limit: int = 20) -> RecentActivityResponse:
        """Latest events across all users, newest first."""
        limit = min(max(limit, 1), 100)
        events = await self.repo.recent_events(limit)
        return RecentActivityResponse(
            events=[
                ActivityItem(
                    id=event.id,
                    type=event.event_type,
                    user_id=event.user_id,
                    resource_type=event.resource_type,
                    resource_id=event.resource_id,
                    resource_name=event.resource_name,
                    product_id=event.product_id,
                    moodboard_id=event.moodboard_id,
                    event_data=event.event_metadata if isinstance(event.event_metadata, dict) else None,
                    timestamp=event.created_at,
                )
                for event in events
            ]
        )
