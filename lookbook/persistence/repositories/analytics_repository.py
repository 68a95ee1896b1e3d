"""Analytics event storage and aggregation queries.

Every query is built with SQLAlchemy expressions so that all user-supplied
values (time windows, product ids, limits) travel as bound parameters.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import case, func, insert, literal, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.persistence.models.analytics_event import AnalyticsEvent, EventType
from lookbook.persistence.models.catalog import Moodboard, Product

UNKNOWN_CATEGORY = "Unknown"

VISITOR_EVENT_TYPES = (
    EventType.PAGE_VIEW.value,
    EventType.PRODUCT_VIEW.value,
    EventType.MOODBOARD_VIEW.value,
    EventType.SEARCH.value,
)


class AnalyticsRepositoryError(RuntimeError):
    """Raised when the analytics repository cannot fulfill a request."""


def _window(start: datetime, end: datetime | None = None) -> list:
    """Half-open [start, end) filter on created_at."""
    conditions = [AnalyticsEvent.created_at >= start]
    if end is not None:
        conditions.append(AnalyticsEvent.created_at < end)
    return conditions


def _count_type(event_type: EventType):
    return func.sum(case((AnalyticsEvent.event_type == event_type.value, 1), else_=0))


def _to_date(value: Any) -> date:
    """Normalize a DATE() bucket across dialects (SQLite returns text)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class AnalyticsEventRepository:
    """Repository for analytics events.

    Note: events are write-once; there is no update or single-row delete.
    """

    def __init__(self, session: AsyncSession):
        """Initialize analytics event repository."""
        self.session = session

    async def _execute(self, stmt):
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise AnalyticsRepositoryError(str(exc)) from exc

    async def bulk_insert(self, records: list[dict[str, Any]]) -> int:
        """Insert a batch of normalized events in one statement.

        The batch is committed as a unit; on failure the session is rolled
        back and nothing from the batch is persisted.

        Returns:
            Number of inserted records
        """
        if not records:
            return 0
        try:
            await self.session.execute(insert(AnalyticsEvent), records)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise AnalyticsRepositoryError(str(exc)) from exc
        return len(records)

    async def count_distinct_users(self, start: datetime, end: datetime | None = None) -> int:
        """Count distinct user ids with any event in the window."""
        stmt = select(func.count(func.distinct(AnalyticsEvent.user_id))).where(*_window(start, end))
        result = await self._execute(stmt)
        return int(result.scalar() or 0)

    async def count_events(
        self,
        event_type: EventType,
        start: datetime,
        end: datetime | None = None,
    ) -> int:
        """Count events of one type in the window."""
        stmt = select(func.count(AnalyticsEvent.id)).where(
            AnalyticsEvent.event_type == event_type.value,
            *_window(start, end),
        )
        result = await self._execute(stmt)
        return int(result.scalar() or 0)

    async def count_by_event_type(self, start: datetime, end: datetime | None = None) -> dict[str, int]:
        """Count events per type in the window."""
        stmt = (
            select(AnalyticsEvent.event_type, func.count(AnalyticsEvent.id))
            .where(*_window(start, end))
            .group_by(AnalyticsEvent.event_type)
        )
        result = await self._execute(stmt)
        return {event_type: int(count) for event_type, count in result.all()}

    async def daily_activity(self, start: datetime) -> list[dict[str, Any]]:
        """Per-day counts of views, clicks, searches, favorites and visitors.

        Days without events are absent; callers fill gaps.
        """
        day = func.date(AnalyticsEvent.created_at).label("day")
        visitors = func.count(
            func.distinct(
                case(
                    (AnalyticsEvent.event_type.in_(VISITOR_EVENT_TYPES), AnalyticsEvent.user_id),
                )
            )
        )
        stmt = (
            select(
                day,
                _count_type(EventType.PRODUCT_VIEW).label("views"),
                _count_type(EventType.AFFILIATE_CLICK).label("clicks"),
                _count_type(EventType.SEARCH).label("searches"),
                _count_type(EventType.FAVORITE_ADD).label("favorites"),
                visitors.label("visitors"),
            )
            .where(*_window(start))
            .group_by(day)
            .order_by(day)
        )
        result = await self._execute(stmt)
        return [
            {
                "date": _to_date(row.day),
                "views": int(row.views or 0),
                "clicks": int(row.clicks or 0),
                "searches": int(row.searches or 0),
                "favorites": int(row.favorites or 0),
                "visitors": int(row.visitors or 0),
            }
            for row in result
        ]

    async def affiliate_clicks_by_category(self, start: datetime) -> list[tuple[str, int]]:
        """Affiliate clicks grouped by the referenced product's category.

        Events whose product no longer exists (or has no category) are
        grouped under "Unknown", together with a real "Unknown" category.
        """
        # Rendered inline so SELECT and GROUP BY carry the same expression
        blank = literal("", literal_execute=True)
        unknown = literal(UNKNOWN_CATEGORY, literal_execute=True)
        category = func.coalesce(func.nullif(Product.category, blank), unknown).label("category")
        count = func.count(AnalyticsEvent.id).label("count")
        stmt = (
            select(category, count)
            .select_from(AnalyticsEvent)
            .outerjoin(Product, Product.id == AnalyticsEvent.product_id)
            .where(
                AnalyticsEvent.event_type == EventType.AFFILIATE_CLICK.value,
                *_window(start),
            )
            .group_by(category)
        )
        result = await self._execute(stmt)
        rows = [(row.category, int(row.count)) for row in result]
        rows.sort(key=lambda item: (-item[1], item[0]))
        return rows

    async def count_new_users(self, since: datetime) -> int:
        """Count users whose earliest recorded event falls on or after since.

        Known approximation: users whose earlier history was purged from the
        event log are counted as new.
        """
        first_seen = (
            select(AnalyticsEvent.user_id)
            .group_by(AnalyticsEvent.user_id)
            .having(func.min(AnalyticsEvent.created_at) >= since)
            .subquery()
        )
        result = await self._execute(select(func.count()).select_from(first_seen))
        return int(result.scalar() or 0)

    async def referrer_counts(self, start: datetime) -> list[tuple[str | None, int]]:
        """Count events per referrer in the window, most frequent first."""
        count = func.count(AnalyticsEvent.id).label("count")
        stmt = (
            select(AnalyticsEvent.referrer, count)
            .where(*_window(start))
            .group_by(AnalyticsEvent.referrer)
            .order_by(count.desc())
        )
        result = await self._execute(stmt)
        return [(row.referrer, int(row.count)) for row in result]

    async def product_engagement(self, start: datetime, limit: int) -> list[dict[str, Any]]:
        """Per-product views, favorites and clicks, ordered by views."""
        views = _count_type(EventType.PRODUCT_VIEW).label("views")
        stmt = (
            select(
                AnalyticsEvent.product_id,
                Product.name,
                Product.slug,
                views,
                _count_type(EventType.FAVORITE_ADD).label("favorites"),
                _count_type(EventType.AFFILIATE_CLICK).label("clicks"),
                func.count(func.distinct(AnalyticsEvent.user_id)).label("unique_users"),
            )
            .select_from(AnalyticsEvent)
            .outerjoin(Product, Product.id == AnalyticsEvent.product_id)
            .where(AnalyticsEvent.product_id.is_not(None), *_window(start))
            .group_by(AnalyticsEvent.product_id, Product.name, Product.slug)
            .order_by(views.desc(), AnalyticsEvent.product_id)
            .limit(limit)
        )
        result = await self._execute(stmt)
        return [
            {
                "id": row.product_id,
                "name": row.name or row.product_id,
                "slug": row.slug,
                "views": int(row.views or 0),
                "favorites": int(row.favorites or 0),
                "clicks": int(row.clicks or 0),
                "unique_users": int(row.unique_users or 0),
            }
            for row in result
        ]

    async def search_payloads(self, start: datetime) -> list[tuple[dict[str, Any], str]]:
        """Metadata and user id of every search event in the window."""
        stmt = select(AnalyticsEvent.event_metadata, AnalyticsEvent.user_id).where(
            AnalyticsEvent.event_type == EventType.SEARCH.value,
            *_window(start),
        )
        result = await self._execute(stmt)
        return [(row.event_metadata or {}, row.user_id) for row in result]

    async def product_metrics(self, product_id: str, start: datetime) -> dict[str, int]:
        """Views, unique viewers, favorites and clicks for one product."""
        is_view = AnalyticsEvent.event_type == EventType.PRODUCT_VIEW.value
        stmt = select(
            _count_type(EventType.PRODUCT_VIEW).label("views"),
            func.count(func.distinct(case((is_view, AnalyticsEvent.user_id)))).label("unique_viewers"),
            _count_type(EventType.FAVORITE_ADD).label("favorites"),
            _count_type(EventType.AFFILIATE_CLICK).label("clicks"),
        ).where(AnalyticsEvent.product_id == product_id, *_window(start))
        row = (await self._execute(stmt)).one()
        return {
            "views": int(row.views or 0),
            "unique_viewers": int(row.unique_viewers or 0),
            "favorites": int(row.favorites or 0),
            "clicks": int(row.clicks or 0),
        }

    async def product_daily_counts(
        self,
        product_id: str,
        event_type: EventType,
        start: datetime,
    ) -> list[tuple[date, int]]:
        """Daily count of one event type for one product."""
        day = func.date(AnalyticsEvent.created_at).label("day")
        stmt = (
            select(day, func.count(AnalyticsEvent.id).label("count"))
            .where(
                AnalyticsEvent.product_id == product_id,
                AnalyticsEvent.event_type == event_type.value,
                *_window(start),
            )
            .group_by(day)
            .order_by(day)
        )
        result = await self._execute(stmt)
        return [(_to_date(row.day), int(row.count)) for row in result]

    async def moodboard_engagement(self, start: datetime, limit: int) -> list[dict[str, Any]]:
        """Per-moodboard views and product clicks, ordered by views."""
        views = _count_type(EventType.MOODBOARD_VIEW).label("views")
        stmt = (
            select(
                AnalyticsEvent.moodboard_id,
                Moodboard.title,
                Moodboard.slug,
                views,
                _count_type(EventType.MOODBOARD_PRODUCT_CLICK).label("clicks"),
                func.count(func.distinct(AnalyticsEvent.user_id)).label("unique_users"),
            )
            .select_from(AnalyticsEvent)
            .outerjoin(Moodboard, Moodboard.id == AnalyticsEvent.moodboard_id)
            .where(AnalyticsEvent.moodboard_id.is_not(None), *_window(start))
            .group_by(AnalyticsEvent.moodboard_id, Moodboard.title, Moodboard.slug)
            .order_by(views.desc(), AnalyticsEvent.moodboard_id)
            .limit(limit)
        )
        result = await self._execute(stmt)
        return [
            {
                "id": row.moodboard_id,
                "title": row.title or row.moodboard_id,
                "slug": row.slug,
                "views": int(row.views or 0),
                "clicks": int(row.clicks or 0),
                "unique_users": int(row.unique_users or 0),
            }
            for row in result
        ]

    async def recent_events(self, limit: int) -> list[AnalyticsEvent]:
        """Most recent events, newest first."""
        stmt = (
            select(AnalyticsEvent)
            .order_by(AnalyticsEvent.created_at.desc(), AnalyticsEvent.id.desc())
            .limit(limit)
        )
        result = await self._execute(stmt)
        return list(result.scalars().all())
