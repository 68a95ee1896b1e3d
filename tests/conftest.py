"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; keep tests off any real database or Redis
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_ENABLED", "false")

from datetime import datetime, timedelta

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lookbook.core.auth import create_access_token
from lookbook.core.password import hash_password
from lookbook.infrastructure.aggregation_cache import aggregation_cache
from lookbook.infrastructure.rate_limiter import in_memory_limiter
from lookbook.persistence.database import Base, get_db
from lookbook.persistence.models import *  # noqa: F401, F403
from lookbook.persistence.models.admin_user import AdminUser
from lookbook.persistence.models.analytics_event import AnalyticsEvent
from lookbook.persistence.models.catalog import Moodboard, MoodboardProduct, Product


@pytest.fixture(autouse=True)
def reset_shared_state():
    """Rate limit windows and cached aggregates are process-wide."""
    in_memory_limiter.reset()
    aggregation_cache.clear()
    yield
    in_memory_limiter.reset()
    aggregation_cache.clear()


@pytest.fixture
async def db_session():
    """Create a test database session."""
    # Use in-memory SQLite for testing
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def client(db_session):
    """Create a test HTTP client bound to the app and the test session."""
    from lookbook.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app, client=("203.0.113.7", 51234))
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
async def admin_user(db_session):
    """Admin account with password "correct-horse"."""
    admin = AdminUser(
        email="mimi@lookbook.test",
        name="Mimi",
        hashed_password=hash_password("correct-horse"),
        role="admin",
    )
    db_session.add(admin)
    await db_session.commit()
    await db_session.refresh(admin)
    return admin


@pytest.fixture
def admin_headers(admin_user):
    token = create_access_token(data={"sub": str(admin_user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def add_product(db_session):
    """Factory inserting a catalog product."""

    async def _add(product_id: str, category: str | None = None, affiliate_url: str | None = None, **extra):
        product = Product(
            id=product_id,
            name=extra.pop("name", product_id.replace("_", " ").title()),
            slug=extra.pop("slug", product_id.replace("_", "-")),
            category=category,
            affiliate_url=affiliate_url,
            **extra,
        )
        db_session.add(product)
        await db_session.commit()
        return product

    return _add


@pytest.fixture
def add_moodboard(db_session):
    """Factory inserting a moodboard."""

    async def _add(moodboard_id: str, title: str, product_ids: list[str] | None = None, **extra):
        moodboard = Moodboard(id=moodboard_id, title=title, slug=moodboard_id.replace("_", "-"), **extra)
        db_session.add(moodboard)
        await db_session.flush()
        for index, product_id in enumerate(product_ids or []):
            db_session.add(MoodboardProduct(moodboard_id=moodboard.id, product_id=product_id, sort_order=index))
        await db_session.commit()
        return moodboard

    return _add


@pytest.fixture
def add_event(db_session):
    """Factory inserting an analytics event `days_ago` days in the past."""

    async def _add(event_type: str, user_id: str = "user-1", days_ago: float = 0.5, **fields):
        event = AnalyticsEvent(
            event_type=event_type,
            user_id=user_id,
            created_at=datetime.utcnow() - timedelta(days=days_ago),
            **fields,
        )
        db_session.add(event)
        await db_session.commit()
        return event

    return _add
