"""Pydantic schemas for catalog products and moodboards."""

from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from lookbook.domain.models.analytics import CamelModel


class ProductResponse(CamelModel):
    """Public product representation."""

    id: str
    name: str
    slug: str
    brand: str | None = None
    category: str | None = None
    price: Decimal | None = None
    image_url: str | None = None
    affiliate_url: str | None = None
    description: str | None = None
    is_published: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ProductCreate(CamelModel):
    """Create product request."""

    id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)
    brand: str | None = None
    category: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    image_url: str | None = None
    affiliate_url: str | None = None
    description: str | None = None
    is_published: bool = True


class ProductUpdate(CamelModel):
    """Update product request; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, min_length=1, max_length=255)
    brand: str | None = None
    category: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    image_url: str | None = None
    affiliate_url: str | None = None
    description: str | None = None
    is_published: bool | None = None


class Pagination(CamelModel):
    """Page metadata for catalog listings."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=-(-total // limit) if limit else 0,
            has_next_page=page * limit < total,
            has_prev_page=page > 1,
        )


class ProductListResponse(CamelModel):
    data: list[ProductResponse]
    pagination: Pagination


class MoodboardSummary(CamelModel):
    """Moodboard as shown in listings."""

    id: str
    title: str
    slug: str
    description: str | None = None
    cover_image: str | None = None
    is_published: bool = True
    product_count: int = 0
    created_at: datetime | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MoodboardDetail(MoodboardSummary):
    """Moodboard with its products in placement order."""

    products: list[ProductResponse] = []
    updated_at: datetime | None = None


class MoodboardListResponse(CamelModel):
    data: list[MoodboardSummary]
    pagination: Pagination


class MoodboardCreate(CamelModel):
    """Create moodboard request."""

    id: str = Field(min_length=1, max_length=100)
    title: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)
    description: str | None = None
    cover_image: str | None = None
    is_published: bool = True
    product_ids: list[str] = Field(default_factory=list, max_length=200)


class MoodboardUpdate(CamelModel):
    """Update moodboard request; omitted fields are left unchanged.

    A productIds list replaces the current placements.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    cover_image: str | None = None
    is_published: bool | None = None
    product_ids: list[str] | None = Field(default=None, max_length=200)
