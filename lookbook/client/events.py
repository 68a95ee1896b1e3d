"""Typed storefront events.

Each event type declares its own metadata shape; the union is discriminated
by `eventType`. Only `filter_change.filters` is a free-form map.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from lookbook.domain.models.analytics import CamelModel


# --- Metadata shapes ---

class PageViewMetadata(CamelModel):
    page: str


class ProductMetadata(CamelModel):
    product_name: str


class MoodboardViewMetadata(CamelModel):
    moodboard_title: str


class SearchMetadata(CamelModel):
    query: str
    results_count: int
    category: str | None = None


class AffiliateClickMetadata(CamelModel):
    product_name: str
    retailer: str


class FilterChangeMetadata(CamelModel):
    filters: dict[str, Any]


class SortChangeMetadata(CamelModel):
    sort_by: str


class MoodboardFilterMetadata(CamelModel):
    tag: str
    results_count: int | None = None


class MoodboardProductClickMetadata(CamelModel):
    moodboard_title: str
    product_id: str
    product_name: str


# --- Events ---

class _EventBase(CamelModel):
    resource_type: Literal["product", "moodboard"] | None = None
    resource_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Wire representation (camelCase, nulls omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PageViewEvent(_EventBase):
    event_type: Literal["page_view"] = "page_view"
    metadata: PageViewMetadata


class ProductViewEvent(_EventBase):
    event_type: Literal["product_view"] = "product_view"
    resource_type: Literal["product"] = "product"
    metadata: ProductMetadata


class MoodboardViewEvent(_EventBase):
    event_type: Literal["moodboard_view"] = "moodboard_view"
    resource_type: Literal["moodboard"] = "moodboard"
    metadata: MoodboardViewMetadata


class SearchEvent(_EventBase):
    event_type: Literal["search"] = "search"
    metadata: SearchMetadata


class FavoriteAddEvent(_EventBase):
    event_type: Literal["favorite_add"] = "favorite_add"
    resource_type: Literal["product"] = "product"
    metadata: ProductMetadata


class FavoriteRemoveEvent(_EventBase):
    event_type: Literal["favorite_remove"] = "favorite_remove"
    resource_type: Literal["product"] = "product"
    metadata: None = None


class AffiliateClickEvent(_EventBase):
    event_type: Literal["affiliate_click"] = "affiliate_click"
    resource_type: Literal["product"] = "product"
    metadata: AffiliateClickMetadata


class FilterChangeEvent(_EventBase):
    event_type: Literal["filter_change"] = "filter_change"
    metadata: FilterChangeMetadata


class SortChangeEvent(_EventBase):
    event_type: Literal["sort_change"] = "sort_change"
    metadata: SortChangeMetadata


class MoodboardFilterEvent(_EventBase):
    event_type: Literal["moodboard_filter"] = "moodboard_filter"
    metadata: MoodboardFilterMetadata


class MoodboardProductClickEvent(_EventBase):
    event_type: Literal["moodboard_product_click"] = "moodboard_product_click"
    resource_type: Literal["moodboard"] = "moodboard"
    metadata: MoodboardProductClickMetadata


TrackedEvent = Annotated[
    Union[
        PageViewEvent,
        ProductViewEvent,
        MoodboardViewEvent,
        SearchEvent,
        FavoriteAddEvent,
        FavoriteRemoveEvent,
        AffiliateClickEvent,
        FilterChangeEvent,
        SortChangeEvent,
        MoodboardFilterEvent,
        MoodboardProductClickEvent,
    ],
    Field(discriminator="event_type"),
]

tracked_event_adapter: TypeAdapter[TrackedEvent] = TypeAdapter(TrackedEvent)


# --- Convenience constructors ---

def page_view(page: str) -> PageViewEvent:
    return PageViewEvent(metadata=PageViewMetadata(page=page))


def product_view(product_id: str, product_name: str) -> ProductViewEvent:
    return ProductViewEvent(resource_id=product_id, metadata=ProductMetadata(product_name=product_name))


def moodboard_view(moodboard_id: str, moodboard_title: str) -> MoodboardViewEvent:
    return MoodboardViewEvent(
        resource_id=moodboard_id,
        metadata=MoodboardViewMetadata(moodboard_title=moodboard_title),
    )


def search(query: str, results_count: int, category: str | None = None) -> SearchEvent:
    return SearchEvent(metadata=SearchMetadata(query=query, results_count=results_count, category=category))


def favorite_add(product_id: str, product_name: str) -> FavoriteAddEvent:
    return FavoriteAddEvent(resource_id=product_id, metadata=ProductMetadata(product_name=product_name))


def favorite_remove(product_id: str) -> FavoriteRemoveEvent:
    return FavoriteRemoveEvent(resource_id=product_id)


def affiliate_click(product_id: str, product_name: str, retailer: str) -> AffiliateClickEvent:
    return AffiliateClickEvent(
        resource_id=product_id,
        metadata=AffiliateClickMetadata(product_name=product_name, retailer=retailer),
    )


def filter_change(filters: dict[str, Any]) -> FilterChangeEvent:
    return FilterChangeEvent(metadata=FilterChangeMetadata(filters=filters))


def sort_change(sort_by: str) -> SortChangeEvent:
    return SortChangeEvent(metadata=SortChangeMetadata(sort_by=sort_by))


def moodboard_filter(tag: str, results_count: int | None = None) -> MoodboardFilterEvent:
    return MoodboardFilterEvent(metadata=MoodboardFilterMetadata(tag=tag, results_count=results_count))


def moodboard_product_click(
    moodboard_id: str,
    moodboard_title: str,
    product_id: str,
    product_name: str,
) -> MoodboardProductClickEvent:
    return MoodboardProductClickEvent(
        resource_id=moodboard_id,
        metadata=MoodboardProductClickMetadata(
            moodboard_title=moodboard_title,
            product_id=product_id,
            product_name=product_name,
        ),
    )
