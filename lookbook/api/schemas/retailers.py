"""Pydantic schemas for the trusted retailer whitelist."""

from datetime import datetime

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from lookbook.domain.models.analytics import CamelModel
from lookbook.persistence.models.trusted_retailer import RetailerCategory


class RetailerResponse(CamelModel):
    domain: str
    name: str
    category: RetailerCategory
    is_active: bool
    added_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RetailerCreate(CamelModel):
    domain: str = Field(min_length=3, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    category: RetailerCategory
    is_active: bool = True


class RetailerUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    category: RetailerCategory | None = None
    is_active: bool | None = None


class UrlValidationRequest(CamelModel):
    url: str


class UrlValidationResponse(CamelModel):
    valid: bool
    retailer: RetailerResponse | None = None
