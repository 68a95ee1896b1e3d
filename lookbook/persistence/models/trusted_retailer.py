"""Trusted retailer model backing the affiliate redirect whitelist."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from lookbook.persistence.database import Base


class RetailerCategory(str, Enum):
    """Retailer market segments."""

    LUXURY = "luxury"
    CONTEMPORARY = "contemporary"
    FAST_FASHION = "fast-fashion"
    MARKETPLACE = "marketplace"


class TrustedRetailer(Base):
    """A domain permitted as an affiliate redirect target."""

    __tablename__ = "trusted_retailers"

    id = Column(Integer, primary_key=True, index=True)
    # Normalized hostname: lowercase, no scheme, no leading "www."
    domain = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(20), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<TrustedRetailer(domain={self.domain}, is_active={self.is_active})>"
