"""Catalog models: products, moodboards and the products placed on each moodboard."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from lookbook.persistence.database import Base


class Product(Base):
    """A shoppable product linking out to a retailer."""

    __tablename__ = "products"

    id = Column(String(100), primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    brand = Column(String(255), nullable=True, index=True)
    category = Column(String(100), nullable=True, index=True)
    price = Column(Numeric(10, 2), nullable=True)
    image_url = Column(Text, nullable=True)
    affiliate_url = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    is_published = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, slug={self.slug})>"


class Moodboard(Base):
    """A curated collection of products presented as one look."""

    __tablename__ = "moodboards"

    id = Column(String(100), primary_key=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    cover_image = Column(Text, nullable=True)
    is_published = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Moodboard(id={self.id}, slug={self.slug})>"


class MoodboardProduct(Base):
    """Placement of a product on a moodboard."""

    __tablename__ = "moodboard_products"

    moodboard_id = Column(
        String(100),
        ForeignKey("moodboards.id", ondelete="CASCADE"),
        primary_key=True,
    )
    product_id = Column(
        String(100),
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    sort_order = Column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<MoodboardProduct(moodboard_id={self.moodboard_id}, product_id={self.product_id})>"
