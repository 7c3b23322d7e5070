"""
Storefront Catalog Models

Shelves of 1688 products shown on the home and category pages. Rows are
replaced wholesale by the scheduled refresh jobs; nothing else writes them.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, DateTime, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from tradeon.database import Base
from tradeon.db_types import UUIDType, JSONType, Money


class TrendingProduct(Base):
    """Best sellers pulled from a fixed set of queries."""
    __tablename__ = "trending_products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    # Upstream item id, e.g. abb-610947572360
    product_id: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(1000), nullable=False)
    image_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    # CNY
    price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    old_price: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    sold: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # Display order within the shelf
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<TrendingProduct(product_id='{self.product_id}')>"


class CategoryProduct(Base):
    """Products cached per category query, titles translated when possible."""
    __tablename__ = "category_products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    category_query: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(1000), nullable=False)
    image_url: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    sales: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    detail_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    vendor_name: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    stock: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 3), nullable=True)
    extra_images: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<CategoryProduct(category='{self.category_query}', product_id='{self.product_id}')>"
