"""Site configuration key/value rows and the marketplace search cache."""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Text, Integer, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tradeon.database import Base
from tradeon.db_types import UUIDType, JSONType


class AppSetting(Base):
    """Overrides for the default settings map; one row per key."""
    __tablename__ = "app_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType(as_uuid=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )


class SearchCacheEntry(Base):
    """One cached page of upstream search results."""
    __tablename__ = "search_cache"
    __table_args__ = (
        UniqueConstraint('query_key', 'page', name='uq_search_cache_query_page'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    query_key: Mapped[str] = mapped_column(String(1000), nullable=False, index=True)
    page: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    items: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    total_results: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    translated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True
    )
