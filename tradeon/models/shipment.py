"""Shipment model tracking a China-to-Bangladesh delivery through fixed stages."""
import uuid
from datetime import datetime, date, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, DateTime, ForeignKey, Text, Date
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradeon.database import Base
from tradeon.db_types import UUIDType

if TYPE_CHECKING:
    from tradeon.models.order import Order


class ShipmentStage(str, Enum):
    """Shipment stages, in pipeline order. Values are stored verbatim."""
    ORDERED = "Ordered"
    PURCHASED = "Purchased from 1688"
    SHIPPED_TO_WAREHOUSE = "Shipped to Warehouse"
    ARRIVED_AT_WAREHOUSE = "Arrived at Warehouse"
    SHIPPED_TO_BANGLADESH = "Shipped to Bangladesh"
    IN_CUSTOMS = "In Customs"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"


SHIPMENT_STAGES: tuple[str, ...] = tuple(stage.value for stage in ShipmentStage)


class Shipment(Base):
    """
    Optional 1:1 companion of an order.
    Created the first time an admin sets a stage for the order.
    """
    __tablename__ = "shipments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )

    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("orders.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
        index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUIDType(as_uuid=True), nullable=False, index=True)

    status: Mapped[str] = mapped_column(
        String(50),
        default=ShipmentStage.ORDERED.value,
        nullable=False,
        index=True,
        comment="One of the eight shipment stages"
    )

    tracking_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    carrier: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    external_tracking_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    stage_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    estimated_delivery: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

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

    order: Mapped[Optional["Order"]] = relationship("Order", back_populates="shipment")

    def __repr__(self) -> str:
        return f"<Shipment(order_id={self.order_id}, status='{self.status}')>"
