import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional, List
from decimal import Decimal

from sqlalchemy import String, DateTime, ForeignKey, Integer, Text, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradeon.database import Base
from tradeon.db_types import UUIDType, Money

if TYPE_CHECKING:
    from tradeon.models.shipment import Shipment
    from tradeon.models.customer import Profile


class OrderStatus(str, Enum):
    """Coarse order status. Fine-grained progress lives on the shipment."""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(Base):
    """
    A buyer's purchase of one 1688 product (possibly several variants).
    Line items are held in `items`; `notes` keeps the legacy text rendering.
    """
    __tablename__ = "orders"
    __table_args__ = (
        Index('ix_order_status_created', 'status', 'created_at'),
        Index('ix_order_user_created', 'user_id', 'created_at'),
        CheckConstraint('quantity > 0', name='ck_order_quantity_positive'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )

    order_number: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        index=True,
        comment="Human readable number e.g. TO-20260101-3F9A1C"
    )

    # Owning buyer (auth user id from the identity provider)
    user_id: Mapped[uuid.UUID] = mapped_column(UUIDType(as_uuid=True), nullable=False, index=True)

    # Product snapshot
    product_name: Mapped[str] = mapped_column(String(500), nullable=False)
    product_image: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    product_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    source_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    product_1688_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    variant_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    variant_name: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)

    # Pricing (BDT)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    total_price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    shipping_charges: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    commission: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    domestic_courier_charge: Mapped[Optional[Decimal]] = mapped_column(
        Money,
        nullable=True,
        comment="Courier charge inside China, seller to warehouse"
    )

    tracking_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    invoice_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="One line item per line: '<name>: <qty> pcs × ৳<price>'"
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=OrderStatus.PENDING.value,
        nullable=False,
        index=True,
        comment="pending, processing, shipped, delivered, cancelled"
    )

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

    # Relationships
    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )
    shipment: Mapped[Optional["Shipment"]] = relationship(
        "Shipment",
        back_populates="order",
        uselist=False,
        lazy="selectin",
    )
    profile: Mapped[Optional["Profile"]] = relationship(
        "Profile",
        primaryjoin="foreign(Order.user_id) == Profile.user_id",
        viewonly=True,
        uselist=False,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Order(number='{self.order_number}', status='{self.status}')>"


class OrderItem(Base):
    """One variant line of an order."""
    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="items")

    @property
    def total_price(self) -> Decimal:
        return Decimal(self.quantity) * self.unit_price

    def __repr__(self) -> str:
        return f"<OrderItem(name='{self.name}', qty={self.quantity})>"
