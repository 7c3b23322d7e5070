"""Order placement and lookup."""
import uuid
import secrets
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List, Tuple, Dict, Any

from sqlalchemy import select, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from tradeon.models.order import Order, OrderItem, OrderStatus
from tradeon.schemas.order import OrderCreate
from tradeon.services.currency_service import convert_to_bdt, get_cny_to_bdt_rate
from tradeon.services.invoice_service import format_note_line, parse_note_lines


logger = logging.getLogger(__name__)


class OrderService:
    """Service for placing and managing buyer orders."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== ORDER NUMBER GENERATION ====================

    def generate_order_number(self) -> str:
        """Generate order number: TO-YYYYMMDD-XXXXXX"""
        today = datetime.now(timezone.utc).strftime("%Y%m%d")
        return f"TO-{today}-{secrets.token_hex(3).upper()}"

    # ==================== QUERIES ====================

    async def get_orders(
        self,
        user_id: Optional[uuid.UUID] = None,
        status: Optional[OrderStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Order], int]:
        """Get paginated orders, newest first."""
        filters = []

        if user_id:
            filters.append(Order.user_id == user_id)

        if status:
            filters.append(Order.status == status.value)

        if search:
            search_filter = f"%{search}%"
            filters.append(
                or_(
                    Order.order_number.ilike(search_filter),
                    Order.product_name.ilike(search_filter),
                    Order.tracking_number.ilike(search_filter),
                )
            )

        stmt = select(Order)
        count_stmt = select(func.count(Order.id))
        if filters:
            stmt = stmt.where(and_(*filters))
            count_stmt = count_stmt.where(and_(*filters))

        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().unique().all()), total

    async def get_order_by_id(self, order_id: uuid.UUID) -> Optional[Order]:
        result = await self.db.execute(select(Order).where(Order.id == order_id))
        return result.scalar_one_or_none()

    # ==================== MUTATIONS ====================

    async def create_order(self, user_id: uuid.UUID, data: OrderCreate) -> Order:
        """
        Place an order for the selected variants.

        Prices quoted in CNY are converted to whole taka with the current
        rate. Quantity and total are the sums over the items; the item lines
        are also written to `notes` in the legacy text format.
        """
        rate = get_cny_to_bdt_rate() if data.price_currency == "CNY" else None

        items: List[OrderItem] = []
        for position, item in enumerate(data.items):
            unit_price = Decimal(convert_to_bdt(item.unit_price, rate)) if rate is not None else item.unit_price
            items.append(OrderItem(
                position=position,
                name=item.name,
                quantity=item.quantity,
                unit_price=unit_price,
            ))

        order = Order(
            order_number=self.generate_order_number(),
            user_id=user_id,
            product_name=data.product_name,
            product_image=data.product_image,
            product_url=data.product_url,
            source_url=data.source_url,
            product_1688_id=data.product_1688_id,
            variant_id=data.variant_id,
            variant_name=data.variant_name,
            quantity=sum(i.quantity for i in items),
            unit_price=items[0].unit_price,
            total_price=sum((i.quantity * i.unit_price for i in items), Decimal("0")),
            shipping_charges=data.shipping_charges,
            commission=data.commission,
            domestic_courier_charge=data.domestic_courier_charge,
            invoice_name=data.invoice_name,
            notes="\n".join(format_note_line(i.name, i.quantity, i.unit_price) for i in items),
            status=OrderStatus.PENDING.value,
            items=items,
        )
        self.db.add(order)
        await self.db.commit()

        logger.info(f"Order {order.order_number} placed by {user_id}: {order.quantity} pcs, total {order.total_price}")
        return order

    async def update_order(self, order: Order, updates: Dict[str, Any]) -> Order:
        """
        Apply an admin edit.

        The note lines are what an admin edits, so a change to `notes`
        rebuilds the structured items from them. When no line parses the
        order is left without items and invoices use its product fields.
        """
        notes_changed = "notes" in updates and updates["notes"] != order.notes
        for field, value in updates.items():
            if isinstance(value, OrderStatus):
                value = value.value
            setattr(order, field, value)

        if notes_changed:
            order.items = [
                OrderItem(position=position, name=line.name, quantity=line.qty, unit_price=line.unit_price)
                for position, line in enumerate(parse_note_lines(order.notes))
            ]

        await self.db.commit()
        await self.db.refresh(order)
        logger.info(f"Order {order.order_number} updated: {sorted(updates)}")
        return order

    async def delete_order(self, order: Order) -> None:
        await self.db.delete(order)
        await self.db.commit()
        logger.info(f"Order {order.order_number} deleted")
