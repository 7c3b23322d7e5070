"""Back-office customer aggregates, dashboard counters and buyer overview."""
import uuid
import logging
from decimal import Decimal
from typing import Optional, List, Tuple, Dict, Any

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from tradeon.models import (
    Order, Profile, Shipment, Refund, Transaction, Wallet, Notification, WishlistItem,
)
from tradeon.services.invoice_service import to_decimal


logger = logging.getLogger(__name__)

# Dashboard counter name -> model
DASHBOARD_TABLES = {
    "orders": Order,
    "profiles": Profile,
    "shipments": Shipment,
    "refunds": Refund,
    "transactions": Transaction,
    "wallets": Wallet,
    "notifications": Notification,
    "wishlist": WishlistItem,
}


class CustomerService:
    """Read-side aggregates over profiles, orders and wallets."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *filters) -> int:
        stmt = select(func.count()).select_from(model)
        if filters:
            stmt = stmt.where(*filters)
        return (await self.db.execute(stmt)).scalar() or 0

    async def dashboard_counts(self) -> Dict[str, int]:
        """Row count of every back-office table."""
        return {name: await self._count(model) for name, model in DASHBOARD_TABLES.items()}

    async def get_customers(
        self,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Profiles with order count, total spent and wallet balance.

        Total spent counts product, shipping and commission for every order
        the buyer placed, regardless of status.
        """
        filters = []
        if search:
            search_filter = f"%{search}%"
            filters.append(or_(Profile.full_name.ilike(search_filter), Profile.phone.ilike(search_filter)))

        total = await self._count(Profile, *filters)

        stmt = select(Profile).order_by(Profile.created_at.desc()).offset(skip).limit(limit)
        if filters:
            stmt = stmt.where(*filters)
        profiles = list((await self.db.execute(stmt)).scalars().all())
        if not profiles:
            return [], total

        user_ids = [p.user_id for p in profiles]

        spent = (
            Order.total_price
            + func.coalesce(Order.shipping_charges, 0)
            + func.coalesce(Order.commission, 0)
        )
        order_rows = await self.db.execute(
            select(Order.user_id, func.count(Order.id), func.sum(spent))
            .where(Order.user_id.in_(user_ids))
            .group_by(Order.user_id)
        )
        order_stats = {row[0]: (row[1], to_decimal(row[2])) for row in order_rows.all()}

        wallet_rows = await self.db.execute(
            select(Wallet.user_id, Wallet.balance).where(Wallet.user_id.in_(user_ids))
        )
        balances = {row[0]: to_decimal(row[1]) for row in wallet_rows.all()}

        customers = []
        for profile in profiles:
            order_count, total_spent = order_stats.get(profile.user_id, (0, Decimal("0")))
            customers.append({
                "id": profile.id,
                "user_id": profile.user_id,
                "full_name": profile.full_name,
                "phone": profile.phone,
                "address": profile.address,
                "created_at": profile.created_at,
                "order_count": order_count,
                "total_spent": total_spent,
                "wallet_balance": balances.get(profile.user_id, Decimal("0")),
            })
        return customers, total

    async def buyer_overview(self, user_id: uuid.UUID) -> Dict[str, Any]:
        wallet = (await self.db.execute(
            select(Wallet).where(Wallet.user_id == user_id)
        )).scalar_one_or_none()
        return {
            "orders": await self._count(Order, Order.user_id == user_id),
            "wishlist": await self._count(WishlistItem, WishlistItem.user_id == user_id),
            "unread_notifications": await self._count(
                Notification, Notification.user_id == user_id, Notification.is_read == False
            ),
            "wallet_balance": wallet.balance if wallet else Decimal("0"),
        }
