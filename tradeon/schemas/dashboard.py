"""Admin dashboard and buyer overview counters."""
from decimal import Decimal

from pydantic import BaseModel


class DashboardStats(BaseModel):
    orders: int = 0
    profiles: int = 0
    shipments: int = 0
    refunds: int = 0
    transactions: int = 0
    wallets: int = 0
    notifications: int = 0
    wishlist: int = 0


class BuyerOverview(BaseModel):
    """Counters on the buyer dashboard home."""
    orders: int = 0
    wishlist: int = 0
    unread_notifications: int = 0
    wallet_balance: Decimal = Decimal("0")
