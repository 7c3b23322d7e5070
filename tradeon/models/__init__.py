# Models module
from tradeon.models.order import Order, OrderItem, OrderStatus
from tradeon.models.shipment import Shipment, ShipmentStage, SHIPMENT_STAGES
from tradeon.models.customer import Profile, UserRole, AppRole
from tradeon.models.wallet import Wallet, Transaction, Refund
from tradeon.models.wishlist import WishlistItem
from tradeon.models.notifications import Notification
from tradeon.models.app_setting import AppSetting, SearchCacheEntry
from tradeon.models.catalog import TrendingProduct, CategoryProduct

__all__ = [
    "Order",
    "OrderItem",
    "OrderStatus",
    "Shipment",
    "ShipmentStage",
    "SHIPMENT_STAGES",
    "Profile",
    "UserRole",
    "AppRole",
    "Wallet",
    "Transaction",
    "Refund",
    "WishlistItem",
    "Notification",
    "AppSetting",
    "SearchCacheEntry",
    "TrendingProduct",
    "CategoryProduct",
]
