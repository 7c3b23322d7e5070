"""
Back-office API.

Dashboard counters, the customers aggregate, and table CRUD for the admin
panel. Every route requires the admin role.
"""
from typing import Optional
import uuid
from math import ceil

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tradeon.api.deps import DB, AdminUser, require_admin
from tradeon.api.v1.crud import build_crud_router
from tradeon.models import (
    Order, Refund, Transaction, Wallet, WishlistItem, Notification, Profile, UserRole,
)
from tradeon.schemas.customer import (
    CustomerSummary, CustomerListResponse,
    ProfileCreate, ProfileUpdate, ProfileResponse, ProfileListResponse,
    UserRoleCreate, UserRoleUpdate, UserRoleResponse, UserRoleListResponse,
)
from tradeon.schemas.dashboard import DashboardStats
from tradeon.schemas.notification import (
    NotificationCreate, NotificationUpdate, NotificationResponse, NotificationListResponse,
)
from tradeon.schemas.order import AdminOrderCreate, OrderUpdate, OrderResponse, OrderListResponse
from tradeon.schemas.wallet import (
    RefundCreate, RefundUpdate, RefundResponse, RefundListResponse,
    TransactionCreate, TransactionUpdate, TransactionResponse, TransactionListResponse,
    WalletCreate, WalletUpdate, WalletResponse, WalletListResponse,
)
from tradeon.schemas.wishlist import (
    WishlistItemCreate, WishlistItemUpdate, WishlistItemResponse, WishlistListResponse,
)
from tradeon.services.customer_service import CustomerService
from tradeon.services.order_service import OrderService

router = APIRouter(tags=["Admin"])


@router.get("/dashboard", response_model=DashboardStats, dependencies=[Depends(require_admin)])
async def get_dashboard(db: DB):
    """Row counts for the admin dashboard cards."""
    counts = await CustomerService(db).dashboard_counts()
    return DashboardStats(**counts)


@router.get("/customers", response_model=CustomerListResponse, dependencies=[Depends(require_admin)])
async def list_customers(
    db: DB,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by name or phone"),
):
    """Customers with order count, total spent and wallet balance."""
    customers, total = await CustomerService(db).get_customers(
        search=search,
        skip=(page - 1) * size,
        limit=size,
    )
    return CustomerListResponse(
        items=[CustomerSummary(**c) for c in customers],
        total=total,
        page=page,
        size=size,
        pages=ceil(total / size) if total > 0 else 1,
    )


# ==================== ORDERS ====================

@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order_for_buyer(
    data: AdminOrderCreate,
    db: DB,
    admin: AdminUser,
):
    """Place an order on behalf of a buyer."""
    order = await OrderService(db).create_order(data.user_id, data)
    return OrderResponse.model_validate(order)


@router.put("/orders/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: uuid.UUID,
    data: OrderUpdate,
    db: DB,
    admin: AdminUser,
):
    """
    Edit an order. Edited notes become the order's line items.
    Stage changes go through POST /orders/{id}/stage.
    """
    service = OrderService(db)
    order = await service.get_order_by_id(order_id)
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )
    order = await service.update_order(order, data.model_dump(exclude_unset=True))
    return OrderResponse.model_validate(order)


@router.delete("/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: uuid.UUID,
    db: DB,
    admin: AdminUser,
):
    """Delete an order with its items; its shipment is kept, unlinked."""
    service = OrderService(db)
    order = await service.get_order_by_id(order_id)
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )
    await service.delete_order(order)


router.include_router(
    build_crud_router(
        model=Order,
        response_schema=OrderResponse,
        list_schema=OrderListResponse,
        search_fields=("order_number", "product_name", "tracking_number", "status"),
        label="Order",
    ),
    prefix="/orders",
)


# ==================== TABLE CRUD ====================

router.include_router(
    build_crud_router(
        model=Refund,
        create_schema=RefundCreate,
        update_schema=RefundUpdate,
        response_schema=RefundResponse,
        list_schema=RefundListResponse,
        search_fields=("reason", "status"),
        label="Refund",
    ),
    prefix="/refunds",
)
router.include_router(
    build_crud_router(
        model=Transaction,
        create_schema=TransactionCreate,
        update_schema=TransactionUpdate,
        response_schema=TransactionResponse,
        list_schema=TransactionListResponse,
        search_fields=("type", "status", "description", "reference_id"),
        label="Transaction",
    ),
    prefix="/transactions",
)
router.include_router(
    build_crud_router(
        model=Wallet,
        create_schema=WalletCreate,
        update_schema=WalletUpdate,
        response_schema=WalletResponse,
        list_schema=WalletListResponse,
        label="Wallet",
    ),
    prefix="/wallets",
)
router.include_router(
    build_crud_router(
        model=WishlistItem,
        create_schema=WishlistItemCreate,
        update_schema=WishlistItemUpdate,
        response_schema=WishlistItemResponse,
        list_schema=WishlistListResponse,
        search_fields=("product_name", "product_id"),
        label="Wishlist item",
    ),
    prefix="/wishlist",
)
router.include_router(
    build_crud_router(
        model=Notification,
        create_schema=NotificationCreate,
        update_schema=NotificationUpdate,
        response_schema=NotificationResponse,
        list_schema=NotificationListResponse,
        search_fields=("title", "message", "type"),
        label="Notification",
    ),
    prefix="/notifications",
)
router.include_router(
    build_crud_router(
        model=Profile,
        create_schema=ProfileCreate,
        update_schema=ProfileUpdate,
        response_schema=ProfileResponse,
        list_schema=ProfileListResponse,
        search_fields=("full_name", "phone", "address"),
        label="Profile",
    ),
    prefix="/profiles",
)
router.include_router(
    build_crud_router(
        model=UserRole,
        create_schema=UserRoleCreate,
        update_schema=UserRoleUpdate,
        response_schema=UserRoleResponse,
        list_schema=UserRoleListResponse,
        search_fields=("role",),
        label="User role",
    ),
    prefix="/user-roles",
)
