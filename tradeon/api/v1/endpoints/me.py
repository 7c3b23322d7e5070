"""Signed-in buyer's own dashboard data."""
import uuid
import logging
from math import ceil

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from tradeon.api.deps import DB, CurrentUser
from tradeon.models import Notification, Refund, Shipment, Transaction, Wallet, WishlistItem
from tradeon.schemas.dashboard import BuyerOverview
from tradeon.schemas.notification import NotificationResponse, NotificationListResponse
from tradeon.schemas.shipment import ShipmentResponse, ShipmentListResponse
from tradeon.schemas.wallet import (
    RefundResponse, RefundListResponse, TransactionResponse, TransactionListResponse, WalletResponse,
)
from tradeon.schemas.wishlist import WishlistItemAdd, WishlistItemResponse, WishlistListResponse
from tradeon.services.crud_service import CrudService
from tradeon.services.customer_service import CustomerService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Me"])


def _page(list_schema, response_schema, rows, total: int, page: int, size: int):
    return list_schema(
        items=[response_schema.model_validate(r) for r in rows],
        total=total,
        page=page,
        size=size,
        pages=ceil(total / size) if total > 0 else 1,
    )


@router.get("/overview", response_model=BuyerOverview)
async def get_overview(db: DB, current_user: CurrentUser):
    overview = await CustomerService(db).buyer_overview(current_user.id)
    return BuyerOverview(**overview)


@router.get("/wallet", response_model=WalletResponse)
async def get_my_wallet(db: DB, current_user: CurrentUser):
    result = await db.execute(select(Wallet).where(Wallet.user_id == current_user.id))
    wallet = result.scalar_one_or_none()
    if not wallet:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Wallet not found"
        )
    return WalletResponse.model_validate(wallet)


# ==================== WISHLIST ====================

@router.get("/wishlist", response_model=WishlistListResponse)
async def list_my_wishlist(
    db: DB,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
):
    rows, total = await CrudService(db, WishlistItem).list(
        user_id=current_user.id, skip=(page - 1) * size, limit=size
    )
    return _page(WishlistListResponse, WishlistItemResponse, rows, total, page, size)


@router.post("/wishlist", response_model=WishlistItemResponse, status_code=status.HTTP_201_CREATED)
async def add_to_wishlist(data: WishlistItemAdd, db: DB, current_user: CurrentUser):
    try:
        item = await CrudService(db, WishlistItem).create({**data.model_dump(), "user_id": current_user.id})
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product already in wishlist"
        )
    return WishlistItemResponse.model_validate(item)


@router.delete("/wishlist/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_wishlist(item_id: uuid.UUID, db: DB, current_user: CurrentUser):
    service = CrudService(db, WishlistItem)
    item = await service.get(item_id)
    if not item or item.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Wishlist item not found"
        )
    await service.delete(item)


# ==================== NOTIFICATIONS ====================

@router.get("/notifications", response_model=NotificationListResponse)
async def list_my_notifications(
    db: DB,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
):
    rows, total = await CrudService(db, Notification).list(
        user_id=current_user.id, skip=(page - 1) * size, limit=size
    )
    return _page(NotificationListResponse, NotificationResponse, rows, total, page, size)


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(notification_id: uuid.UUID, db: DB, current_user: CurrentUser):
    service = CrudService(db, Notification)
    notification = await service.get(notification_id)
    if not notification or notification.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )
    notification = await service.update(notification, {"is_read": True})
    return NotificationResponse.model_validate(notification)


# ==================== HISTORY ====================

@router.get("/refunds", response_model=RefundListResponse)
async def list_my_refunds(
    db: DB,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
):
    rows, total = await CrudService(db, Refund).list(
        user_id=current_user.id, skip=(page - 1) * size, limit=size
    )
    return _page(RefundListResponse, RefundResponse, rows, total, page, size)


@router.get("/transactions", response_model=TransactionListResponse)
async def list_my_transactions(
    db: DB,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
):
    rows, total = await CrudService(db, Transaction).list(
        user_id=current_user.id, skip=(page - 1) * size, limit=size
    )
    return _page(TransactionListResponse, TransactionResponse, rows, total, page, size)


@router.get("/shipments", response_model=ShipmentListResponse)
async def list_my_shipments(
    db: DB,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
):
    rows, total = await CrudService(db, Shipment).list(
        user_id=current_user.id, skip=(page - 1) * size, limit=size
    )
    return _page(ShipmentListResponse, ShipmentResponse, rows, total, page, size)
