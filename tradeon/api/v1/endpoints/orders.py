from typing import Optional
import uuid
import logging
from math import ceil

from fastapi import APIRouter, HTTPException, status, Query

from tradeon.api.deps import DB, CurrentUser, AdminUser, ensure_owner_or_admin
from tradeon.models.order import OrderStatus
from tradeon.schemas.order import OrderCreate, OrderResponse, OrderListResponse
from tradeon.schemas.shipment import StageUpdateRequest, TimelineResponse, ShipmentResponse
from tradeon.services.order_service import OrderService
from tradeon.services.shipment_stage_service import (
    ShipmentStageService,
    ShipmentStageError,
    InvalidStageError,
)


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Orders"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    data: OrderCreate,
    db: DB,
    current_user: CurrentUser,
):
    """Place an order for the selected product variants."""
    service = OrderService(db)
    order = await service.create_order(current_user.id, data)
    return OrderResponse.model_validate(order)


@router.get("", response_model=OrderListResponse)
async def list_my_orders(
    db: DB,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    status: Optional[OrderStatus] = Query(None),
    search: Optional[str] = Query(None, description="Search by order number or product"),
):
    """Get the signed-in buyer's orders, newest first."""
    service = OrderService(db)
    skip = (page - 1) * size

    orders, total = await service.get_orders(
        user_id=current_user.id,
        status=status,
        search=search,
        skip=skip,
        limit=size,
    )

    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        total=total,
        page=page,
        size=size,
        pages=ceil(total / size) if total > 0 else 1,
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    db: DB,
    current_user: CurrentUser,
):
    service = OrderService(db)
    order = await service.get_order_by_id(order_id)

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )
    ensure_owner_or_admin(current_user, order.user_id)

    return OrderResponse.model_validate(order)


@router.get("/{order_id}/timeline", response_model=TimelineResponse)
async def get_order_timeline(
    order_id: uuid.UUID,
    db: DB,
    current_user: CurrentUser,
):
    """Shipment progress for an order. Orders without a shipment sit at 'Ordered'."""
    order = await OrderService(db).get_order_by_id(order_id)
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )
    ensure_owner_or_admin(current_user, order.user_id)

    shipment = order.shipment
    timeline = ShipmentStageService(db).timeline(shipment)
    return TimelineResponse(
        order_id=order.id,
        tracking_number=(shipment.tracking_number if shipment else None) or order.tracking_number,
        carrier=shipment.carrier if shipment else None,
        external_tracking_url=shipment.external_tracking_url if shipment else None,
        stage_notes=shipment.stage_notes if shipment else None,
        estimated_delivery=shipment.estimated_delivery if shipment else None,
        **timeline,
    )


@router.post("/{order_id}/stage", response_model=ShipmentResponse)
async def set_order_stage(
    order_id: uuid.UUID,
    data: StageUpdateRequest,
    db: DB,
    admin: AdminUser,
):
    """
    Move an order's shipment to a stage and sync the order status.
    Requires: admin role
    """
    order = await OrderService(db).get_order_by_id(order_id)
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )

    service = ShipmentStageService(db)
    try:
        shipment = await service.set_stage(order.id, order.user_id, order.shipment, data.stage_index)
    except InvalidStageError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except ShipmentStageError as e:
        logger.error(f"Stage update by {admin.id} failed for order {order_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update shipment stage"
        )

    return ShipmentResponse.model_validate(shipment)
