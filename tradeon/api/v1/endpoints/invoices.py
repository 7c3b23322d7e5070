"""Invoice endpoints: single-order and combined invoices."""
import uuid
import logging

from fastapi import APIRouter, HTTPException, status

from tradeon.api.deps import DB, CurrentUser, ensure_owner_or_admin
from tradeon.schemas.invoice import Invoice, CombinedInvoiceRequest
from tradeon.services.invoice_service import InvoiceService, EmptyInvoiceError
from tradeon.services.settings_service import get_settings_store


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Invoices"])


@router.get("/orders/{order_id}", response_model=Invoice)
async def get_order_invoice(
    order_id: uuid.UUID,
    db: DB,
    current_user: CurrentUser,
):
    service = InvoiceService(db)
    orders = await service.get_orders([order_id])
    if not orders:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )
    ensure_owner_or_admin(current_user, orders[0].user_id)

    site_settings = await get_settings_store().get()
    return await service.invoice_for_orders(orders, site_settings)


@router.post("", response_model=Invoice)
async def create_combined_invoice(
    data: CombinedInvoiceRequest,
    db: DB,
    current_user: CurrentUser,
):
    """
    Aggregate several orders into one invoice.
    Buyers may only combine their own orders.
    """
    service = InvoiceService(db)
    order_ids = list(dict.fromkeys(data.order_ids))
    orders = await service.get_orders(order_ids)

    if len(orders) != len(order_ids):
        found = {o.id for o in orders}
        missing = [str(i) for i in order_ids if i not in found]
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Orders not found: {', '.join(missing)}"
        )
    for order in orders:
        ensure_owner_or_admin(current_user, order.user_id)

    site_settings = await get_settings_store().get()
    try:
        return await service.invoice_for_orders(orders, site_settings)
    except EmptyInvoiceError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
