import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tradeon.api.v1.endpoints.search import Marketplace
from tradeon.services.marketplace_client import MarketplaceError, MarketplaceTimeout
from tradeon.services.shipping_fee_client import ShippingFeeClient, get_shipping_fee_client


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Products"])

ShippingQuotes = Annotated[ShippingFeeClient, Depends(get_shipping_fee_client)]


@router.get("/{item_id}", response_model=Dict[str, Any])
async def get_product(item_id: str, client: Marketplace):
    """Full 1688 item detail (attributes, SKUs, pictures)."""
    try:
        item = await client.get_item(item_id)
    except MarketplaceTimeout as e:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=str(e)
        )
    except MarketplaceError as e:
        logger.error(f"Item {item_id} lookup failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )

    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )
    return item


@router.get("/{item_id}/shipping-fee", response_model=Dict[str, Any])
async def get_shipping_fee(
    item_id: str,
    quotes: ShippingQuotes,
    province: Optional[str] = Query(None, max_length=50, description="Destination province in China"),
    quantity: int = Query(1, ge=1),
):
    """Seller-to-warehouse freight quote for the item."""
    try:
        return await quotes.get_shipping_fee(item_id, province=province, quantity=quantity)
    except MarketplaceTimeout as e:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=str(e)
        )
    except MarketplaceError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )
