"""Seller storefront: every item one 1688 vendor lists."""
import logging

from fastapi import APIRouter, HTTPException, Query, status

from tradeon.api.v1.endpoints.search import Marketplace
from tradeon.schemas.catalog import SellerProductsResponse
from tradeon.services.marketplace_client import MarketplaceError, MarketplaceTimeout


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sellers"])


@router.get("/{vendor_id}/products", response_model=SellerProductsResponse)
async def list_seller_products(
    vendor_id: str,
    client: Marketplace,
    page: int = Query(1, ge=1),
    page_size: int = Query(40, ge=1, le=100),
):
    """One page of a seller's items, with the seller summary."""
    if not vendor_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="vendorId is required"
        )
    try:
        return await client.search_vendor_items(vendor_id.strip(), page=page, page_size=page_size)
    except MarketplaceTimeout as e:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=str(e)
        )
    except MarketplaceError as e:
        logger.error(f"Seller {vendor_id} listing failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )
