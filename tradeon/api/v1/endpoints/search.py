"""
Marketplace search with a 12-hour result cache.

Translation of titles happens in the background; the response says whether
the items returned are already translated.
"""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from tradeon.api.deps import DB
from tradeon.schemas.search import SearchRequest, SearchResponse
from tradeon.services.marketplace_client import (
    MarketplaceClient,
    MarketplaceError,
    MarketplaceTimeout,
    get_marketplace_client,
)
from tradeon.services.search_cache_service import (
    BackgroundTranslator,
    SearchCacheService,
    get_background_translator,
)


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Search"])

Marketplace = Annotated[MarketplaceClient, Depends(get_marketplace_client)]
Translator = Annotated[BackgroundTranslator, Depends(get_background_translator)]


@router.post("", response_model=SearchResponse)
async def search_products(
    data: SearchRequest,
    db: DB,
    client: Marketplace,
    background: Translator,
):
    """Keyword or image search on 1688."""
    if not (data.query and data.query.strip()) and not (data.image_url and data.image_url.strip()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query or imageUrl is required"
        )

    service = SearchCacheService(db, client, background)
    try:
        return await service.search(
            query=data.query,
            image_url=data.image_url,
            page=data.page,
            page_size=data.page_size,
        )
    except MarketplaceTimeout as e:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=str(e)
        )
    except MarketplaceError as e:
        logger.error(f"Search failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )
