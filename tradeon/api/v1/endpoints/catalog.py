"""
Storefront shelves.

Trending and category products are read from the local tables the refresh
jobs fill. Admins can also trigger a refresh on demand.
"""
import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tradeon.api.deps import DB, AdminUser
from tradeon.api.v1.endpoints.search import Marketplace
from tradeon.schemas.catalog import (
    CategoryProductListResponse,
    CategoryProductResponse,
    CategoryRefreshRequest,
    CategoryRefreshResult,
    TrendingListResponse,
    TrendingProductResponse,
    TrendingRefreshResult,
)
from tradeon.services.catalog_service import CATEGORY_QUERIES, CatalogService
from tradeon.services.marketplace_client import MarketplaceError
from tradeon.services.translation_service import TranslationService, get_translation_service


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])

Translation = Annotated[TranslationService, Depends(get_translation_service)]


@router.get("/trending", response_model=TrendingListResponse)
async def list_trending_products(db: DB):
    """Home page best sellers."""
    products = await CatalogService(db).list_trending()
    return TrendingListResponse(
        items=[TrendingProductResponse.model_validate(p) for p in products]
    )


@router.get("/categories", response_model=List[str])
async def list_categories():
    """Category queries that have a shelf."""
    return list(CATEGORY_QUERIES)


@router.get("/categories/{category_query}", response_model=CategoryProductListResponse)
async def list_category_products(
    category_query: str,
    db: DB,
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    """Cached products for one category."""
    products = await CatalogService(db).list_category(category_query, limit=limit)
    return CategoryProductListResponse(
        category_query=category_query,
        items=[CategoryProductResponse.model_validate(p) for p in products],
    )


@router.post("/trending/refresh", response_model=TrendingRefreshResult)
async def refresh_trending_products(
    db: DB,
    client: Marketplace,
    admin: AdminUser,
):
    """
    Rebuild the trending shelf now.
    Requires: admin role
    """
    try:
        count = await CatalogService(db, client).refresh_trending()
    except MarketplaceError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )
    logger.info(f"Trending shelf refreshed by {admin.id}: {count} products")
    return TrendingRefreshResult(count=count)


@router.post("/categories/refresh", response_model=CategoryRefreshResult)
async def refresh_category_products(
    data: CategoryRefreshRequest,
    db: DB,
    client: Marketplace,
    translator: Translation,
    admin: AdminUser,
):
    """
    Rebuild the given category shelves, or all of them.
    Requires: admin role
    """
    try:
        refreshed = await CatalogService(db, client, translator).refresh_categories(data.categories)
    except MarketplaceError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )
    logger.info(f"Category shelves refreshed by {admin.id}: {refreshed}")
    return CategoryRefreshResult(total_products=sum(refreshed.values()), categories=refreshed)
