"""
Storefront Catalog Refresh

Fills the home page shelves from 1688 search:
- Trending: best sellers across TRENDING_QUERIES, de-duplicated and capped
  at TRENDING_MAX_PRODUCTS. The whole shelf is replaced in one transaction,
  and an empty pull keeps the existing shelf.
- Categories: one page per query in CATEGORY_QUERIES, titles translated when
  a translator is configured. Each category is replaced on its own, and a
  failing category is logged and skipped.

Usage:
    service = CatalogService(db, get_marketplace_client(), get_translation_service())
    await service.refresh_trending()
    await service.refresh_categories(["shoes", "bag"])
    products = await CatalogService(db).list_trending()
"""
import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradeon.config import settings
from tradeon.models.catalog import CategoryProduct, TrendingProduct
from tradeon.services.marketplace_client import MarketplaceClient, MarketplaceError
from tradeon.services.translation_service import TranslationService, TranslationUnavailable

logger = logging.getLogger(__name__)

TRENDING_QUERIES = (
    "best selling products",
    "popular stationery",
    "trending fashion accessories",
    "popular bags",
    "trending jewelry",
)
TRENDING_FRAME_SIZE = 10

CATEGORY_QUERIES = (
    "shoes", "bag", "jewelry", "beauty products", "men clothing",
    "women clothing", "baby items", "eyewear sunglasses", "office supplies",
    "seasonal products", "phone accessories", "sports fitness",
    "entertainment", "watches", "automobile accessories", "pet supplies",
    "outdoor travelling", "electronics gadgets", "kitchen gadgets",
    "tools home improvement", "school supplies",
)


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _int_or_none(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class CatalogService:
    """Reads and refreshes the trending and category shelves."""

    def __init__(
        self,
        db: AsyncSession,
        client: Optional[MarketplaceClient] = None,
        translator: Optional[TranslationService] = None,
    ):
        self.db = db
        self.client = client
        self.translator = translator

    # ==================== QUERIES ====================

    async def list_trending(self) -> List[TrendingProduct]:
        result = await self.db.execute(
            select(TrendingProduct).order_by(TrendingProduct.position)
        )
        return list(result.scalars().all())

    async def list_category(self, category_query: str, limit: Optional[int] = None) -> List[CategoryProduct]:
        stmt = (
            select(CategoryProduct)
            .where(CategoryProduct.category_query == category_query)
            .order_by(CategoryProduct.position)
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # ==================== REFRESH ====================

    def _require_client(self) -> None:
        if self.client is None or not self.client.is_configured:
            raise MarketplaceError("1688 API not configured")

    async def refresh_trending(
        self,
        queries: Sequence[str] = TRENDING_QUERIES,
        max_products: Optional[int] = None,
    ) -> int:
        """Rebuild the trending shelf. Returns the number of products stored."""
        self._require_client()
        max_products = max_products or settings.TRENDING_MAX_PRODUCTS

        products: List[TrendingProduct] = []
        seen = set()
        for query in queries:
            if len(products) >= max_products:
                break
            try:
                result = await self.client.search_items(
                    query, page=1, page_size=TRENDING_FRAME_SIZE, order_by="SalesDesc"
                )
            except MarketplaceError as e:
                logger.error(f"Trending search failed for '{query}': {e}")
                continue

            for item in result["items"]:
                if len(products) >= max_products:
                    break
                item_id = item.get("item_id")
                # Items without a picture are usually delisted
                if not item_id or item_id in seen or not item.get("pic_url"):
                    continue
                seen.add(item_id)
                products.append(TrendingProduct(
                    product_id=item_id,
                    title=item.get("title") or "",
                    image_url=item["pic_url"],
                    price=_decimal(item.get("price")) or Decimal("0"),
                    old_price=None,
                    sold=item.get("sales") or 0,
                    position=len(products),
                ))

        if not products:
            logger.info("No products fetched, keeping existing trending products")
            return 0

        await self.db.execute(delete(TrendingProduct))
        self.db.add_all(products)
        await self.db.commit()
        logger.info(f"Refreshed {len(products)} trending products")
        return len(products)

    async def _translate(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if self.translator is None or not self.translator.is_configured:
            return items
        try:
            return await self.translator.translate_items(items)
        except TranslationUnavailable:
            return items

    async def refresh_categories(
        self,
        categories: Optional[Sequence[str]] = None,
        per_category: Optional[int] = None,
        delay: Optional[float] = None,
    ) -> Dict[str, int]:
        """
        Rebuild the listed category shelves (all of them by default).

        Returns:
            {category_query: products stored} for every category refreshed
        """
        self._require_client()
        categories = list(categories) if categories else list(CATEGORY_QUERIES)
        per_category = per_category or settings.CATEGORY_PRODUCTS_PER_QUERY
        delay = settings.CATEGORY_REFRESH_DELAY_SECONDS if delay is None else delay

        logger.info(f"Refreshing {len(categories)} categories...")
        refreshed: Dict[str, int] = {}
        for index, query in enumerate(categories):
            if index and delay:
                await asyncio.sleep(delay)
            try:
                result = await self.client.search_items(query, page=1, page_size=per_category)
            except MarketplaceError as e:
                logger.error(f"Category search failed for '{query}': {e}")
                continue

            items = result["items"]
            if not items:
                logger.info(f"No items for '{query}'")
                continue

            items = await self._translate(items)
            rows = [
                CategoryProduct(
                    category_query=query,
                    product_id=item.get("item_id") or str(item.get("num_iid") or ""),
                    title=item.get("title") or "",
                    image_url=item.get("pic_url") or "",
                    price=_decimal(item.get("price")) or Decimal("0"),
                    sales=item.get("sales"),
                    detail_url=item.get("detail_url") or None,
                    location=item.get("location") or None,
                    vendor_name=item.get("vendor_name") or None,
                    stock=_int_or_none(item.get("stock")),
                    weight=_decimal(item.get("weight")),
                    extra_images=list(item.get("extra_images") or []),
                    position=position,
                )
                for position, item in enumerate(items)
            ]

            try:
                await self.db.execute(delete(CategoryProduct).where(CategoryProduct.category_query == query))
                self.db.add_all(rows)
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"Storing products for '{query}' failed: {e}")
                continue

            refreshed[query] = len(rows)
            logger.info(f"Cached {len(rows)} products for '{query}'")

        logger.info(f"Category refresh done, {sum(refreshed.values())} products cached")
        return refreshed
