"""
Catalog Jobs

Scheduled refreshes of the storefront shelves:
- refresh_trending_products: best sellers for the home page
- refresh_category_products: one shelf per category, titles translated
"""

import logging

from tradeon.database import get_db_session
from tradeon.services.catalog_service import CatalogService
from tradeon.services.marketplace_client import get_marketplace_client
from tradeon.services.translation_service import get_translation_service

logger = logging.getLogger(__name__)


async def refresh_trending_products() -> int:
    """Rebuild the trending shelf. Returns the number of products stored."""
    logger.info("Refreshing trending products...")
    try:
        async with get_db_session() as db:
            count = await CatalogService(db, get_marketplace_client()).refresh_trending()
        return count
    except Exception as e:
        logger.error(f"Trending products refresh failed: {e}")
        return 0


async def refresh_category_products() -> int:
    """Rebuild every category shelf. Returns the total number of products stored."""
    try:
        async with get_db_session() as db:
            service = CatalogService(db, get_marketplace_client(), get_translation_service())
            refreshed = await service.refresh_categories()
        return sum(refreshed.values())
    except Exception as e:
        logger.error(f"Category products refresh failed: {e}")
        return 0
