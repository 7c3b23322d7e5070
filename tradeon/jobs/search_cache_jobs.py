"""
Search Cache Jobs

Removes marketplace search pages older than the cache TTL so the table only
holds entries that can still be served.
"""

import logging

from tradeon.database import get_db_session
from tradeon.services.search_cache_service import purge_expired

logger = logging.getLogger(__name__)


async def purge_search_cache() -> int:
    """Delete expired search cache rows. Returns the number removed."""
    try:
        async with get_db_session() as db:
            removed = await purge_expired(db)
        logger.info(f"Purged {removed} expired search cache entries")
        return removed
    except Exception as e:
        logger.error(f"Search cache purge failed: {e}")
        return 0
