"""
Background Jobs Module

Handles scheduled tasks for:
- Search cache expiry
- Trending and category shelf refresh
"""

from tradeon.jobs.scheduler import scheduler, start_scheduler, shutdown_scheduler
from tradeon.jobs.search_cache_jobs import purge_search_cache
from tradeon.jobs.catalog_jobs import refresh_trending_products, refresh_category_products

__all__ = [
    "scheduler",
    "start_scheduler",
    "shutdown_scheduler",
    "purge_search_cache",
    "refresh_trending_products",
    "refresh_category_products",
]
