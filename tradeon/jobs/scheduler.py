"""
APScheduler Configuration

Background job scheduler started from the application lifespan.

Jobs:
- purge_search_cache: drop marketplace search pages older than the cache TTL
- refresh_trending_products: rebuild the home page best sellers shelf
- refresh_category_products: rebuild the per-category shelves
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.asyncio import AsyncIOExecutor

from tradeon.config import settings

logger = logging.getLogger(__name__)

# Job stores
jobstores = {
    'default': MemoryJobStore()
}

# Executors
executors = {
    'default': AsyncIOExecutor(),
}

# Job defaults
job_defaults = {
    'coalesce': True,  # Combine multiple pending executions into one
    'max_instances': 1,  # Only one instance of each job at a time
    'misfire_grace_time': 60,  # Allow 60 seconds grace time for misfires
}

# Create scheduler
scheduler = AsyncIOScheduler(
    jobstores=jobstores,
    executors=executors,
    job_defaults=job_defaults,
    timezone=settings.SCHEDULER_TIMEZONE
)


def register_jobs():
    """Add all scheduled jobs (idempotent)."""
    from tradeon.jobs.search_cache_jobs import purge_search_cache
    from tradeon.jobs.catalog_jobs import refresh_trending_products, refresh_category_products

    scheduler.add_job(
        purge_search_cache,
        'interval',
        minutes=settings.SEARCH_CACHE_PURGE_INTERVAL_MINUTES,
        id='purge_search_cache',
        name='Purge Expired Search Cache',
        replace_existing=True,
    )

    scheduler.add_job(
        refresh_trending_products,
        'interval',
        hours=settings.TRENDING_REFRESH_INTERVAL_HOURS,
        id='refresh_trending_products',
        name='Refresh Trending Products',
        replace_existing=True,
    )

    scheduler.add_job(
        refresh_category_products,
        'interval',
        hours=settings.CATEGORY_REFRESH_INTERVAL_HOURS,
        id='refresh_category_products',
        name='Refresh Category Products',
        replace_existing=True,
    )


def start_scheduler():
    """Start the background job scheduler."""
    if not settings.SCHEDULER_ENABLED:
        logger.info("Background scheduler disabled by configuration")
        return

    if not scheduler.running:
        register_jobs()
        scheduler.start()
        logger.info("Background job scheduler started")

        # Log all scheduled jobs
        jobs = scheduler.get_jobs()
        for job in jobs:
            logger.info(f"Scheduled job: {job.name} - Next run: {job.next_run_time}")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Background job scheduler stopped")

