"""
Marketplace Search Cache

Read-through cache of upstream 1688 search pages, stored in `search_cache`.

Flow:
1. Hit within TTL, translated     -> return cached items
2. Hit within TTL, not translated -> return cached items, translate in background
3. Miss                           -> fetch upstream, store untranslated, return,
                                     translate in background

Background translation runs at most once at a time per (query_key, page).
Success rewrites the cached items in place unless the page was refetched
meanwhile; failure leaves them untranslated.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import select, delete, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tradeon.config import settings
from tradeon.models.app_setting import SearchCacheEntry
from tradeon.services.marketplace_client import MarketplaceClient
from tradeon.services.translation_service import TranslationService

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, int]


def make_query_key(query: Optional[str] = None, image_url: Optional[str] = None) -> str:
    """Normalize a text query or image URL into a cache key."""
    if query and query.strip():
        return query.strip().lower()
    if image_url and image_url.strip():
        return f"img:{image_url.strip().lower()}"
    raise ValueError("Search query or imageUrl is required")


class BackgroundTranslator:
    """Fire-and-forget translation of cached search pages."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        translator: TranslationService,
    ):
        self._session_factory = session_factory
        self._translator = translator
        self._tasks: Dict[CacheKey, asyncio.Task] = {}

    def is_running(self, query_key: str, page: int) -> bool:
        task = self._tasks.get((query_key, page))
        return task is not None and not task.done()

    def schedule(self, query_key: str, page: int) -> bool:
        """Start a translation pass unless one is already in flight for the key."""
        if not self._translator.is_configured:
            logger.debug("Translation not configured; cache entries stay untranslated")
            return False
        key = (query_key, page)
        if self.is_running(query_key, page):
            return False
        task = asyncio.create_task(self._run(query_key, page))
        self._tasks[key] = task
        task.add_done_callback(lambda t, k=key: self._forget(k, t))
        return True

    def _forget(self, key: CacheKey, task: asyncio.Task) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]

    async def _run(self, query_key: str, page: int) -> None:
        try:
            async with self._session_factory() as session:
                entry = await _get_entry(session, query_key, page)
                if entry is None or entry.translated:
                    return
                entry_id, fetched_at = entry.id, entry.updated_at
                items = list(entry.items or [])

            translated_items = await self._translator.translate_items(items)

            # Only overwrite the page that was translated; a refetch moves updated_at
            async with self._session_factory() as session:
                result = await session.execute(
                    update(SearchCacheEntry)
                    .where(
                        SearchCacheEntry.id == entry_id,
                        SearchCacheEntry.updated_at == fetched_at,
                    )
                    .values(items=translated_items, translated=True)
                )
                await session.commit()
            if not result.rowcount:
                logger.info(f"Cached search '{query_key}' page {page} was refetched during translation, discarded")
                return
            logger.info(f"Translated cached search '{query_key}' page {page}")
        except Exception as e:
            # Entry stays untranslated; the next cache hit schedules another pass
            logger.warning(f"Background translation failed for '{query_key}' page {page}: {e}")

    async def wait_idle(self) -> None:
        """Wait for every in-flight translation (shutdown and tests)."""
        tasks = list(self._tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


async def _get_entry(
    session: AsyncSession,
    query_key: str,
    page: int,
    fresh_after: Optional[datetime] = None,
) -> Optional[SearchCacheEntry]:
    stmt = select(SearchCacheEntry).where(
        SearchCacheEntry.query_key == query_key,
        SearchCacheEntry.page == page,
    )
    if fresh_after is not None:
        stmt = stmt.where(SearchCacheEntry.updated_at >= fresh_after)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


class SearchCacheService:
    """Cached marketplace search for one request."""

    def __init__(
        self,
        db: AsyncSession,
        client: MarketplaceClient,
        background: BackgroundTranslator,
        ttl_hours: Optional[int] = None,
    ):
        self.db = db
        self.client = client
        self.background = background
        self.ttl = timedelta(hours=ttl_hours if ttl_hours is not None else settings.SEARCH_CACHE_TTL_HOURS)

    def cutoff(self) -> datetime:
        return datetime.now(timezone.utc) - self.ttl

    async def search(
        self,
        query: Optional[str] = None,
        image_url: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Return one page of results as {items, total, cached, translated}.

        Raises:
            ValueError: neither query nor image_url given
            MarketplaceError: upstream failure on a cache miss
        """
        query_key = make_query_key(query, image_url)

        cached = await _get_entry(self.db, query_key, page, fresh_after=self.cutoff())
        if cached is not None:
            logger.info(f"Cache HIT for '{query_key}' page {page}")
            if not cached.translated:
                self.background.schedule(query_key, page)
            return {
                "items": cached.items or [],
                "total": cached.total_results,
                "cached": True,
                "translated": cached.translated,
            }

        logger.info(f"Cache MISS for '{query_key}' page {page}, fetching upstream")
        if query and query.strip():
            result = await self.client.search_items(query.strip(), page=page, page_size=page_size)
        else:
            result = await self.client.image_search(image_url.strip(), page=page, page_size=page_size)

        await self._store(query_key, page, result["items"], result["total"])
        self.background.schedule(query_key, page)

        return {
            "items": result["items"],
            "total": result["total"],
            "cached": False,
            "translated": False,
        }

    async def _store(self, query_key: str, page: int, items: list, total: int) -> None:
        """Upsert the page as untranslated and commit so background work can see it."""
        entry = await _get_entry(self.db, query_key, page)
        now = datetime.now(timezone.utc)
        if entry is None:
            entry = SearchCacheEntry(query_key=query_key, page=page)
            self.db.add(entry)
        entry.items = items
        entry.total_results = total or 0
        entry.translated = False
        entry.updated_at = now
        await self.db.commit()


async def purge_expired(session: AsyncSession, ttl: Optional[timedelta] = None) -> int:
    """Delete entries older than the TTL. Returns the number removed."""
    ttl = ttl if ttl is not None else timedelta(hours=settings.SEARCH_CACHE_TTL_HOURS)
    cutoff = datetime.now(timezone.utc) - ttl
    result = await session.execute(
        delete(SearchCacheEntry).where(SearchCacheEntry.updated_at < cutoff)
    )
    await session.commit()
    return result.rowcount or 0


_background_instance: Optional[BackgroundTranslator] = None


def get_background_translator() -> BackgroundTranslator:
    """Process-wide translator so in-flight tracking spans requests."""
    global _background_instance
    if _background_instance is None:
        from tradeon.database import async_session_factory
        from tradeon.services.translation_service import get_translation_service

        _background_instance = BackgroundTranslator(async_session_factory, get_translation_service())
    return _background_instance


def set_background_translator(background: Optional[BackgroundTranslator]) -> None:
    global _background_instance
    _background_instance = background
