"""
Tests for the cached marketplace search.

Covers:
- Cache key normalization
- Read-through caching and TTL expiry
- Background translation scheduling, success and failure
- Translations never overwrite a page refetched meanwhile
- Expired entry purge
- Search and product endpoints, upstream error mapping
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, update

from tradeon.models import SearchCacheEntry
from tradeon.services.marketplace_client import MarketplaceError, MarketplaceTimeout
from tradeon.services.search_cache_service import (
    BackgroundTranslator,
    SearchCacheService,
    make_query_key,
    purge_expired,
)


async def _entry(session_factory, query_key, page=1):
    async with session_factory() as session:
        result = await session.execute(
            select(SearchCacheEntry).where(
                SearchCacheEntry.query_key == query_key,
                SearchCacheEntry.page == page,
            )
        )
        return result.scalar_one_or_none()


async def _age(session_factory, query_key, hours):
    async with session_factory() as session:
        await session.execute(
            update(SearchCacheEntry)
            .where(SearchCacheEntry.query_key == query_key)
            .values(updated_at=datetime.now(timezone.utc) - timedelta(hours=hours))
        )
        await session.commit()


# =============================================================================
# Keys
# =============================================================================


class TestQueryKey:
    def test_text_query_is_trimmed_and_lowered(self):
        assert make_query_key("  Women Dress ") == "women dress"

    def test_image_key_prefixed(self):
        assert make_query_key(None, "https://img.example.com/A.jpg") == "img:https://img.example.com/a.jpg"

    def test_text_wins_over_image(self):
        assert make_query_key("watch", "https://img.example.com/a.jpg") == "watch"

    @pytest.mark.parametrize("query,image_url", [(None, None), ("  ", ""), ("", "   ")])
    def test_nothing_to_search_raises(self, query, image_url):
        with pytest.raises(ValueError):
            make_query_key(query, image_url)


# =============================================================================
# SearchCacheService
# =============================================================================


class TestSearchCacheService:
    async def test_miss_fetches_and_stores_untranslated(self, db_session, session_factory, marketplace, background):
        service = SearchCacheService(db_session, marketplace, background)

        result = await service.search(query="Dress")

        assert result["cached"] is False
        assert result["translated"] is False
        assert result["items"][0]["title"] == "女装连衣裙"
        marketplace.search_items.assert_awaited_once_with("Dress", page=1, page_size=None)
        await background.wait_idle()
        entry = await _entry(session_factory, "dress")
        assert entry.total_results == 1

    async def test_second_request_served_from_cache(self, db_session, marketplace, background):
        service = SearchCacheService(db_session, marketplace, background)
        await service.search(query="dress")
        await background.wait_idle()

        result = await SearchCacheService(db_session, marketplace, background).search(query="DRESS ")

        assert result["cached"] is True
        assert marketplace.search_items.await_count == 1

    async def test_background_translation_rewrites_entry(self, db_session, session_factory, marketplace, background):
        await SearchCacheService(db_session, marketplace, background).search(query="dress")
        await background.wait_idle()

        entry = await _entry(session_factory, "dress")
        assert entry.translated is True
        assert entry.items[0]["title"] == "EN 女装连衣裙"

    async def test_translated_hit_does_not_reschedule(
        self, db_session, session_factory, marketplace, background, translator
    ):
        await SearchCacheService(db_session, marketplace, background).search(query="dress")
        await background.wait_idle()

        async with session_factory() as session:
            result = await SearchCacheService(session, marketplace, background).search(query="dress")

        assert result["translated"] is True
        assert result["items"][0]["title"] == "EN 女装连衣裙"
        assert translator.translate_items.await_count == 1

    async def test_translation_failure_leaves_entry_untranslated(
        self, db_session, session_factory, marketplace, background, translator
    ):
        translator.translate_items.side_effect = RuntimeError("gateway down")

        await SearchCacheService(db_session, marketplace, background).search(query="dress")
        await background.wait_idle()

        entry = await _entry(session_factory, "dress")
        assert entry.translated is False
        assert entry.items[0]["title"] == "女装连衣裙"

    async def test_refetch_during_translation_is_not_overwritten(
        self, db_session, session_factory, marketplace, background, translator
    ):
        refetched = [{"num_iid": 9, "title": "新款连衣裙", "price": 40.0}]

        async def refetch_then_translate(items):
            async with session_factory() as session:
                await session.execute(
                    update(SearchCacheEntry)
                    .where(SearchCacheEntry.query_key == "dress")
                    .values(items=refetched, updated_at=datetime.now(timezone.utc) + timedelta(seconds=5))
                )
                await session.commit()
            return [{**item, "title": f"EN {item['title']}"} for item in items]

        translator.translate_items.side_effect = refetch_then_translate

        await SearchCacheService(db_session, marketplace, background).search(query="dress")
        await background.wait_idle()

        entry = await _entry(session_factory, "dress")
        assert entry.translated is False
        assert entry.items == refetched

    async def test_untranslated_hit_schedules_retry(self, db_session, session_factory, marketplace, background, translator):
        translator.translate_items.side_effect = RuntimeError("gateway down")
        await SearchCacheService(db_session, marketplace, background).search(query="dress")
        await background.wait_idle()

        translator.translate_items.side_effect = lambda items: [{**i, "title": "Dress"} for i in items]
        async with session_factory() as session:
            result = await SearchCacheService(session, marketplace, background).search(query="dress")
        await background.wait_idle()

        assert result["cached"] is True
        assert result["translated"] is False
        assert (await _entry(session_factory, "dress")).translated is True

    async def test_unconfigured_translator_schedules_nothing(self, db_session, marketplace, session_factory, translator):
        translator.is_configured = False
        background = BackgroundTranslator(session_factory, translator)

        await SearchCacheService(db_session, marketplace, background).search(query="dress")

        assert background.is_running("dress", 1) is False
        translator.translate_items.assert_not_awaited()

    async def test_expired_entry_refetched(self, db_session, session_factory, marketplace, background):
        await SearchCacheService(db_session, marketplace, background).search(query="dress")
        await background.wait_idle()
        await _age(session_factory, "dress", hours=13)

        async with session_factory() as session:
            result = await SearchCacheService(session, marketplace, background).search(query="dress")

        assert result["cached"] is False
        assert marketplace.search_items.await_count == 2

    async def test_pages_cached_independently(self, db_session, marketplace, background):
        service = SearchCacheService(db_session, marketplace, background)
        await service.search(query="dress", page=1)
        await background.wait_idle()

        result = await service.search(query="dress", page=2)

        assert result["cached"] is False
        marketplace.search_items.assert_awaited_with("dress", page=2, page_size=None)

    async def test_image_search_uses_image_endpoint(self, db_session, session_factory, marketplace, background):
        result = await SearchCacheService(db_session, marketplace, background).search(
            image_url="https://img.example.com/w.jpg"
        )

        assert result["items"][0]["num_iid"] == 2
        marketplace.search_items.assert_not_awaited()
        await background.wait_idle()
        assert await _entry(session_factory, "img:https://img.example.com/w.jpg") is not None

    async def test_upstream_error_stores_nothing(self, db_session, session_factory, marketplace, background):
        marketplace.search_items.side_effect = MarketplaceError("ErrorCode InternalError")

        with pytest.raises(MarketplaceError):
            await SearchCacheService(db_session, marketplace, background).search(query="dress")

        assert await _entry(session_factory, "dress") is None


class TestPurge:
    async def test_purge_removes_only_expired(self, db_session, session_factory, marketplace, background):
        service = SearchCacheService(db_session, marketplace, background)
        await service.search(query="old")
        await background.wait_idle()
        await service.search(query="new")
        await background.wait_idle()
        await _age(session_factory, "old", hours=24)

        async with session_factory() as session:
            removed = await purge_expired(session)

        assert removed == 1
        assert await _entry(session_factory, "old") is None
        assert await _entry(session_factory, "new") is not None


# =============================================================================
# HTTP
# =============================================================================


class TestSearchEndpoint:
    async def test_search_returns_page(self, client, marketplace):
        response = await client.post("/api/v1/search", json={"query": "dress"})

        assert response.status_code == 200
        body = response.json()
        assert body["cached"] is False
        assert body["total"] == 1

    async def test_repeat_search_is_cached(self, client, background):
        await client.post("/api/v1/search", json={"query": "dress"})
        await background.wait_idle()

        body = (await client.post("/api/v1/search", json={"query": "dress"})).json()

        assert body["cached"] is True
        assert body["translated"] is True

    async def test_missing_query_and_image(self, client):
        response = await client.post("/api/v1/search", json={"query": "  "})

        assert response.status_code == 400

    async def test_upstream_error_is_bad_gateway(self, client, marketplace):
        marketplace.search_items.side_effect = MarketplaceError("Request failed: 500")

        response = await client.post("/api/v1/search", json={"query": "dress"})

        assert response.status_code == 502

    async def test_upstream_timeout_is_gateway_timeout(self, client, marketplace):
        marketplace.image_search.side_effect = MarketplaceTimeout("Search timed out")

        response = await client.post("/api/v1/search", json={"image_url": "https://img.example.com/w.jpg"})

        assert response.status_code == 504


class TestProductEndpoint:
    async def test_item_detail(self, client, marketplace):
        marketplace.get_item.return_value = {"Id": "abb-123", "Title": "Watch"}

        response = await client.get("/api/v1/products/abb-123")

        assert response.status_code == 200
        assert response.json()["Title"] == "Watch"

    async def test_empty_result_is_not_found(self, client, marketplace):
        marketplace.get_item.return_value = {}

        response = await client.get("/api/v1/products/abb-404")

        assert response.status_code == 404

    async def test_timeout(self, client, marketplace):
        marketplace.get_item.side_effect = MarketplaceTimeout("Search timed out")

        response = await client.get("/api/v1/products/abb-1")

        assert response.status_code == 504
