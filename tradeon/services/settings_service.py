"""
Site Settings Store

Process-wide cache of the key/value site configuration kept in the
`app_settings` table. Rows override the hardcoded defaults below, and the
defaults double as the fallback when the table cannot be read.

Usage:
    store = get_settings_store()
    site = await store.get()
    rate = site["cny_to_bdt_rate"]

    # after an admin edit
    await store.refresh()
"""
import asyncio
import uuid
import logging
from typing import Awaitable, Callable, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tradeon.models.app_setting import AppSetting
from tradeon.services import currency_service

logger = logging.getLogger(__name__)

SettingsMap = Dict[str, str]
SettingsLoader = Callable[[], Awaitable[SettingsMap]]


DEFAULT_SETTINGS: SettingsMap = {
    "site_name": "TradeOn Global",
    "search_placeholder": "Search For Money",
    "hero_title": "Buy Chinese Products",
    "hero_subtitle": "Wholesale market from 1688.com with shipping to Bangladesh",
    "shipping_card_title": "Shipping Service",
    "shipping_card_subtitle": "Ship your products from China to Bangladesh",
    "facebook_url": "https://facebook.com",
    "youtube_url": "https://youtube.com",
    "whatsapp_number": "01898889950",
    "favicon_url": "/favicon.ico",
    "contact_email": "info@TradeOn.global",
    "contact_phone": "01898-889950",
    "head_office_address": "House 16, Road 07, Nikunja-02, Dhaka, Bangladesh, 1229",
    "hero_badge_1": "🔥 Trending",
    "hero_badge_2": "✨ New Arrivals",
    "hero_badge_3": "⭐ Best Sellers",
    "cny_to_bdt_rate": "17.5",
    "footer_copyright_text": "tradeon.global - Wholesale from China to Bangladesh",
    "footer_developer_name": "Platiroll",
    "footer_developer_url": "https://platiroll.com/",
    "footer_prohibited_title": "যে পণ্যগুলো TradeOn-এ অর্ডার করা যাবে না",
    "footer_prohibited_text": (
        "সিগারেট, অ্যালকোহল, তামাক, ক্যানাবিস, জুয়া সামগ্রী, মাদকদ্রব্য, ড্রোন, ওষুধপত্র, "
        "মোবাইল, অস্ত্র, বিস্ফোরক, ঝুঁকিপূর্ণ রাসায়নিক পদার্থ, মানবদেহের অঙ্গ বা শরীরের তরল, "
        "প্রাপ্তবয়স্ক পণ্য, অশ্লীল পণ্য, প্রাণী নির্যাতনের সাথে সম্পর্কিত পণ্য, বিপন্ন প্রজাতি, "
        "ডিজিটাল মুদ্রা, বিনিয়োগ-সংক্রান্ত পণ্য, ঘৃণা ছড়ানো সামগ্রী, সহিংস পণ্য, আপত্তিকর পণ্য, "
        "খাদ্য আইটেম।"
    ),
    "invoice_company_name": "TradeOn.Global",
    "invoice_company_address": "House 16, Road 07, Nikunja-02, Dhaka, Bangladesh, 1229",
    "invoice_company_phone": "01898-889950",
    "invoice_company_email": "info@TradeOn.global",
    "invoice_company_website": "www.tradeon.global",
    "invoice_footer_text": "Thank you for shopping with TradeOn Global",
}


async def load_settings_from_db() -> SettingsMap:
    """Read every app_settings row as a key -> value map."""
    from tradeon.database import async_session_factory

    async with async_session_factory() as session:
        result = await session.execute(select(AppSetting.key, AppSetting.value))
        return {key: value for key, value in result.all()}


class SettingsStore:
    """
    Cached settings map with a single shared in-flight load.

    Concurrent get() calls made while a load is running all await the same
    task, so the loader runs once per cache fill.
    """

    def __init__(
        self,
        loader: SettingsLoader = load_settings_from_db,
        defaults: Optional[SettingsMap] = None,
    ):
        self._loader = loader
        self._defaults = dict(defaults if defaults is not None else DEFAULT_SETTINGS)
        self._cached: Optional[SettingsMap] = None
        self._pending: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def defaults(self) -> SettingsMap:
        return dict(self._defaults)

    @property
    def cached(self) -> Optional[SettingsMap]:
        return dict(self._cached) if self._cached is not None else None

    async def _load(self, generation: int) -> SettingsMap:
        merged = dict(self._defaults)
        try:
            rows = await self._loader()
            merged.update(rows)
        except Exception as e:
            logger.warning(f"Failed to load app settings, using defaults: {e}")
        # A load started before invalidate() must not repopulate the cache
        if generation == self._generation:
            self._cached = merged
            currency_service.set_cny_to_bdt_rate(currency_service.rate_from_settings(merged))
        return merged

    async def get(self) -> SettingsMap:
        """Return the cached map, loading it once if needed."""
        if self._cached is not None:
            return dict(self._cached)
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load(self._generation))
        pending = self._pending
        result = await asyncio.shield(pending)
        if self._pending is pending:
            self._pending = None
        return dict(result)

    def invalidate(self) -> None:
        """Drop the cached map and any in-flight load."""
        self._cached = None
        self._pending = None
        self._generation += 1

    async def refresh(self) -> SettingsMap:
        self.invalidate()
        return await self.get()


class SettingsService:
    """Admin writes to the app_settings table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert(self, values: SettingsMap, updated_by: Optional[uuid.UUID] = None) -> None:
        result = await self.db.execute(select(AppSetting).where(AppSetting.key.in_(list(values))))
        existing = {row.key: row for row in result.scalars().all()}
        for key, value in values.items():
            row = existing.get(key)
            if row is None:
                self.db.add(AppSetting(key=key, value=value, updated_by=updated_by))
            else:
                row.value = value
                row.updated_by = updated_by
        await self.db.commit()
        logger.info(f"Updated {len(values)} app setting(s): {', '.join(sorted(values))}")

    async def delete(self, key: str) -> bool:
        """Remove an override so the default applies again."""
        result = await self.db.execute(select(AppSetting).where(AppSetting.key == key))
        row = result.scalar_one_or_none()
        if row is None:
            return False
        await self.db.delete(row)
        await self.db.commit()
        return True


# Singleton store instance
_store_instance: Optional[SettingsStore] = None


def get_settings_store() -> SettingsStore:
    """Get the settings store singleton."""
    global _store_instance

    if _store_instance is None:
        _store_instance = SettingsStore()
        logger.info("Settings store initialized")

    return _store_instance


def set_settings_store(store: Optional[SettingsStore]) -> None:
    """Replace the singleton (used by tests and app startup)."""
    global _store_instance
    _store_instance = store
