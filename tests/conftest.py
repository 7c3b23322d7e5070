"""
Shared fixtures for the TradeOn API tests.

Each test gets a fresh in-memory SQLite database; the app's `get_db`,
settings store, upstream clients and background translator are all
swapped for test instances bound to it.
"""

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tradeon.core.security import create_access_token
from tradeon.database import custom_json_dumps, get_db, init_db
from tradeon.main import app
from tradeon.models import AppSetting, Order, OrderItem, Profile, UserRole
from tradeon.services import currency_service
from tradeon.services.marketplace_client import MarketplaceClient, get_marketplace_client
from tradeon.services.search_cache_service import BackgroundTranslator, get_background_translator
from tradeon.services.settings_service import SettingsStore, set_settings_store
from tradeon.services.shipping_fee_client import ShippingFeeClient, get_shipping_fee_client
from tradeon.services.translation_service import TranslationService, get_translation_service


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        json_serializer=custom_json_dumps,
    )
    await init_db(bind=test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def settings_store(session_factory):
    """Settings store reading app_settings from the test database."""

    async def loader():
        async with session_factory() as session:
            result = await session.execute(select(AppSetting.key, AppSetting.value))
            return {key: value for key, value in result.all()}

    store = SettingsStore(loader=loader)
    set_settings_store(store)
    yield store
    set_settings_store(None)
    currency_service.set_cny_to_bdt_rate(None)


@pytest.fixture
def marketplace():
    client = AsyncMock(spec=MarketplaceClient)
    client.is_configured = True
    client.search_items.return_value = {
        "items": [{"num_iid": 1, "title": "女装连衣裙", "price": 35.0}],
        "total": 1,
    }
    client.image_search.return_value = {
        "items": [{"num_iid": 2, "title": "男士手表", "price": 88.0}],
        "total": 1,
    }
    return client


@pytest.fixture
def shipping_quotes():
    client = AsyncMock(spec=ShippingFeeClient)
    client.get_shipping_fee.return_value = {"fee": 8, "unit": "CNY", "province": "广东"}
    return client


@pytest.fixture
def translator():
    service = AsyncMock(spec=TranslationService)
    service.is_configured = True
    service.translate_items.side_effect = lambda items: [
        {**item, "title": f"EN {item['title']}"} for item in items
    ]
    return service


@pytest.fixture
async def background(session_factory, translator):
    translations = BackgroundTranslator(session_factory, translator)
    yield translations
    await translations.wait_idle()


# =============================================================================
# App client
# =============================================================================


@pytest.fixture
async def client(session_factory, settings_store, marketplace, background, translator, shipping_quotes):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_marketplace_client] = lambda: marketplace
    app.dependency_overrides[get_background_translator] = lambda: background
    app.dependency_overrides[get_translation_service] = lambda: translator
    app.dependency_overrides[get_shipping_fee_client] = lambda: shipping_quotes

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    await background.wait_idle()
    app.dependency_overrides.clear()


# =============================================================================
# Users
# =============================================================================


@pytest.fixture
def buyer_id():
    return uuid.uuid4()


@pytest.fixture
def buyer_headers(buyer_id):
    return {"Authorization": f"Bearer {create_access_token(buyer_id)}"}


@pytest.fixture
async def admin_id(db_session):
    user_id = uuid.uuid4()
    db_session.add(UserRole(user_id=user_id, role="admin"))
    await db_session.commit()
    return user_id


@pytest.fixture
def admin_headers(admin_id):
    return {"Authorization": f"Bearer {create_access_token(admin_id)}"}


@pytest.fixture
async def buyer_profile(db_session, buyer_id):
    profile = Profile(user_id=buyer_id, full_name="Rahim Uddin", phone="01711000000", address="Mirpur, Dhaka")
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest.fixture
def make_order(db_session):
    """Factory inserting an order with structured items."""
    counter = {"n": 0}

    async def _make(user_id, items=None, **fields):
        counter["n"] += 1
        items = items if items is not None else [("Red Shirt", 2, Decimal("450"))]
        order = Order(
            order_number=fields.pop("order_number", f"TO-20260101-{counter['n']:06d}"),
            user_id=user_id,
            product_name=fields.pop("product_name", "Cotton Shirt"),
            quantity=sum(q for _, q, _ in items) or 1,
            unit_price=items[0][2] if items else Decimal("0"),
            total_price=fields.pop("total_price", sum((q * p for _, q, p in items), Decimal("0"))),
            items=[
                OrderItem(position=i, name=name, quantity=qty, unit_price=price)
                for i, (name, qty, price) in enumerate(items)
            ],
            **fields,
        )
        db_session.add(order)
        await db_session.commit()
        return order

    return _make
