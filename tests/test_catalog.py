"""
Tests for the storefront shelves, seller listings and shipping quotes.

Covers:
- Trending refresh (de-duplication, cap, pictureless items, empty pull)
- Category refresh (translation, per-category replacement, failures)
- Shelf read endpoints and admin-triggered refresh
- Seller products and shipping fee endpoints, upstream error mapping
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from tradeon.models import CategoryProduct, TrendingProduct
from tradeon.services.catalog_service import CatalogService
from tradeon.services.marketplace_client import MarketplaceError, MarketplaceTimeout


def shelf_item(item_id, title="Canvas Bag", picture=True, price=12.5, sales=300):
    return {
        "num_iid": int(item_id.removeprefix("abb-")),
        "item_id": item_id,
        "title": title,
        "pic_url": f"https://cbu01.alicdn.com/{item_id}.jpg" if picture else "",
        "price": price,
        "sales": sales,
        "detail_url": f"https://detail.1688.com/offer/{item_id.removeprefix('abb-')}.html",
        "location": "Guangdong",
        "vendor_name": "Guangzhou Bags",
        "stock": 500,
        "weight": 0.25,
        "extra_images": [f"https://cbu01.alicdn.com/{item_id}-2.jpg"],
    }


def search_by_query(marketplace, pages, failing=()):
    """Answer search_items from a {query: items} map."""

    async def search(query, **kwargs):
        if query in failing:
            raise MarketplaceError("Bad key")
        items = pages.get(query, [])
        return {"items": items, "total": len(items)}

    marketplace.search_items.side_effect = search


async def _rows(session_factory, model):
    async with session_factory() as session:
        result = await session.execute(select(model).order_by(model.position))
        return list(result.scalars().all())


# =============================================================================
# Trending refresh
# =============================================================================


class TestRefreshTrending:
    async def test_dedupes_skips_pictureless_and_caps(self, db_session, session_factory, marketplace):
        search_by_query(marketplace, {
            "popular bags": [shelf_item("abb-1"), shelf_item("abb-2", picture=False), shelf_item("abb-3")],
            "trending jewelry": [shelf_item("abb-3"), shelf_item("abb-4"), shelf_item("abb-5")],
        })

        count = await CatalogService(db_session, marketplace).refresh_trending(
            queries=("popular bags", "trending jewelry"), max_products=3
        )

        assert count == 3
        rows = await _rows(session_factory, TrendingProduct)
        assert [r.product_id for r in rows] == ["abb-1", "abb-3", "abb-4"]
        assert [r.position for r in rows] == [0, 1, 2]
        assert rows[0].price == Decimal("12.5")
        assert rows[0].sold == 300

    async def test_searches_by_sales(self, db_session, marketplace):
        search_by_query(marketplace, {"popular bags": [shelf_item("abb-1")]})

        await CatalogService(db_session, marketplace).refresh_trending(queries=("popular bags",))

        marketplace.search_items.assert_awaited_once_with(
            "popular bags", page=1, page_size=10, order_by="SalesDesc"
        )

    async def test_failing_query_skipped(self, db_session, marketplace):
        search_by_query(marketplace, {"popular bags": [shelf_item("abb-1")]}, failing={"best selling products"})

        count = await CatalogService(db_session, marketplace).refresh_trending(
            queries=("best selling products", "popular bags")
        )

        assert count == 1

    async def test_replaces_previous_shelf(self, db_session, session_factory, marketplace):
        db_session.add(TrendingProduct(product_id="abb-old", title="Old", image_url="x", price=Decimal("1")))
        await db_session.commit()
        search_by_query(marketplace, {"popular bags": [shelf_item("abb-1")]})

        await CatalogService(db_session, marketplace).refresh_trending(queries=("popular bags",))

        assert [r.product_id for r in await _rows(session_factory, TrendingProduct)] == ["abb-1"]

    async def test_empty_pull_keeps_existing_shelf(self, db_session, session_factory, marketplace):
        db_session.add(TrendingProduct(product_id="abb-old", title="Old", image_url="x", price=Decimal("1")))
        await db_session.commit()
        search_by_query(marketplace, {})

        count = await CatalogService(db_session, marketplace).refresh_trending(queries=("popular bags",))

        assert count == 0
        assert [r.product_id for r in await _rows(session_factory, TrendingProduct)] == ["abb-old"]

    async def test_unconfigured_client_raises(self, db_session, marketplace):
        marketplace.is_configured = False

        with pytest.raises(MarketplaceError, match="not configured"):
            await CatalogService(db_session, marketplace).refresh_trending()


# =============================================================================
# Category refresh
# =============================================================================


class TestRefreshCategories:
    async def test_stores_translated_products(self, db_session, session_factory, marketplace, translator):
        search_by_query(marketplace, {"shoes": [shelf_item("abb-1", "运动鞋"), shelf_item("abb-2", "凉鞋")]})

        refreshed = await CatalogService(db_session, marketplace, translator).refresh_categories(
            ["shoes"], per_category=12, delay=0
        )

        assert refreshed == {"shoes": 2}
        marketplace.search_items.assert_awaited_once_with("shoes", page=1, page_size=12)
        rows = await _rows(session_factory, CategoryProduct)
        assert [r.title for r in rows] == ["EN 运动鞋", "EN 凉鞋"]
        assert rows[0].category_query == "shoes"
        assert rows[0].weight == Decimal("0.25")
        assert rows[0].extra_images == ["https://cbu01.alicdn.com/abb-1-2.jpg"]

    async def test_untranslated_without_translator(self, db_session, session_factory, marketplace):
        search_by_query(marketplace, {"bag": [shelf_item("abb-1", "包")]})

        await CatalogService(db_session, marketplace).refresh_categories(["bag"], delay=0)

        assert [r.title for r in await _rows(session_factory, CategoryProduct)] == ["包"]

    async def test_replaces_only_refreshed_category(self, db_session, session_factory, marketplace):
        db_session.add_all([
            CategoryProduct(category_query="shoes", product_id="abb-old", title="Old shoe"),
            CategoryProduct(category_query="watches", product_id="abb-w", title="Watch"),
        ])
        await db_session.commit()
        search_by_query(marketplace, {"shoes": [shelf_item("abb-1")]})

        await CatalogService(db_session, marketplace).refresh_categories(["shoes"], delay=0)

        rows = await _rows(session_factory, CategoryProduct)
        assert sorted((r.category_query, r.product_id) for r in rows) == [("shoes", "abb-1"), ("watches", "abb-w")]

    async def test_failing_and_empty_categories_skipped(self, db_session, marketplace):
        search_by_query(marketplace, {"bag": [shelf_item("abb-1")]}, failing={"shoes"})

        refreshed = await CatalogService(db_session, marketplace).refresh_categories(
            ["shoes", "watches", "bag"], delay=0
        )

        assert refreshed == {"bag": 1}


# =============================================================================
# Shelf endpoints
# =============================================================================


class TestCatalogEndpoints:
    async def test_trending_in_shelf_order(self, client, db_session):
        db_session.add_all([
            TrendingProduct(product_id="abb-2", title="Second", image_url="b", price=Decimal("2"), position=1),
            TrendingProduct(product_id="abb-1", title="First", image_url="a", price=Decimal("1"), position=0),
        ])
        await db_session.commit()

        response = await client.get("/api/v1/catalog/trending")

        assert response.status_code == 200
        assert [p["title"] for p in response.json()["items"]] == ["First", "Second"]

    async def test_category_names(self, client):
        response = await client.get("/api/v1/catalog/categories")

        assert "shoes" in response.json()
        assert "school supplies" in response.json()

    async def test_category_products_limited(self, client, db_session):
        db_session.add_all([
            CategoryProduct(category_query="shoes", product_id=f"abb-{i}", title=f"Shoe {i}", position=i)
            for i in range(3)
        ])
        await db_session.commit()

        body = (await client.get("/api/v1/catalog/categories/shoes", params={"limit": 2})).json()

        assert body["category_query"] == "shoes"
        assert [p["title"] for p in body["items"]] == ["Shoe 0", "Shoe 1"]

    async def test_refresh_requires_admin(self, client, buyer_headers):
        response = await client.post("/api/v1/catalog/trending/refresh", headers=buyer_headers)

        assert response.status_code == 403

    async def test_admin_refreshes_trending(self, client, marketplace, admin_headers):
        search_by_query(marketplace, {"popular bags": [shelf_item("abb-1")]})

        response = await client.post("/api/v1/catalog/trending/refresh", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"count": 1}

    async def test_admin_refreshes_categories(self, client, marketplace, admin_headers):
        search_by_query(marketplace, {"shoes": [shelf_item("abb-1", "运动鞋")]})

        response = await client.post(
            "/api/v1/catalog/categories/refresh", json={"categories": ["shoes"]}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json() == {"total_products": 1, "categories": {"shoes": 1}}
        shelf = (await client.get("/api/v1/catalog/categories/shoes")).json()
        assert shelf["items"][0]["title"] == "EN 运动鞋"

    async def test_refresh_without_upstream_is_bad_gateway(self, client, marketplace, admin_headers):
        marketplace.is_configured = False

        response = await client.post("/api/v1/catalog/trending/refresh", headers=admin_headers)

        assert response.status_code == 502


# =============================================================================
# Sellers and shipping quotes
# =============================================================================


class TestSellerEndpoint:
    async def test_seller_products(self, client, marketplace):
        marketplace.search_vendor_items.return_value = {
            "items": [shelf_item("abb-1")],
            "total": 1,
            "vendor_info": {"name": "Guangzhou Bags", "score": 4.5, "location": "Guangdong"},
        }

        response = await client.get("/api/v1/sellers/b2b-77/products", params={"page": 2, "page_size": 20})

        assert response.status_code == 200
        assert response.json()["vendor_info"]["name"] == "Guangzhou Bags"
        marketplace.search_vendor_items.assert_awaited_once_with("b2b-77", page=2, page_size=20)

    @pytest.mark.parametrize(
        "error,status_code",
        [(MarketplaceTimeout("Search timed out"), 504), (MarketplaceError("Bad key"), 502)],
    )
    async def test_upstream_errors_mapped(self, client, marketplace, error, status_code):
        marketplace.search_vendor_items.side_effect = error

        response = await client.get("/api/v1/sellers/b2b-77/products")

        assert response.status_code == status_code


class TestShippingFeeEndpoint:
    async def test_quote(self, client, shipping_quotes):
        response = await client.get(
            "/api/v1/products/610947572360/shipping-fee", params={"province": "浙江", "quantity": 5}
        )

        assert response.status_code == 200
        assert response.json()["fee"] == 8
        shipping_quotes.get_shipping_fee.assert_awaited_once_with("610947572360", province="浙江", quantity=5)

    async def test_zero_quantity_rejected(self, client):
        response = await client.get("/api/v1/products/1/shipping-fee", params={"quantity": 0})

        assert response.status_code == 422

    async def test_upstream_error_is_bad_gateway(self, client, shipping_quotes):
        shipping_quotes.get_shipping_fee.side_effect = MarketplaceError("item offline")

        response = await client.get("/api/v1/products/1/shipping-fee")

        assert response.status_code == 502
        assert response.json()["detail"] == "item offline"
