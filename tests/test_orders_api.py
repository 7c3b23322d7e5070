"""
Tests for order placement and the buyer order endpoints.

Covers:
- Order creation from selected variants (sums, notes rendering, order number)
- CNY priced checkout converted at the configured rate
- Validation of empty selections
- Listing, filtering and ownership checks
- Authentication failures
"""

import re
import uuid
from decimal import Decimal

import pytest

from tradeon.core.security import create_access_token
from tradeon.models.order import OrderStatus
from tradeon.services import currency_service
from tradeon.services.order_service import OrderService
from tradeon.schemas.order import OrderCreate


ORDER_PAYLOAD = {
    "product_name": "Summer Dress",
    "product_1688_id": "610947572360",
    "items": [
        {"name": "Red / M", "quantity": 3, "unit_price": "450"},
        {"name": "Blue / L", "quantity": 2, "unit_price": "1200"},
    ],
    "shipping_charges": "300",
}


# =============================================================================
# OrderService
# =============================================================================


class TestOrderService:
    def test_order_number_format(self, db_session):
        number = OrderService(db_session).generate_order_number()

        assert re.fullmatch(r"TO-\d{8}-[0-9A-F]{6}", number)

    async def test_create_order_sums_items(self, db_session, buyer_id):
        order = await OrderService(db_session).create_order(buyer_id, OrderCreate(**ORDER_PAYLOAD))

        assert order.quantity == 5
        assert order.unit_price == Decimal("450")
        assert order.total_price == Decimal("3750")
        assert order.status == "pending"
        assert [i.position for i in order.items] == [0, 1]
        assert order.notes == "Red / M: 3 pcs × ৳450\nBlue / L: 2 pcs × ৳1,200"

    async def test_cny_prices_converted_to_taka(self, db_session, buyer_id):
        currency_service.set_cny_to_bdt_rate(Decimal("17.5"))
        try:
            payload = {**ORDER_PAYLOAD, "price_currency": "CNY", "items": [
                {"name": "Red", "quantity": 2, "unit_price": "1.1"},
            ]}
            order = await OrderService(db_session).create_order(buyer_id, OrderCreate(**payload))
        finally:
            currency_service.set_cny_to_bdt_rate(None)

        assert order.items[0].unit_price == Decimal("19")
        assert order.total_price == Decimal("38")

    def test_empty_selection_rejected(self):
        with pytest.raises(ValueError, match="at least 1 item"):
            OrderCreate(**{**ORDER_PAYLOAD, "items": []})

    async def test_update_notes_rebuilds_items(self, db_session, make_order, buyer_id):
        order = await make_order(buyer_id)

        updated = await OrderService(db_session).update_order(
            order, {"notes": "Blue Hat: 4 pcs × ৳120\nnot an item line", "status": OrderStatus.PROCESSING}
        )

        assert [(i.position, i.name, i.quantity, i.unit_price) for i in updated.items] == [
            (0, "Blue Hat", 4, Decimal("120")),
        ]
        assert updated.status == "processing"

    async def test_update_without_notes_keeps_items(self, db_session, make_order, buyer_id):
        order = await make_order(buyer_id, items=[("A", 1, Decimal("100"))])

        updated = await OrderService(db_session).update_order(order, {"tracking_number": "CN1"})

        assert [i.name for i in updated.items] == ["A"]

    async def test_get_orders_filters_by_status_and_search(self, db_session, make_order, buyer_id):
        await make_order(buyer_id, product_name="Leather Wallet")
        await make_order(buyer_id, product_name="Canvas Bag", status="delivered")
        await make_order(uuid.uuid4(), product_name="Leather Belt")

        service = OrderService(db_session)
        leather, total = await service.get_orders(user_id=buyer_id, search="leather")
        assert total == 1
        assert leather[0].product_name == "Leather Wallet"

        delivered, total = await service.get_orders(user_id=buyer_id, status=OrderStatus.DELIVERED)
        assert total == 1
        assert delivered[0].product_name == "Canvas Bag"


# =============================================================================
# HTTP
# =============================================================================


class TestOrderEndpoints:
    async def test_place_order(self, client, buyer_id, buyer_headers):
        response = await client.post("/api/v1/orders", json=ORDER_PAYLOAD, headers=buyer_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["user_id"] == str(buyer_id)
        assert body["quantity"] == 5
        assert Decimal(body["total_price"]) == Decimal("3750")
        assert [Decimal(i["total_price"]) for i in body["items"]] == [Decimal("1350"), Decimal("2400")]
        assert body["order_number"].startswith("TO-")

    async def test_empty_selection_is_unprocessable(self, client, buyer_headers):
        response = await client.post(
            "/api/v1/orders", json={**ORDER_PAYLOAD, "items": []}, headers=buyer_headers
        )

        assert response.status_code == 422

    async def test_zero_quantity_rejected(self, client, buyer_headers):
        payload = {**ORDER_PAYLOAD, "items": [{"name": "Red", "quantity": 0, "unit_price": "10"}]}

        response = await client.post("/api/v1/orders", json=payload, headers=buyer_headers)

        assert response.status_code == 422

    async def test_list_only_own_orders(self, client, make_order, buyer_id, buyer_headers):
        await make_order(buyer_id)
        await make_order(buyer_id)
        await make_order(uuid.uuid4())

        response = await client.get("/api/v1/orders", params={"size": 1}, headers=buyer_headers)

        body = response.json()
        assert body["total"] == 2
        assert body["pages"] == 2
        assert len(body["items"]) == 1
        assert body["items"][0]["user_id"] == str(buyer_id)

    async def test_empty_list_has_one_page(self, client, buyer_headers):
        body = (await client.get("/api/v1/orders", headers=buyer_headers)).json()

        assert body["total"] == 0
        assert body["pages"] == 1

    async def test_other_buyers_order_forbidden(self, client, make_order, buyer_headers):
        order = await make_order(uuid.uuid4())

        response = await client.get(f"/api/v1/orders/{order.id}", headers=buyer_headers)

        assert response.status_code == 403

    async def test_admin_can_read_any_order(self, client, make_order, admin_headers):
        order = await make_order(uuid.uuid4())

        response = await client.get(f"/api/v1/orders/{order.id}", headers=admin_headers)

        assert response.status_code == 200

    async def test_unknown_order(self, client, buyer_headers):
        response = await client.get(f"/api/v1/orders/{uuid.uuid4()}", headers=buyer_headers)

        assert response.status_code == 404

    async def test_invalid_token_rejected(self, client):
        response = await client.get("/api/v1/orders", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    async def test_missing_token_rejected(self, client):
        response = await client.get("/api/v1/orders")

        assert response.status_code in (401, 403)

    async def test_refresh_token_type_rejected(self, client, buyer_id):
        token = create_access_token(buyer_id, additional_claims={"type": "refresh"})

        response = await client.get("/api/v1/orders", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
