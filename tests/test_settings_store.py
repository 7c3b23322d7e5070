"""
Tests for the site settings store and currency conversion.

Covers:
- Single shared load under concurrent readers
- Defaults merged under stored overrides, defaults on loader failure
- Invalidation and rate propagation
- Half-up CNY to BDT conversion
- Settings and currency endpoints
"""

import asyncio
from decimal import Decimal

import pytest

from tradeon.services import currency_service
from tradeon.services.settings_service import DEFAULT_SETTINGS, SettingsStore


@pytest.fixture(autouse=True)
def reset_rate():
    currency_service.set_cny_to_bdt_rate(None)
    yield
    currency_service.set_cny_to_bdt_rate(None)


# =============================================================================
# SettingsStore
# =============================================================================


class TestSettingsStore:
    async def test_concurrent_readers_share_one_load(self):
        calls = []
        release = asyncio.Event()

        async def loader():
            calls.append(1)
            await release.wait()
            return {"site_name": "Shared"}

        store = SettingsStore(loader=loader)
        readers = [asyncio.ensure_future(store.get()) for _ in range(5)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*readers)

        assert len(calls) == 1
        assert all(r["site_name"] == "Shared" for r in results)

    async def test_cached_map_reused(self):
        calls = []

        async def loader():
            calls.append(1)
            return {}

        store = SettingsStore(loader=loader)
        await store.get()
        await store.get()

        assert len(calls) == 1

    async def test_stored_values_override_defaults(self):
        async def loader():
            return {"hero_title": "Wholesale Deals"}

        site = await SettingsStore(loader=loader).get()

        assert site["hero_title"] == "Wholesale Deals"
        assert site["contact_phone"] == DEFAULT_SETTINGS["contact_phone"]

    async def test_loader_failure_falls_back_to_defaults(self):
        async def loader():
            raise ConnectionError("database down")

        site = await SettingsStore(loader=loader).get()

        assert site == DEFAULT_SETTINGS

    async def test_returned_map_is_a_copy(self):
        async def loader():
            return {}

        store = SettingsStore(loader=loader)
        site = await store.get()
        site["site_name"] = "Mutated"

        assert (await store.get())["site_name"] == DEFAULT_SETTINGS["site_name"]

    async def test_invalidate_forces_reload(self):
        values = {"site_name": "First"}

        async def loader():
            return dict(values)

        store = SettingsStore(loader=loader)
        assert (await store.get())["site_name"] == "First"

        values["site_name"] = "Second"
        assert (await store.get())["site_name"] == "First"
        assert (await store.refresh())["site_name"] == "Second"

    async def test_stale_load_does_not_repopulate_after_invalidate(self):
        release = asyncio.Event()

        async def slow_loader():
            await release.wait()
            return {"site_name": "Stale"}

        store = SettingsStore(loader=slow_loader)
        pending = asyncio.ensure_future(store.get())
        await asyncio.sleep(0)
        store.invalidate()
        release.set()
        await pending

        assert store.cached is None

    async def test_load_publishes_rate(self):
        async def loader():
            return {"cny_to_bdt_rate": "18.25"}

        await SettingsStore(loader=loader).get()

        assert currency_service.get_cny_to_bdt_rate() == Decimal("18.25")


# =============================================================================
# Currency conversion
# =============================================================================


class TestCurrency:
    @pytest.mark.parametrize(
        "cny,rate,expected",
        [
            ("10", "17.5", 175),
            ("1.1", "17.5", 19),      # 19.25
            ("1.3", "17.5", 23),      # 22.75
            ("0.1", "5", 1),          # 0.5 rounds up
            ("0", "17.5", 0),
        ],
    )
    def test_half_up_rounding(self, cny, rate, expected):
        assert currency_service.convert_to_bdt(Decimal(cny), Decimal(rate)) == expected

    def test_uses_cached_rate(self):
        currency_service.set_cny_to_bdt_rate(Decimal("20"))

        assert currency_service.convert_to_bdt(3) == 60

    def test_default_rate_when_unset(self):
        assert currency_service.get_cny_to_bdt_rate() == Decimal("17.5")

    @pytest.mark.parametrize("raw", ["", "abc", "0", "-3", "NaN"])
    def test_unusable_rate_falls_back(self, raw):
        assert currency_service.rate_from_settings({"cny_to_bdt_rate": raw}) == Decimal("17.5")

    def test_missing_rate_falls_back(self):
        assert currency_service.rate_from_settings({}) == Decimal("17.5")


# =============================================================================
# HTTP
# =============================================================================


class TestSettingsEndpoints:
    async def test_public_read_returns_defaults(self, client):
        response = await client.get("/api/v1/settings")

        assert response.status_code == 200
        assert response.json()["site_name"] == DEFAULT_SETTINGS["site_name"]

    async def test_admin_update_refreshes_cache(self, client, admin_headers):
        await client.get("/api/v1/settings")

        response = await client.put(
            "/api/v1/settings",
            json={"values": {"site_name": "TradeOn BD", "cny_to_bdt_rate": "20"}},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["site_name"] == "TradeOn BD"
        assert (await client.get("/api/v1/settings")).json()["site_name"] == "TradeOn BD"
        converted = (await client.get("/api/v1/currency/convert", params={"cny": "2"})).json()
        assert converted["bdt"] == 40

    async def test_update_existing_key(self, client, admin_headers):
        await client.put("/api/v1/settings", json={"values": {"hero_title": "A"}}, headers=admin_headers)
        response = await client.put("/api/v1/settings", json={"values": {"hero_title": "B"}}, headers=admin_headers)

        assert response.json()["hero_title"] == "B"

    async def test_buyer_cannot_update(self, client, buyer_headers):
        response = await client.put(
            "/api/v1/settings", json={"values": {"site_name": "Hacked"}}, headers=buyer_headers
        )

        assert response.status_code == 403

    async def test_empty_update_rejected(self, client, admin_headers):
        response = await client.put("/api/v1/settings", json={"values": {}}, headers=admin_headers)

        assert response.status_code == 422

    async def test_delete_restores_default(self, client, admin_headers):
        await client.put("/api/v1/settings", json={"values": {"site_name": "Temp"}}, headers=admin_headers)

        response = await client.delete("/api/v1/settings/site_name", headers=admin_headers)

        assert response.status_code == 204
        assert (await client.get("/api/v1/settings")).json()["site_name"] == DEFAULT_SETTINGS["site_name"]

    async def test_delete_unknown_key(self, client, admin_headers):
        response = await client.delete("/api/v1/settings/nope", headers=admin_headers)

        assert response.status_code == 404


class TestCurrencyEndpoint:
    async def test_convert_with_default_rate(self, client):
        response = await client.get("/api/v1/currency/convert", params={"cny": "1.1"})

        assert response.status_code == 200
        body = response.json()
        assert body["bdt"] == 19
        assert Decimal(str(body["rate"])) == Decimal("17.5")

    async def test_negative_amount_rejected(self, client):
        response = await client.get("/api/v1/currency/convert", params={"cny": "-1"})

        assert response.status_code == 422
