"""
1688 domestic shipping quotes (TMAPI).

Quotes the seller-to-warehouse freight for an item, destination province
and quantity. Failures raise the same MarketplaceError family as the OTAPI
client so endpoints map them the same way.
"""

import logging
from typing import Optional, Dict, Any

import httpx

from tradeon.config import settings
from tradeon.services.marketplace_client import MarketplaceError, MarketplaceTimeout

logger = logging.getLogger(__name__)


class ShippingFeeClient:
    """Client for the TMAPI `1688/item/shipping` endpoint."""

    def __init__(
        self,
        api_token: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token if api_token is not None else settings.TMAPI_TOKEN
        self.base_url = (base_url or settings.TMAPI_BASE_URL).rstrip("/")
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_token)

    async def get_shipping_fee(
        self,
        item_id: str,
        province: Optional[str] = None,
        quantity: int = 1,
    ) -> Dict[str, Any]:
        """Return the upstream `data` object for the quote."""
        if not self.is_configured:
            raise MarketplaceError("TMAPI not configured")

        province = province or settings.DEFAULT_SHIPPING_PROVINCE
        logger.info(f"Fetching 1688 shipping fee for item {item_id}, province {province}")
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            ) as client:
                response = await client.get(
                    f"{self.base_url}/1688/item/shipping",
                    params={
                        "apiToken": self.api_token,
                        "item_id": item_id,
                        "province": province,
                        "total_quantity": quantity,
                    },
                    headers={"Accept": "application/json"},
                )
        except httpx.TimeoutException as e:
            raise MarketplaceTimeout("Shipping fee request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"TMAPI shipping request failed: {e}")
            raise MarketplaceError(f"Request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code >= 400 or data.get("code") != 200:
            logger.error(f"TMAPI shipping fee error for {item_id}: {data.get('msg') or response.status_code}")
            raise MarketplaceError(data.get("msg") or "Failed to get shipping fee")

        return data.get("data") or {}


_client_instance: Optional[ShippingFeeClient] = None


def get_shipping_fee_client() -> ShippingFeeClient:
    global _client_instance
    if _client_instance is None:
        _client_instance = ShippingFeeClient()
    return _client_instance
