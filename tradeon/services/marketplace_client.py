"""
1688 Marketplace Client (OTAPI)

Thin async wrapper around the OTAPI JSON service used to reach 1688.com:
- SearchItemsFrame for keyword, image and seller search
- BatchGetItemFullInfo for a single item's detail

Results are reshaped into the flat item dicts the storefront renders.
Any response that is not the expected JSON object is a MarketplaceError.
"""

import logging
from typing import Optional, List, Dict, Any, Tuple
from xml.sax.saxutils import escape

import httpx

from tradeon.config import settings

logger = logging.getLogger(__name__)

PROVIDER = "Alibaba1688"


class MarketplaceError(Exception):
    """Upstream marketplace call failed or returned an error code."""
    pass


class MarketplaceTimeout(MarketplaceError):
    """Upstream marketplace call exceeded its time limit."""
    pass


def xml_escape(value: str) -> str:
    return escape(value, {'"': "&quot;", "'": "&apos;"})


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value: Any) -> int:
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return 0


def _obj(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _picture_url(picture: Any) -> str:
    picture = _obj(picture)
    return picture.get("Url") or _obj(picture.get("Large")).get("Url") or ""


def normalize_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten an OTAPI search item into the storefront item shape."""
    price_info = _obj(item.get("Price"))
    price = (
        price_info.get("OriginalPrice")
        or _obj(_obj(price_info.get("ConvertedPriceList")).get("Internal")).get("Price")
        or 0
    )
    pictures = item.get("Pictures") if isinstance(item.get("Pictures"), list) else []
    extra_images = [url for url in (_picture_url(p) for p in pictures) if url]
    external_id = str(item.get("Id") or "")
    num_iid = _to_int(external_id.removeprefix("abb-"))
    featured = item.get("FeaturedValues") if isinstance(item.get("FeaturedValues"), list) else []
    total_sales = next(
        (_to_int(v.get("Value")) for v in featured if isinstance(v, dict) and v.get("Name") == "TotalSales"),
        0,
    )
    location = _obj(item.get("Location"))

    return {
        "num_iid": num_iid,
        "item_id": external_id,
        "title": item.get("Title") or "",
        "pic_url": item.get("MainPictureUrl") or (extra_images[0] if extra_images else ""),
        "price": _to_float(price),
        "sales": total_sales or None,
        "detail_url": item.get("ExternalItemUrl") or f"https://detail.1688.com/offer/{num_iid}.html",
        "location": location.get("State") or location.get("City") or "",
        "extra_images": extra_images,
        "vendor_name": item.get("VendorName") or item.get("VendorDisplayName") or "",
        "stock": item.get("MasterQuantity") or None,
        "weight": _obj(item.get("PhysicalParameters")).get("Weight") or None,
    }


def vendor_info(item: Dict[str, Any]) -> Dict[str, Any]:
    """Seller summary taken from one of its items."""
    location = _obj(item.get("Location"))
    return {
        "name": item.get("VendorName") or item.get("VendorDisplayName") or "",
        "score": _to_float(item.get("VendorScore")),
        "location": location.get("State") or location.get("City") or "",
    }


class MarketplaceClient:
    """
    Client for the OTAPI marketplace service.
    """

    def __init__(
        self,
        instance_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.instance_key = instance_key if instance_key is not None else settings.OTAPI_INSTANCE_KEY
        self.base_url = (base_url or settings.OTAPI_BASE_URL).rstrip("/")
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.instance_key)

    async def _get(self, method: str, params: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        if not self.is_configured:
            raise MarketplaceError("1688 API not configured")

        query = {"instanceKey": self.instance_key, "language": "en", **params}
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=timeout) as client:
                response = await client.get(
                    f"{self.base_url}/{method}",
                    params=query,
                    headers={"Accept": "application/json"},
                )
        except httpx.TimeoutException as e:
            logger.warning(f"OTAPI {method} timed out after {timeout}s")
            raise MarketplaceTimeout("Search timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"OTAPI {method} request failed: {e}")
            raise MarketplaceError(f"Request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not isinstance(data, dict):
            logger.error(f"OTAPI {method} returned {type(data).__name__}, expected an object")
            raise MarketplaceError(f"Unexpected response from {method}")

        error_code = data.get("ErrorCode")
        if response.status_code >= 400 or (error_code and error_code not in ("Ok", "None")):
            message = data.get("ErrorMessage") or error_code or f"Request failed: {response.status_code}"
            logger.error(f"OTAPI {method} error: {message}")
            raise MarketplaceError(message)

        return data

    async def search_frame(
        self,
        xml_parameters: str,
        page: int = 1,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """One SearchItemsFrame page as (raw item dicts, total count)."""
        page_size = page_size or settings.SEARCH_PAGE_SIZE
        data = await self._get(
            "SearchItemsFrame",
            {
                "xmlParameters": xml_parameters,
                "framePosition": (page - 1) * page_size,
                "frameSize": page_size,
            },
            timeout or settings.UPSTREAM_TIMEOUT_SECONDS,
        )
        result_items = _obj(_obj(data.get("Result")).get("Items"))
        content = result_items.get("Content")
        raw_items = [item for item in content if isinstance(item, dict)] if isinstance(content, list) else []
        return raw_items, _to_int(result_items.get("TotalCount"))

    async def _search(
        self,
        xml_parameters: str,
        page: int,
        page_size: Optional[int],
        timeout: float,
    ) -> Dict[str, Any]:
        raw_items, total = await self.search_frame(xml_parameters, page, page_size, timeout)
        items = [normalize_item(item) for item in raw_items]
        logger.info(f"OTAPI returned {len(items)} items (page {page})")
        return {"items": items, "total": total}

    async def search_items(
        self,
        query: str,
        page: int = 1,
        page_size: Optional[int] = None,
        order_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Keyword search. Returns {"items": [...], "total": int}."""
        order = f"<Order>{xml_escape(order_by)}</Order>" if order_by else ""
        xml_parameters = (
            f"<SearchItemsParameters><ItemTitle>{xml_escape(query)}</ItemTitle>"
            f"<Provider>{PROVIDER}</Provider>{order}</SearchItemsParameters>"
        )
        return await self._search(xml_parameters, page, page_size, settings.UPSTREAM_TIMEOUT_SECONDS)

    async def image_search(
        self,
        image_url: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Search by picture. Aborted after IMAGE_SEARCH_TIMEOUT_SECONDS."""
        xml_parameters = (
            f"<SearchItemsParameters><ImageUrl>{xml_escape(image_url)}</ImageUrl>"
            f"<Provider>{PROVIDER}</Provider></SearchItemsParameters>"
        )
        return await self._search(xml_parameters, page, page_size, settings.IMAGE_SEARCH_TIMEOUT_SECONDS)

    async def search_vendor_items(
        self,
        vendor_id: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Items listed by one seller.

        Returns {"items": [...], "total": int, "vendor_info": {...} or None};
        the vendor summary comes from the first item on the page.
        """
        xml_parameters = (
            f"<SearchItemsParameters><VendorId>{xml_escape(vendor_id)}</VendorId>"
            f"<Provider>{PROVIDER}</Provider></SearchItemsParameters>"
        )
        raw_items, total = await self.search_frame(
            xml_parameters, page, page_size, settings.UPSTREAM_TIMEOUT_SECONDS
        )
        logger.info(f"OTAPI returned {len(raw_items)} items for vendor {vendor_id} (page {page})")
        return {
            "items": [normalize_item(item) for item in raw_items],
            "total": total,
            "vendor_info": vendor_info(raw_items[0]) if raw_items else None,
        }

    async def get_item(self, item_id: str) -> Dict[str, Any]:
        """Full item detail (attributes, SKUs, pictures) as returned upstream."""
        data = await self._get(
            "BatchGetItemFullInfo",
            {"itemId": item_id},
            settings.UPSTREAM_TIMEOUT_SECONDS,
        )
        return _obj(data.get("Result"))


_client_instance: Optional[MarketplaceClient] = None


def get_marketplace_client() -> MarketplaceClient:
    global _client_instance
    if _client_instance is None:
        _client_instance = MarketplaceClient()
    return _client_instance
