"""Storefront shelves and seller listings."""
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
import uuid

from pydantic import BaseModel

from tradeon.schemas.base import BaseResponseSchema


# ==================== SHELVES ====================

class TrendingProductResponse(BaseResponseSchema):
    id: uuid.UUID
    product_id: str
    title: str
    image_url: str
    price: Decimal
    old_price: Optional[Decimal] = None
    sold: Optional[int] = None
    updated_at: datetime


class TrendingListResponse(BaseModel):
    items: List[TrendingProductResponse]


class CategoryProductResponse(BaseResponseSchema):
    id: uuid.UUID
    category_query: str
    product_id: str
    title: str
    image_url: str
    price: Decimal
    sales: Optional[int] = None
    detail_url: Optional[str] = None
    location: Optional[str] = None
    vendor_name: Optional[str] = None
    stock: Optional[int] = None
    weight: Optional[Decimal] = None
    extra_images: List[str] = []
    updated_at: datetime


class CategoryProductListResponse(BaseModel):
    category_query: str
    items: List[CategoryProductResponse]


class CategoryRefreshRequest(BaseModel):
    """Leave `categories` empty to refresh every category."""
    categories: Optional[List[str]] = None


class CategoryRefreshResult(BaseModel):
    total_products: int
    categories: Dict[str, int]


class TrendingRefreshResult(BaseModel):
    count: int


# ==================== SELLERS ====================

class VendorInfo(BaseModel):
    name: str
    score: float
    location: str


class SellerProductsResponse(BaseModel):
    items: List[Dict[str, Any]]
    total: int
    vendor_info: Optional[VendorInfo] = None

