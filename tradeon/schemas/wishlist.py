from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

from tradeon.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema, PaginatedResponse


class WishlistItemAdd(BaseModel):
    """Buyer adding a marketplace product to their own wishlist."""
    product_id: str = Field(..., min_length=1, max_length=50)
    product_name: str = Field(..., min_length=1, max_length=500)
    product_image: Optional[str] = Field(None, max_length=1000)
    product_price: Optional[Decimal] = None
    product_url: Optional[str] = Field(None, max_length=1000)


class WishlistItemCreate(WishlistItemAdd, BaseCreateSchema):
    user_id: uuid.UUID


class WishlistItemUpdate(BaseUpdateSchema):
    product_name: Optional[str] = Field(None, min_length=1, max_length=500)
    product_image: Optional[str] = None
    product_price: Optional[Decimal] = None
    product_url: Optional[str] = None


class WishlistItemResponse(BaseResponseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    product_id: str
    product_name: str
    product_image: Optional[str] = None
    product_price: Optional[Decimal] = None
    product_url: Optional[str] = None
    created_at: datetime


class WishlistListResponse(PaginatedResponse):
    items: List[WishlistItemResponse]
