from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime
from decimal import Decimal
import uuid

from tradeon.models.order import OrderStatus
from tradeon.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema


# ==================== ORDER ITEM SCHEMAS ====================

class OrderItemCreate(BaseModel):
    """One selected variant with its quantity."""
    name: str = Field(..., min_length=1, max_length=500)
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)


class OrderItemResponse(BaseResponseSchema):
    id: uuid.UUID
    position: int
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


# ==================== ORDER SCHEMAS ====================

class OrderCreate(BaseCreateSchema):
    """Checkout payload from the product page."""
    product_name: str = Field(..., min_length=1, max_length=500)
    product_image: Optional[str] = Field(None, max_length=1000)
    product_url: Optional[str] = Field(None, max_length=1000)
    source_url: Optional[str] = Field(None, max_length=1000)
    product_1688_id: Optional[str] = Field(None, max_length=50)
    variant_id: Optional[str] = Field(None, max_length=100)
    variant_name: Optional[str] = Field(None, max_length=300)
    items: List[OrderItemCreate]
    price_currency: Literal["BDT", "CNY"] = "BDT"
    shipping_charges: Optional[Decimal] = Field(None, ge=0)
    commission: Optional[Decimal] = Field(None, ge=0)
    domestic_courier_charge: Optional[Decimal] = Field(None, ge=0)
    invoice_name: Optional[str] = Field(None, max_length=200)

    @field_validator("items")
    @classmethod
    def require_items(cls, v: List[OrderItemCreate]) -> List[OrderItemCreate]:
        if not v:
            raise ValueError("Please select at least 1 item")
        return v


class AdminOrderCreate(OrderCreate):
    """Order placed by staff on behalf of a buyer."""
    user_id: uuid.UUID


class OrderUpdate(BaseUpdateSchema):
    """Admin edit of an order. Stage changes go through the stage endpoint."""
    product_name: Optional[str] = Field(None, min_length=1, max_length=500)
    product_image: Optional[str] = None
    variant_name: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=1)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    total_price: Optional[Decimal] = Field(None, ge=0)
    shipping_charges: Optional[Decimal] = Field(None, ge=0)
    commission: Optional[Decimal] = Field(None, ge=0)
    domestic_courier_charge: Optional[Decimal] = Field(None, ge=0)
    tracking_number: Optional[str] = Field(None, max_length=100)
    invoice_name: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    status: Optional[OrderStatus] = None


class OrderResponse(BaseResponseSchema):
    id: uuid.UUID
    order_number: str
    user_id: uuid.UUID
    product_name: str
    product_image: Optional[str] = None
    product_url: Optional[str] = None
    source_url: Optional[str] = None
    product_1688_id: Optional[str] = None
    variant_id: Optional[str] = None
    variant_name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    shipping_charges: Optional[Decimal] = None
    commission: Optional[Decimal] = None
    domestic_courier_charge: Optional[Decimal] = None
    tracking_number: Optional[str] = None
    invoice_name: Optional[str] = None
    notes: Optional[str] = None
    status: str
    items: List[OrderItemResponse] = []
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    """Paginated order list."""
    items: List[OrderResponse]
    total: int
    page: int
    size: int
    pages: int
