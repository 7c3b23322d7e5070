from pydantic import Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

from tradeon.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema, PaginatedResponse


class WalletCreate(BaseCreateSchema):
    user_id: uuid.UUID
    balance: Decimal = Decimal("0")


class WalletUpdate(BaseUpdateSchema):
    balance: Optional[Decimal] = None


class WalletResponse(BaseResponseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    balance: Decimal
    created_at: datetime
    updated_at: datetime


class WalletListResponse(PaginatedResponse):
    items: List[WalletResponse]


class TransactionCreate(BaseCreateSchema):
    user_id: uuid.UUID
    amount: Decimal
    type: str = Field(..., max_length=30, description="deposit, payment, refund, withdrawal")
    status: str = Field("pending", max_length=30)
    description: Optional[str] = None
    reference_id: Optional[str] = Field(None, max_length=100)


class TransactionUpdate(BaseUpdateSchema):
    amount: Optional[Decimal] = None
    type: Optional[str] = Field(None, max_length=30)
    status: Optional[str] = Field(None, max_length=30)
    description: Optional[str] = None
    reference_id: Optional[str] = Field(None, max_length=100)


class TransactionResponse(BaseResponseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: Decimal
    type: str
    status: str
    description: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: datetime


class TransactionListResponse(PaginatedResponse):
    items: List[TransactionResponse]


class RefundCreate(BaseCreateSchema):
    user_id: uuid.UUID
    order_id: Optional[uuid.UUID] = None
    amount: Decimal = Field(..., ge=0)
    reason: Optional[str] = None
    status: str = Field("pending", max_length=30)


class RefundUpdate(BaseUpdateSchema):
    amount: Optional[Decimal] = Field(None, ge=0)
    reason: Optional[str] = None
    status: Optional[str] = Field(None, max_length=30)


class RefundResponse(BaseResponseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    order_id: Optional[uuid.UUID] = None
    amount: Decimal
    reason: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime


class RefundListResponse(PaginatedResponse):
    items: List[RefundResponse]
