from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

from tradeon.models.customer import AppRole
from tradeon.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema, PaginatedResponse


# ==================== PROFILE SCHEMAS ====================

class ProfileCreate(BaseCreateSchema):
    user_id: uuid.UUID
    full_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    avatar_url: Optional[str] = Field(None, max_length=1000)


class ProfileUpdate(BaseUpdateSchema):
    full_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    avatar_url: Optional[str] = Field(None, max_length=1000)


class ProfileResponse(BaseResponseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProfileListResponse(PaginatedResponse):
    items: List[ProfileResponse]


# ==================== ROLE SCHEMAS ====================

class UserRoleCreate(BaseCreateSchema):
    user_id: uuid.UUID
    role: AppRole = AppRole.USER


class UserRoleUpdate(BaseUpdateSchema):
    role: Optional[AppRole] = None


class UserRoleResponse(BaseResponseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    role: str


class UserRoleListResponse(PaginatedResponse):
    items: List[UserRoleResponse]


# ==================== CUSTOMER AGGREGATE ====================

class CustomerSummary(BaseModel):
    """Back-office customer row: profile plus order and wallet figures."""
    id: uuid.UUID
    user_id: uuid.UUID
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    order_count: int = 0
    total_spent: Decimal = Decimal("0")
    wallet_balance: Decimal = Decimal("0")


class CustomerListResponse(PaginatedResponse):
    items: List[CustomerSummary]
