from pydantic import Field
from typing import Optional, List
from datetime import datetime
import uuid

from tradeon.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema, PaginatedResponse


class NotificationCreate(BaseCreateSchema):
    user_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: str = Field("info", max_length=30)
    is_read: bool = False


class NotificationUpdate(BaseUpdateSchema):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    message: Optional[str] = None
    type: Optional[str] = Field(None, max_length=30)
    is_read: Optional[bool] = None


class NotificationResponse(BaseResponseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    message: str
    type: str
    is_read: bool
    created_at: datetime


class NotificationListResponse(PaginatedResponse):
    items: List[NotificationResponse]
