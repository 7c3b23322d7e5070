from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime, date
import uuid

from tradeon.models.shipment import ShipmentStage, SHIPMENT_STAGES
from tradeon.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema, PaginatedResponse


def _check_stage(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in SHIPMENT_STAGES:
        raise ValueError(f"Status must be one of: {', '.join(SHIPMENT_STAGES)}")
    return value


class StageUpdateRequest(BaseModel):
    """Admin stage change; index into the eight-stage pipeline."""
    stage_index: int


class TimelineStage(BaseModel):
    index: int
    name: str
    done: bool
    current: bool


class TimelineResponse(BaseModel):
    """Shipment progress for the order tracking view."""
    order_id: uuid.UUID
    current_stage: str
    current_index: int
    progress_percent: float
    stages: List[TimelineStage]
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    external_tracking_url: Optional[str] = None
    stage_notes: Optional[str] = None
    estimated_delivery: Optional[date] = None


class StageListResponse(BaseModel):
    stages: List[str]


class ShipmentCreate(BaseCreateSchema):
    order_id: Optional[uuid.UUID] = None
    user_id: uuid.UUID
    status: str = ShipmentStage.ORDERED.value
    tracking_number: Optional[str] = Field(None, max_length=100)
    carrier: Optional[str] = Field(None, max_length=100)
    external_tracking_url: Optional[str] = Field(None, max_length=1000)
    stage_notes: Optional[str] = None
    estimated_delivery: Optional[date] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return _check_stage(v)


class ShipmentUpdate(BaseUpdateSchema):
    status: Optional[str] = None
    tracking_number: Optional[str] = Field(None, max_length=100)
    carrier: Optional[str] = Field(None, max_length=100)
    external_tracking_url: Optional[str] = Field(None, max_length=1000)
    stage_notes: Optional[str] = None
    estimated_delivery: Optional[date] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        return _check_stage(v)


class ShipmentResponse(BaseResponseSchema):
    id: uuid.UUID
    order_id: Optional[uuid.UUID] = None
    user_id: uuid.UUID
    status: str
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    external_tracking_url: Optional[str] = None
    stage_notes: Optional[str] = None
    estimated_delivery: Optional[date] = None
    created_at: datetime
    updated_at: datetime


class ShipmentListResponse(PaginatedResponse):
    items: List[ShipmentResponse]
