from fastapi import APIRouter

from tradeon.api.v1.crud import build_crud_router
from tradeon.models.shipment import Shipment, SHIPMENT_STAGES
from tradeon.schemas.shipment import (
    ShipmentCreate,
    ShipmentUpdate,
    ShipmentResponse,
    ShipmentListResponse,
    StageListResponse,
)

router = APIRouter(tags=["Shipments"])


@router.get("/stages", response_model=StageListResponse)
async def list_stages():
    """The shipment pipeline, in order."""
    return StageListResponse(stages=list(SHIPMENT_STAGES))


# Admin CRUD, mounted after `router` so the literal /stages path wins
admin_router = build_crud_router(
    model=Shipment,
    create_schema=ShipmentCreate,
    update_schema=ShipmentUpdate,
    response_schema=ShipmentResponse,
    list_schema=ShipmentListResponse,
    search_fields=("tracking_number", "carrier", "status"),
    label="Shipment",
)
