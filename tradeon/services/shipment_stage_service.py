"""Shipment stage engine.

Keeps a shipment's position in the fixed eight-stage pipeline and the parent
order's coarse status in step with it:

    Ordered -> Purchased from 1688 -> Shipped to Warehouse -> Arrived at Warehouse
    -> Shipped to Bangladesh -> In Customs -> Out for Delivery -> Delivered

Any stage may be set from any other (admins can move backward). The shipment
write and the order status write are committed together.
"""
import uuid
import logging
from typing import Optional, Dict, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradeon.models.order import Order, OrderStatus
from tradeon.models.shipment import Shipment, ShipmentStage, SHIPMENT_STAGES


logger = logging.getLogger(__name__)


class ShipmentStageError(Exception):
    """Raised when a stage change could not be persisted."""
    pass


class InvalidStageError(ShipmentStageError):
    """Raised for a stage index outside the pipeline."""
    pass


def current_stage_index(shipment: Optional[Shipment]) -> int:
    """Position of the shipment's status in the pipeline; 0 when unknown."""
    if shipment is None:
        return 0
    try:
        return SHIPMENT_STAGES.index(shipment.status)
    except ValueError:
        return 0


def progress_percent(stage_index: int) -> float:
    return stage_index / (len(SHIPMENT_STAGES) - 1) * 100


def order_status_for_stage(stage: str) -> str:
    """Map a fine-grained stage onto the coarse order status."""
    if stage == ShipmentStage.DELIVERED.value:
        return OrderStatus.DELIVERED.value
    if stage == ShipmentStage.ORDERED.value:
        return OrderStatus.PENDING.value
    return OrderStatus.PROCESSING.value


def validate_stage_index(stage_index: int) -> str:
    if not 0 <= stage_index < len(SHIPMENT_STAGES):
        raise InvalidStageError(
            f"Stage index must be between 0 and {len(SHIPMENT_STAGES) - 1}, got {stage_index}"
        )
    return SHIPMENT_STAGES[stage_index]


def build_timeline(shipment: Optional[Shipment]) -> Dict[str, Any]:
    """Progress view of a shipment for the tracking UI."""
    active = current_stage_index(shipment)
    return {
        "current_stage": SHIPMENT_STAGES[active],
        "current_index": active,
        "progress_percent": progress_percent(active),
        "stages": [
            {
                "index": i,
                "name": name,
                "done": i <= active,
                "current": i == active,
            }
            for i, name in enumerate(SHIPMENT_STAGES)
        ],
    }


class ShipmentStageService:
    """Service applying stage changes to shipments and their orders."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def timeline(self, shipment: Optional[Shipment]) -> Dict[str, Any]:
        return build_timeline(shipment)

    async def set_stage(
        self,
        order_id: uuid.UUID,
        user_id: uuid.UUID,
        shipment: Optional[Shipment],
        stage_index: int,
    ) -> Shipment:
        """
        Set the shipment stage for an order and sync the order status.

        Creates the shipment row when the order has none yet. Both rows are
        written in one transaction; on failure neither change is kept.

        Raises:
            InvalidStageError: stage_index outside [0, 7]
            ShipmentStageError: order missing or database write failed
        """
        new_stage = validate_stage_index(stage_index)
        order_status = order_status_for_stage(new_stage)

        try:
            order = await self.db.get(Order, order_id)
            if order is None:
                raise ShipmentStageError(f"Order {order_id} not found")

            if shipment is None:
                shipment = Shipment(order_id=order_id, user_id=user_id, status=new_stage)
                self.db.add(shipment)
            else:
                shipment.status = new_stage

            order.status = order_status
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Stage update failed for order {order_id}: {e}")
            raise ShipmentStageError(f"Could not update stage: {e}") from e
        except ShipmentStageError:
            await self.db.rollback()
            raise

        await self.db.refresh(shipment)
        logger.info(f"Order {order_id} moved to stage '{new_stage}' (order status '{order_status}')")
        return shipment
