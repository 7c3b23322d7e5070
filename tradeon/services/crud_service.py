"""Generic list/get/create/update/delete over one ORM model."""
import uuid
import logging
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import select, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from tradeon.database import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def _plain(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in values.items()}


class CrudService(Generic[ModelT]):
    """
    Back-office table access.

    `search_fields` names the text columns matched case-insensitively by
    the `search` filter.
    """

    def __init__(self, db: AsyncSession, model: Type[ModelT], search_fields: Sequence[str] = ()):
        self.db = db
        self.model = model
        self.search_fields = tuple(search_fields)

    def _filters(self, search: Optional[str], user_id: Optional[uuid.UUID]) -> list:
        filters = []
        if user_id is not None and hasattr(self.model, "user_id"):
            filters.append(self.model.user_id == user_id)
        if search and self.search_fields:
            pattern = f"%{search}%"
            filters.append(or_(*(getattr(self.model, f).ilike(pattern) for f in self.search_fields)))
        return filters

    async def list(
        self,
        search: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[ModelT], int]:
        filters = self._filters(search, user_id)

        count_stmt = select(func.count()).select_from(self.model)
        stmt = select(self.model)
        if filters:
            count_stmt = count_stmt.where(and_(*filters))
            stmt = stmt.where(and_(*filters))
        total = (await self.db.execute(count_stmt)).scalar() or 0

        if hasattr(self.model, "created_at"):
            stmt = stmt.order_by(self.model.created_at.desc())
        result = await self.db.execute(stmt.offset(skip).limit(limit))
        return list(result.scalars().all()), total

    async def get(self, obj_id: uuid.UUID) -> Optional[ModelT]:
        return await self.db.get(self.model, obj_id)

    async def create(self, data: Dict[str, Any]) -> ModelT:
        obj = self.model(**_plain(data))
        self.db.add(obj)
        await self.db.commit()
        await self.db.refresh(obj)
        logger.info(f"Created {self.model.__tablename__} row {obj.id}")
        return obj

    async def update(self, obj: ModelT, updates: Dict[str, Any]) -> ModelT:
        for field, value in _plain(updates).items():
            setattr(obj, field, value)
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelT) -> None:
        await self.db.delete(obj)
        await self.db.commit()
        logger.info(f"Deleted {self.model.__tablename__} row {obj.id}")
