"""
Admin CRUD router factory.

Builds list/get/create/update/delete endpoints for one table. All routes
require the admin role.

Usage:
    router = build_crud_router(
        model=Refund,
        create_schema=RefundCreate,
        update_schema=RefundUpdate,
        response_schema=RefundResponse,
        list_schema=RefundListResponse,
        search_fields=("reason", "status"),
        label="Refund",
    )
"""
from typing import Optional, Sequence, Type
import uuid
from math import ceil

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from tradeon.api.deps import DB, require_admin
from tradeon.database import Base
from tradeon.services.crud_service import CrudService


def build_crud_router(
    *,
    model: Type[Base],
    response_schema: Type[BaseModel],
    list_schema: Type[BaseModel],
    update_schema: Optional[Type[BaseModel]] = None,
    create_schema: Optional[Type[BaseModel]] = None,
    search_fields: Sequence[str] = (),
    label: str,
) -> APIRouter:
    """
    Create the admin router.

    Omit `create_schema` to register creation elsewhere; omit `update_schema`
    to register edits and deletion elsewhere.
    """
    router = APIRouter(dependencies=[Depends(require_admin)])

    def not_found() -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found"
        )

    @router.get("", response_model=list_schema)
    async def list_rows(
        db: DB,
        page: int = Query(1, ge=1),
        size: int = Query(20, ge=1, le=100),
        search: Optional[str] = Query(None),
        user_id: Optional[uuid.UUID] = Query(None),
    ):
        service = CrudService(db, model, search_fields)
        rows, total = await service.list(search=search, user_id=user_id, skip=(page - 1) * size, limit=size)
        return list_schema(
            items=[response_schema.model_validate(r) for r in rows],
            total=total,
            page=page,
            size=size,
            pages=ceil(total / size) if total > 0 else 1,
        )

    @router.get("/{obj_id}", response_model=response_schema)
    async def get_row(obj_id: uuid.UUID, db: DB):
        obj = await CrudService(db, model).get(obj_id)
        if not obj:
            raise not_found()
        return response_schema.model_validate(obj)

    if create_schema is not None:
        @router.post("", response_model=response_schema, status_code=status.HTTP_201_CREATED)
        async def create_row(data: create_schema, db: DB):  # type: ignore[valid-type]
            try:
                obj = await CrudService(db, model).create(data.model_dump())
            except IntegrityError:
                await db.rollback()
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"{label} already exists"
                )
            return response_schema.model_validate(obj)

    if update_schema is not None:
        @router.put("/{obj_id}", response_model=response_schema)
        async def update_row(obj_id: uuid.UUID, data: update_schema, db: DB):  # type: ignore[valid-type]
            service = CrudService(db, model)
            obj = await service.get(obj_id)
            if not obj:
                raise not_found()
            obj = await service.update(obj, data.model_dump(exclude_unset=True))
            return response_schema.model_validate(obj)

        @router.delete("/{obj_id}", status_code=status.HTTP_204_NO_CONTENT)
        async def delete_row(obj_id: uuid.UUID, db: DB):
            service = CrudService(db, model)
            obj = await service.get(obj_id)
            if not obj:
                raise not_found()
            await service.delete(obj)

    return router
