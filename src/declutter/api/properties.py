"""Property API routes — ownership-scoped CRUD."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import CurrentUser, get_current_user
from declutter.db.engine import get_db
from declutter.schemas.common import DataResponse, SuccessResponse
from declutter.schemas.property import PropertyCreate, PropertyRead, PropertyUpdate
from declutter.services.resources import PropertyRepository

router = APIRouter(prefix="/properties")


def _repo(db: AsyncSession = Depends(get_db)) -> PropertyRepository:
    return PropertyRepository(db)


@router.get("", response_model=DataResponse[list[PropertyRead]])
async def list_properties(
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    caller: CurrentUser = Depends(get_current_user),
    repo: PropertyRepository = Depends(_repo),
):
    properties = await repo.list(caller, customer_id=customer_id)
    return {"data": [PropertyRead.model_validate(p) for p in properties]}


@router.post("", response_model=DataResponse[PropertyRead], status_code=201)
async def create_property(
    body: PropertyCreate,
    caller: CurrentUser = Depends(get_current_user),
    repo: PropertyRepository = Depends(_repo),
):
    """Add a property. Customers can only add properties to their own account."""
    prop = await repo.create(caller, body.model_dump())
    return {"data": PropertyRead.model_validate(prop)}


@router.get("/{property_id}", response_model=DataResponse[PropertyRead])
async def get_property(
    property_id: int,
    caller: CurrentUser = Depends(get_current_user),
    repo: PropertyRepository = Depends(_repo),
):
    prop = await repo.get(caller, property_id)
    return {"data": PropertyRead.model_validate(prop)}


@router.put("/{property_id}", response_model=DataResponse[PropertyRead])
async def update_property(
    property_id: int,
    body: PropertyUpdate,
    caller: CurrentUser = Depends(get_current_user),
    repo: PropertyRepository = Depends(_repo),
):
    prop = await repo.update(caller, property_id, body.model_dump(exclude_none=True))
    return {"data": PropertyRead.model_validate(prop)}


@router.delete("/{property_id}", response_model=SuccessResponse)
async def delete_property(
    property_id: int,
    caller: CurrentUser = Depends(get_current_user),
    repo: PropertyRepository = Depends(_repo),
):
    return await repo.delete(caller, property_id)
