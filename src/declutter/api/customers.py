"""Customer account routes.

Staff list customers; a customer may read and edit only their own
account; only managers delete accounts.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import CurrentUser, get_current_user
from declutter.db.engine import get_db
from declutter.schemas.common import DataResponse, SuccessResponse
from declutter.schemas.user import CustomerUpdate, UserRead
from declutter.services.resources import CustomerRepository

router = APIRouter(prefix="/customers")


def _repo(db: AsyncSession = Depends(get_db)) -> CustomerRepository:
    return CustomerRepository(db)


@router.get("", response_model=DataResponse[list[UserRead]])
async def list_customers(
    caller: CurrentUser = Depends(get_current_user),
    repo: CustomerRepository = Depends(_repo),
):
    customers = await repo.list(caller)
    return {"data": [UserRead.model_validate(c) for c in customers]}


@router.get("/{customer_id}", response_model=DataResponse[UserRead])
async def get_customer(
    customer_id: int,
    caller: CurrentUser = Depends(get_current_user),
    repo: CustomerRepository = Depends(_repo),
):
    customer = await repo.get(caller, customer_id)
    return {"data": UserRead.model_validate(customer)}


@router.put("/{customer_id}", response_model=DataResponse[UserRead])
async def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    caller: CurrentUser = Depends(get_current_user),
    repo: CustomerRepository = Depends(_repo),
):
    """Update profile fields; a non-empty `password` is re-hashed."""
    customer = await repo.update(caller, customer_id, body.model_dump(exclude_none=True))
    return {"data": UserRead.model_validate(customer)}


@router.delete("/{customer_id}", response_model=SuccessResponse)
async def delete_customer(
    customer_id: int,
    caller: CurrentUser = Depends(get_current_user),
    repo: CustomerRepository = Depends(_repo),
):
    return await repo.delete(caller, customer_id)
