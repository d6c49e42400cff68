"""Staff management routes (managers only).

PUT /employees/:id/role is the only way a role ever changes. It refuses
to demote the last remaining manager.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import CurrentUser, require_roles
from declutter.db.engine import get_db
from declutter.db.models import ROLE_MANAGER
from declutter.schemas.common import DataResponse
from declutter.schemas.user import EmployeeCreate, RoleChange, UserRead
from declutter.services.resources import EmployeeRepository

router = APIRouter(prefix="/employees")

_manager = require_roles(ROLE_MANAGER)


def _repo(db: AsyncSession = Depends(get_db)) -> EmployeeRepository:
    return EmployeeRepository(db)


@router.get("", response_model=DataResponse[list[UserRead]])
async def list_employees(
    role: Optional[str] = Query(None, description="employee or manager"),
    caller: CurrentUser = Depends(_manager),
    repo: EmployeeRepository = Depends(_repo),
):
    """List staff accounts (employees and managers)."""
    staff = await repo.list(caller, role=role)
    return {"data": [UserRead.model_validate(u) for u in staff]}


@router.post("", response_model=DataResponse[UserRead], status_code=201)
async def create_employee(
    body: EmployeeCreate,
    caller: CurrentUser = Depends(_manager),
    repo: EmployeeRepository = Depends(_repo),
):
    user = await repo.create(caller, body.model_dump())
    return {"data": UserRead.model_validate(user)}


@router.get("/{user_id}", response_model=DataResponse[UserRead])
async def get_employee(
    user_id: int,
    caller: CurrentUser = Depends(_manager),
    repo: EmployeeRepository = Depends(_repo),
):
    user = await repo.get(caller, user_id)
    return {"data": UserRead.model_validate(user)}


@router.put("/{user_id}/role", response_model=DataResponse[UserRead])
async def change_role(
    user_id: int,
    body: RoleChange,
    caller: CurrentUser = Depends(_manager),
    repo: EmployeeRepository = Depends(_repo),
):
    """Change any user's role (customer, employee or manager)."""
    user = await repo.set_role(caller, user_id, body.role)
    return {"data": UserRead.model_validate(user)}
