"""Job API routes.

Customers see and edit their own jobs; staff see all of them and are
the only ones who create, delete or move a job's status.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import CurrentUser, get_current_user
from declutter.db.engine import get_db
from declutter.schemas.common import DataResponse, StatusChange, SuccessResponse
from declutter.schemas.job import JobCreate, JobRead, JobUpdate
from declutter.services.resources import JobRepository

router = APIRouter(prefix="/jobs")


def _repo(db: AsyncSession = Depends(get_db)) -> JobRepository:
    return JobRepository(db)


@router.get("", response_model=DataResponse[list[JobRead]])
async def list_jobs(
    status: Optional[str] = Query(None, description="Filter by status"),
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    assigned_employee_id: Optional[int] = Query(None, description="Filter by assignee"),
    caller: CurrentUser = Depends(get_current_user),
    repo: JobRepository = Depends(_repo),
):
    """List jobs. Customers only ever get their own."""
    jobs = await repo.list(
        caller,
        status=status,
        customer_id=customer_id,
        assigned_employee_id=assigned_employee_id,
    )
    return {"data": [JobRead.model_validate(j) for j in jobs]}


@router.post("", response_model=DataResponse[JobRead], status_code=201)
async def create_job(
    body: JobCreate,
    caller: CurrentUser = Depends(get_current_user),
    repo: JobRepository = Depends(_repo),
):
    """Create a job in 'scheduled' status. Staff only."""
    job = await repo.create(caller, body.model_dump())
    return {"data": JobRead.model_validate(job)}


@router.get("/{job_id}", response_model=DataResponse[JobRead])
async def get_job(
    job_id: int,
    caller: CurrentUser = Depends(get_current_user),
    repo: JobRepository = Depends(_repo),
):
    job = await repo.get(caller, job_id)
    return {"data": JobRead.model_validate(job)}


@router.put("/{job_id}", response_model=DataResponse[JobRead])
async def update_job(
    job_id: int,
    body: JobUpdate,
    caller: CurrentUser = Depends(get_current_user),
    repo: JobRepository = Depends(_repo),
):
    job = await repo.update(caller, job_id, body.model_dump(exclude_none=True))
    return {"data": JobRead.model_validate(job)}


@router.patch("/{job_id}/status", response_model=DataResponse[JobRead])
async def change_job_status(
    job_id: int,
    body: StatusChange,
    caller: CurrentUser = Depends(get_current_user),
    repo: JobRepository = Depends(_repo),
):
    """Set the job status. An unknown value is a 400 and nothing changes."""
    job = await repo.update_status(caller, job_id, body.status)
    return {"data": JobRead.model_validate(job)}


@router.delete("/{job_id}", response_model=SuccessResponse)
async def delete_job(
    job_id: int,
    caller: CurrentUser = Depends(get_current_user),
    repo: JobRepository = Depends(_repo),
):
    return await repo.delete(caller, job_id)
