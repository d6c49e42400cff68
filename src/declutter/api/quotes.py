"""Quote API routes.

Anyone can submit a quote (POST /quotes works without a token); a
logged-in customer's quote is attached to their account. Reading is
ownership-scoped; status changes, conversion and deletion are staff-only.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import (
    CurrentUser,
    get_current_user,
    get_current_user_optional,
)
from declutter.db.engine import get_db
from declutter.schemas.common import DataResponse, StatusChange, SuccessResponse
from declutter.schemas.job import JobRead
from declutter.schemas.quote import QuoteConvert, QuoteCreate, QuoteRead, QuoteUpdate
from declutter.services.resources import QuoteRepository

router = APIRouter(prefix="/quotes")


def _repo(db: AsyncSession = Depends(get_db)) -> QuoteRepository:
    return QuoteRepository(db)


@router.get("", response_model=DataResponse[list[QuoteRead]])
async def list_quotes(
    status: Optional[str] = Query(None, description="Filter by status"),
    caller: CurrentUser = Depends(get_current_user),
    repo: QuoteRepository = Depends(_repo),
):
    """All quotes for staff; a customer's own quotes otherwise."""
    quotes = await repo.list(caller, status=status)
    return {"data": [QuoteRead.model_validate(q) for q in quotes]}


@router.post("", response_model=DataResponse[QuoteRead], status_code=201)
async def create_quote(
    body: QuoteCreate,
    caller: Optional[CurrentUser] = Depends(get_current_user_optional),
    repo: QuoteRepository = Depends(_repo),
):
    """Submit a quote request (anonymous or logged in). Starts as 'pending'."""
    quote = await repo.create(caller, body.model_dump())
    return {"data": QuoteRead.model_validate(quote)}


@router.get("/{quote_id}", response_model=DataResponse[QuoteRead])
async def get_quote(
    quote_id: int,
    caller: CurrentUser = Depends(get_current_user),
    repo: QuoteRepository = Depends(_repo),
):
    quote = await repo.get(caller, quote_id)
    return {"data": QuoteRead.model_validate(quote)}


@router.put("/{quote_id}", response_model=DataResponse[QuoteRead])
async def update_quote(
    quote_id: int,
    body: QuoteUpdate,
    caller: CurrentUser = Depends(get_current_user),
    repo: QuoteRepository = Depends(_repo),
):
    quote = await repo.update(caller, quote_id, body.model_dump(exclude_none=True))
    return {"data": QuoteRead.model_validate(quote)}


@router.patch("/{quote_id}/status", response_model=DataResponse[QuoteRead])
async def change_quote_status(
    quote_id: int,
    body: StatusChange,
    caller: CurrentUser = Depends(get_current_user),
    repo: QuoteRepository = Depends(_repo),
):
    """Set the quote status. Staff only; any valid status is accepted."""
    quote = await repo.update_status(caller, quote_id, body.status)
    return {"data": QuoteRead.model_validate(quote)}


@router.post("/{quote_id}/convert", response_model=DataResponse[JobRead], status_code=201)
async def convert_quote(
    quote_id: int,
    body: Optional[QuoteConvert] = None,
    caller: CurrentUser = Depends(get_current_user),
    repo: QuoteRepository = Depends(_repo),
):
    """Create a scheduled job from a quote and mark the quote completed."""
    overrides = body.model_dump(exclude_none=True) if body else {}
    job = await repo.convert_to_job(caller, quote_id, overrides)
    return {"data": JobRead.model_validate(job)}


@router.delete("/{quote_id}", response_model=SuccessResponse)
async def delete_quote(
    quote_id: int,
    caller: CurrentUser = Depends(get_current_user),
    repo: QuoteRepository = Depends(_repo),
):
    return await repo.delete(caller, quote_id)
