"""Dashboard counters for the logged-in user's portal."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import CurrentUser, get_current_user
from declutter.db.engine import get_db
from declutter.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard")


@router.get("/stats")
async def dashboard_stats(
    caller: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Role-specific counts; the keys differ per role."""
    return {"data": await DashboardService(db).stats(caller)}
