"""Dashboard counters — one small payload per role.

These are plain COUNT(*) projections; the shape differs by role because
each portal's home screen shows different tiles.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import CurrentUser
from declutter.db.models import (
    ROLE_CUSTOMER,
    ROLE_EMPLOYEE,
    ROLE_MANAGER,
    Job,
    Property,
    Quote,
    User,
)


class DashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *conditions) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(model).where(*conditions)
        )
        return int(result.scalar_one())

    async def stats(self, caller: CurrentUser) -> dict[str, int]:
        if caller.role == ROLE_CUSTOMER:
            return {
                "quotes": await self._count(Quote, Quote.customer_id == caller.id),
                "jobs": await self._count(Job, Job.customer_id == caller.id),
                "properties": await self._count(
                    Property, Property.customer_id == caller.id
                ),
                "active_jobs": await self._count(
                    Job, Job.customer_id == caller.id, Job.status == "in_progress"
                ),
            }

        if caller.role == ROLE_EMPLOYEE:
            return {
                "pending_quotes": await self._count(Quote, Quote.status == "pending"),
                "my_jobs": await self._count(
                    Job, Job.assigned_employee_id == caller.id
                ),
                "active_jobs": await self._count(
                    Job,
                    Job.assigned_employee_id == caller.id,
                    Job.status == "in_progress",
                ),
                "customers": await self._count(User, User.role == ROLE_CUSTOMER),
            }

        return {
            "total_quotes": await self._count(Quote),
            "pending_quotes": await self._count(Quote, Quote.status == "pending"),
            "total_jobs": await self._count(Job),
            "active_jobs": await self._count(Job, Job.status == "in_progress"),
            "customers": await self._count(User, User.role == ROLE_CUSTOMER),
            "employees": await self._count(User, User.role == ROLE_EMPLOYEE),
            "managers": await self._count(User, User.role == ROLE_MANAGER),
        }
