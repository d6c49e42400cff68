"""API route aggregation.

All routers registered here get mounted in main.py.

Auth is applied per route rather than per router: most handlers need the
CurrentUser itself (for ownership scoping), and POST /quotes must also
accept anonymous callers.
"""

from fastapi import APIRouter

from declutter.api.auth import router as auth_router
from declutter.api.customers import router as customers_router
from declutter.api.dashboard import router as dashboard_router
from declutter.api.employees import router as employees_router
from declutter.api.health import router as health_router
from declutter.api.jobs import router as jobs_router
from declutter.api.properties import router as properties_router
from declutter.api.quotes import router as quotes_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(quotes_router, tags=["quotes"])
api_router.include_router(jobs_router, tags=["jobs"])
api_router.include_router(properties_router, tags=["properties"])
api_router.include_router(customers_router, tags=["customers"])
api_router.include_router(employees_router, tags=["employees"])
api_router.include_router(dashboard_router, tags=["dashboard"])
