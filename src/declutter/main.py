"""FastAPI application factory.

create_app() returns a configured FastAPI instance. Lifespan manages
startup/shutdown (Redis, token reaper, database engine). Middleware,
CORS, error envelopes and routers are all registered here.
"""

import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from declutter import __version__
from declutter.api import api_router
from declutter.config import settings
from declutter.errors import PortalError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "declutter.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from declutter.cache import close_redis, init_redis
    try:
        await init_redis()
        logger.info("declutter.redis_connected", url=settings.redis_url)
    except Exception as e:
        logger.warning("declutter.redis_unavailable", error=str(e))
        # Redis is optional; without it requests are not rate limited

    reaper = reaper_task = None
    if settings.token_reap_interval_seconds > 0:
        from declutter.services.token_reaper import TokenReaper
        reaper = TokenReaper(interval=settings.token_reap_interval_seconds)
        reaper_task = asyncio.create_task(reaper.run_loop())

    yield

    logger.info("declutter.shutdown")

    if reaper is not None:
        reaper.stop()
        reaper_task.cancel()
        try:
            await reaper_task
        except asyncio.CancelledError:
            pass

    await close_redis()

    from declutter.db.engine import engine
    await engine.dispose()


# ─── Error envelopes ─────────────────────────────────────
# Every failure leaves the API as {"error": "<message>"}.


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = "Unauthorized" if exc.status_code == 401 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("declutter.unhandled_error", path=request.url.path)
    message = f"Server error: {exc}" if settings.debug else "Internal server error"
    return JSONResponse(status_code=500, content={"error": message})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Declutter Portal API",
        description="Quotes, jobs, properties and staff management for a home-services business",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from declutter.middleware.rate_limit import RateLimitMiddleware
    from declutter.middleware.request_id import RequestIdMiddleware
    from declutter.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: declutter.main:app)
app = create_app()
