"""Auth API — portal logins, registration, token verification, logout.

- POST /auth/{customer,employee,manager}/login → token + user
- POST /auth/customer/register → new customer, logged in
- POST /auth/manager/register → new manager (can be disabled)
- GET  /auth/verify → the user behind the bearer token
- POST /auth/logout → revoke the bearer token (always succeeds)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import CurrentUser, get_current_user, parse_bearer
from declutter.config import settings
from declutter.db.engine import get_db
from declutter.db.models import ROLE_CUSTOMER, ROLE_EMPLOYEE, ROLE_MANAGER
from declutter.errors import AuthorizationError
from declutter.schemas.common import SuccessResponse
from declutter.schemas.user import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserRead,
    VerifyResponse,
)
from declutter.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


def _svc(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def _login(body: LoginRequest, role: str, svc: AuthService) -> AuthResponse:
    token, user = await svc.login(body.email, body.password, role)
    return AuthResponse(token=token, user=UserRead.model_validate(user))


# ─── Login ───────────────────────────────────────────────


@router.post("/customer/login", response_model=AuthResponse)
async def customer_login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    return await _login(body, ROLE_CUSTOMER, svc)


@router.post("/employee/login", response_model=AuthResponse)
async def employee_login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    return await _login(body, ROLE_EMPLOYEE, svc)


@router.post("/manager/login", response_model=AuthResponse)
async def manager_login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    return await _login(body, ROLE_MANAGER, svc)


# ─── Register ────────────────────────────────────────────


@router.post("/customer/register", response_model=AuthResponse, status_code=201)
async def register_customer(body: RegisterRequest, svc: AuthService = Depends(_svc)):
    """Create a customer account and return a token for it."""
    token, user = await svc.register(
        email=body.email,
        password=body.password,
        name=body.name,
        phone=body.phone,
        cookie_consent=body.cookieConsent,
        role=ROLE_CUSTOMER,
    )
    return AuthResponse(token=token, user=UserRead.model_validate(user))


@router.post("/manager/register", response_model=AuthResponse, status_code=201)
async def register_manager(body: RegisterRequest, svc: AuthService = Depends(_svc)):
    """Create a manager account. Turned off with DECLUTTER_MANAGER_REGISTRATION_ENABLED=false."""
    if not settings.manager_registration_enabled:
        raise AuthorizationError("Manager registration is disabled")
    token, user = await svc.register(
        email=body.email,
        password=body.password,
        name=body.name,
        phone=body.phone,
        role=ROLE_MANAGER,
    )
    return AuthResponse(token=token, user=UserRead.model_validate(user))


# ─── Session ─────────────────────────────────────────────


@router.get("/verify", response_model=VerifyResponse)
async def verify(
    caller: CurrentUser = Depends(get_current_user),
    svc: AuthService = Depends(_svc),
):
    """Return the user behind the bearer token (401 if none/expired)."""
    user = await svc.get_user(caller.id)
    return VerifyResponse(user=UserRead.model_validate(user))


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    authorization: Optional[str] = Header(None),
    svc: AuthService = Depends(_svc),
):
    """Revoke the presented token. Idempotent — unknown tokens are fine."""
    await svc.logout(parse_bearer(authorization))
    return SuccessResponse(message="Logged out successfully")
