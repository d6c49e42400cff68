"""Pydantic schemas for users, customers, employees and auth payloads."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class UserRead(BaseModel):
    """Public view of a user — never includes the password hash."""
    id: int
    email: str
    name: str
    phone: Optional[str]
    role: str
    profile_picture: Optional[str]
    cookie_consent: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ─── Auth ────────────────────────────────────────────────
# Fields are optional so missing values reach the service and get the
# portal's own 400 messages instead of a generic schema error.

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    cookieConsent: Optional[str] = None


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserRead


class VerifyResponse(BaseModel):
    success: bool = True
    user: UserRead


# ─── Customers / employees ──────────────────────────────

class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    profile_picture: Optional[str] = None
    cookie_consent: Optional[str] = None
    password: Optional[str] = None


class EmployeeCreate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None


class RoleChange(BaseModel):
    role: str = ""
