"""Pydantic schemas for jobs."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class JobCreate(BaseModel):
    quote_id: Optional[int] = None
    customer_id: Optional[int] = None
    property_id: Optional[int] = None
    assigned_employee_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    estimated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
    notes: Optional[str] = None


class JobUpdate(BaseModel):
    """Partial update — only non-None, whitelisted fields are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    estimated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
    notes: Optional[str] = None
    assigned_employee_id: Optional[int] = None
    property_id: Optional[int] = None


class JobRead(BaseModel):
    id: int
    quote_id: Optional[int]
    customer_id: int
    property_id: Optional[int]
    assigned_employee_id: Optional[int]
    title: str
    description: Optional[str]
    address: str
    city: str
    state: str
    zip_code: str
    start_date: Optional[date]
    end_date: Optional[date]
    estimated_cost: Optional[float]
    actual_cost: Optional[float]
    status: str
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
