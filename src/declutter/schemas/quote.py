"""Pydantic schemas for quote requests.

Create/update fields are all optional at the schema level; required
fields are enforced by QuoteRepository so the error names the field.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class QuoteCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    service_type: Optional[str] = None
    property_size: Optional[str] = None
    timeline: Optional[str] = None
    budget_range: Optional[str] = None
    additional_info: Optional[str] = None


class QuoteUpdate(QuoteCreate):
    """Partial update — only non-None, whitelisted fields are applied."""


class QuoteRead(BaseModel):
    id: int
    customer_id: Optional[int]
    name: str
    email: str
    phone: Optional[str]
    address: str
    city: str
    state: str
    zip_code: str
    service_type: Optional[str]
    property_size: Optional[str]
    timeline: Optional[str]
    budget_range: Optional[str]
    additional_info: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class QuoteConvert(BaseModel):
    """Optional overrides when turning a quote into a job."""
    title: Optional[str] = None
    description: Optional[str] = None
    property_id: Optional[int] = None
    assigned_employee_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    estimated_cost: Optional[float] = None
    notes: Optional[str] = None
