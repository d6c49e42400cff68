"""Pydantic schemas for customer properties."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class PropertyCreate(BaseModel):
    customer_id: Optional[int] = None  # customers may omit it (defaults to self)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    property_type: Optional[str] = None
    square_feet: Optional[int] = None
    notes: Optional[str] = None


class PropertyUpdate(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    property_type: Optional[str] = None
    square_feet: Optional[int] = None
    notes: Optional[str] = None


class PropertyRead(BaseModel):
    id: int
    customer_id: int
    address: str
    city: str
    state: str
    zip_code: str
    property_type: Optional[str]
    square_feet: Optional[int]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
