"""
Pydantic schemas for vendor profiles.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class VendorCreate(BaseModel):
    business_name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    contact_email: EmailStr
    contact_phone: str = Field(..., min_length=5, max_length=30)
    city: str = Field(..., min_length=1, max_length=100)


class VendorStatusUpdate(BaseModel):
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None


class VendorResponse(BaseModel):
    id: int
    owner_id: int
    business_name: str
    slug: str
    description: str
    contact_email: str
    contact_phone: str
    city: str
    is_active: bool
    is_verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}
