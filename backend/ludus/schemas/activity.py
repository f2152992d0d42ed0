"""
Pydantic schemas for activity-related request/response validation.
"""

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

Category = Literal["fitness", "arts", "food", "outdoor", "unique", "wellness"]
ActivityStatus = Literal["draft", "active", "suspended", "archived"]
PriceType = Literal["per_person", "per_group"]
Difficulty = Literal["beginner", "intermediate", "advanced", "all_levels"]


class ActivityCreate(BaseModel):
    vendor_id: int
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    short_description: str = Field(..., min_length=1, max_length=300)
    category: Category
    city: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    base_price: float = Field(..., ge=0)
    price_type: PriceType = "per_person"
    duration_minutes: Optional[int] = Field(None, gt=0, le=24 * 60)
    difficulty: Difficulty = "beginner"
    min_participants: int = Field(1, ge=1)
    max_participants: int = Field(..., ge=1, le=10000)

    @model_validator(mode="after")
    def check_capacity_range(self):
        if self.min_participants > self.max_participants:
            raise ValueError("min_participants cannot exceed max_participants")
        return self


class ActivityUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    short_description: Optional[str] = Field(None, min_length=1, max_length=300)
    category: Optional[Category] = None
    city: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    base_price: Optional[float] = Field(None, ge=0)
    price_type: Optional[PriceType] = None
    duration_minutes: Optional[int] = Field(None, gt=0, le=24 * 60)
    difficulty: Optional[Difficulty] = None
    min_participants: Optional[int] = Field(None, ge=1)
    max_participants: Optional[int] = Field(None, ge=1, le=10000)
    is_active: Optional[bool] = None
    status: Optional[ActivityStatus] = None

    @field_validator(
        "title", "description", "short_description", "category", "base_price", "price_type",
        "difficulty", "min_participants", "max_participants", "is_active", "status",
    )
    @classmethod
    def reject_null(cls, value):
        # Omit a field to leave it unchanged; these columns cannot be cleared
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ActivityResponse(BaseModel):
    id: int
    vendor_id: int
    title: str
    slug: str
    description: str
    short_description: str
    category: str
    city: Optional[str]
    address: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    base_price: float
    currency: str
    price_type: str
    duration_minutes: Optional[int]
    difficulty: str
    min_participants: int
    max_participants: int
    is_active: bool
    status: str
    rating_average: float
    rating_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class ActivityListResponse(BaseModel):
    activities: list[ActivityResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False


class AvailabilityResponse(BaseModel):
    activity_id: int
    date: date
    start_time: Optional[str] = None
    granularity: str
    capacity: int
    booked: int
    remaining: int
