"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

BookingStatus = Literal[
    "pending", "confirmed", "in_progress", "completed", "cancelled", "no_show", "refunded",
]


class BookingCreate(BaseModel):
    activity_id: int
    booking_date: date
    participants_total: int = Field(..., gt=0, le=1000)
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    special_requests: Optional[str] = Field(None, max_length=1000)
    waiver_signed: bool = False


class BookingResponse(BaseModel):
    id: int
    reference: str
    user_id: int
    activity_id: int
    vendor_id: int
    booking_date: date
    start_time: Optional[str]
    end_time: Optional[str]
    participants_total: int
    status: str
    payment_status: str
    activity_title: str
    activity_category: str
    vendor_name: str
    user_name: str
    base_price: float
    price_type: str
    currency: str
    total_price: float
    contact_email: str
    contact_phone: Optional[str]
    special_requests: Optional[str]
    waiver_signed: bool
    cancelled_at: Optional[datetime]
    cancellation_reason: Optional[str]
    refund_amount: Optional[float]
    review_rating: Optional[int]
    review_comment: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class BookingCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class BookingCancelResponse(BaseModel):
    message: str
    booking_id: int
    status: str
    refund_amount: float


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    notes: Optional[str] = Field(None, max_length=1000)


class BookingReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)
