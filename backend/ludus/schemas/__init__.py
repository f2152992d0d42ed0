from ludus.schemas.user import UserCreate, UserResponse, UserLogin, Token
from ludus.schemas.vendor import VendorCreate, VendorResponse, VendorStatusUpdate
from ludus.schemas.activity import (
    ActivityCreate, ActivityUpdate, ActivityResponse, ActivityListResponse, AvailabilityResponse,
)
from ludus.schemas.booking import (
    BookingCreate, BookingResponse, BookingListResponse, BookingCancelRequest,
    BookingCancelResponse, BookingStatusUpdate, BookingReviewCreate,
)

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token",
    "VendorCreate", "VendorResponse", "VendorStatusUpdate",
    "ActivityCreate", "ActivityUpdate", "ActivityResponse", "ActivityListResponse",
    "AvailabilityResponse",
    "BookingCreate", "BookingResponse", "BookingListResponse", "BookingCancelRequest",
    "BookingCancelResponse", "BookingStatusUpdate", "BookingReviewCreate",
]
