"""
Booking endpoints with capacity-safe admission.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ludus.db.session import get_db
from ludus.models.user import User
from ludus.schemas.booking import (
    BookingCancelRequest,
    BookingCancelResponse,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingReviewCreate,
    BookingStatus,
    BookingStatusUpdate,
)
from ludus.services.booking_service import (
    add_booking_review,
    cancel_booking,
    create_booking,
    get_booking,
    get_user_bookings,
    update_booking_status,
)
from ludus.services.cache_service import invalidate_activity_cache
from ludus.core.security import get_current_user, get_current_user_id

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Book an activity for a date.

    Admission is serialized per activity/date, so concurrent requests can
    never push a date past the activity's capacity. Returns 400 when the
    remaining capacity is too small and 404 for inactive activities.
    """
    return await create_booking(db, user_id, booking_data)


@router.get("/", response_model=BookingListResponse)
async def list_user_bookings(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get the authenticated user's bookings, newest first."""
    bookings, total = await get_user_bookings(db, user_id, page, page_size, status_filter)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking_endpoint(
    booking_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await get_booking(db, booking_id, user_id)


@router.put("/{booking_id}/cancel", response_model=BookingCancelResponse)
async def cancel_booking_endpoint(
    booking_id: int,
    cancel_data: Optional[BookingCancelRequest] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a booking; its participants go back to the date's capacity."""
    reason = cancel_data.reason if cancel_data else None
    booking = await cancel_booking(db, booking_id, user_id, reason)
    message = "Booking cancelled successfully"
    if booking.refund_amount:
        message += f". Refund of {booking.refund_amount} {booking.currency} will be processed."
    return BookingCancelResponse(
        message=message,
        booking_id=booking.id,
        status=booking.status,
        refund_amount=booking.refund_amount or 0.0,
    )


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status_endpoint(
    booking_id: int,
    update: BookingStatusUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Move a booking through its lifecycle. Vendor owner or admin."""
    return await update_booking_status(db, booking_id, user, update.status, update.notes)


@router.post("/{booking_id}/review", response_model=BookingResponse)
async def add_review_endpoint(
    booking_id: int,
    review: BookingReviewCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Rate a completed booking (1-5)."""
    booking = await add_booking_review(db, booking_id, user_id, review.rating, review.comment)
    # Rating shows up in listings
    await invalidate_activity_cache()
    return booking
