"""
Activity endpoints with Redis caching on the catalogue listing.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ludus.db.session import get_db
from ludus.models.user import User
from ludus.schemas.activity import (
    ActivityCreate,
    ActivityListResponse,
    ActivityResponse,
    ActivityUpdate,
    AvailabilityResponse,
    Category,
)
from ludus.schemas.booking import TIME_PATTERN
from ludus.services.activity_service import (
    create_activity,
    get_active_activity,
    list_activities,
    update_activity,
)
from ludus.services.availability_service import get_availability
from ludus.services.cache_service import (
    get_cached_activities,
    invalidate_activity_cache,
    set_cached_activities,
)
from ludus.core.security import get_current_user
from ludus.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/activities", tags=["Activities"])


@router.post("/", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def create_activity_endpoint(
    activity_data: ActivityCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Publish a new activity under one of the caller's vendors."""
    activity = await create_activity(db, activity_data, user)
    await invalidate_activity_cache()
    return activity


@router.get("/", response_model=ActivityListResponse)
async def list_activities_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    category: Optional[Category] = Query(None),
    city: Optional[str] = Query(None, max_length=100),
    search: Optional[str] = Query(None, max_length=100),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """
    List bookable activities with filters and pagination.
    Results are cached in Redis; cache is dropped on any activity change.
    """
    filters = {
        "page": page,
        "page_size": page_size,
        "category": category,
        "city": city,
        "search": search,
        "min_price": min_price,
        "max_price": max_price,
    }
    cached = await get_cached_activities(filters)
    if cached:
        logger.info("activities_list_cache_hit", page=page)
        cached["cached"] = True
        return ActivityListResponse(**cached)

    activities, total = await list_activities(
        db, page, page_size, category, city, search, min_price, max_price,
    )
    response_data = {
        "activities": [ActivityResponse.model_validate(a).model_dump() for a in activities],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }
    await set_cached_activities(filters, response_data)
    return ActivityListResponse(**response_data)


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity_endpoint(activity_id: int, db: AsyncSession = Depends(get_db)):
    return await get_active_activity(db, activity_id)


@router.patch("/{activity_id}", response_model=ActivityResponse)
async def update_activity_endpoint(
    activity_id: int,
    update: ActivityUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Edit an activity (capacity, pricing, status). Vendor owner or admin."""
    activity = await update_activity(db, activity_id, update, user)
    await invalidate_activity_cache()
    return activity


@router.get("/{activity_id}/availability", response_model=AvailabilityResponse)
async def get_availability_endpoint(
    activity_id: int,
    booking_date: date = Query(..., alias="date"),
    start_time: Optional[str] = Query(None, pattern=TIME_PATTERN),
    db: AsyncSession = Depends(get_db),
):
    """Remaining capacity for a date (or slot). Never cached."""
    activity = await get_active_activity(db, activity_id)
    summary = await get_availability(db, activity, booking_date, start_time)
    return AvailabilityResponse(
        activity_id=summary.activity_id,
        date=summary.date,
        start_time=summary.start_time,
        granularity=summary.granularity,
        capacity=summary.capacity,
        booked=summary.booked,
        remaining=summary.remaining,
    )
