"""
Activity service handling CRUD and the public catalogue listing.
"""

from typing import Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ludus.models.activity import Activity
from ludus.models.user import User
from ludus.models.vendor import Vendor
from ludus.schemas.activity import ActivityCreate, ActivityUpdate
from ludus.services.vendor_service import get_vendor, unique_slug
from ludus.core.config import get_settings
from ludus.core.exceptions import BadRequestError, NotFoundError, PermissionDeniedError
from ludus.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


def ensure_vendor_manager(vendor: Vendor, user: User) -> None:
    """Only the vendor's owner or an admin may manage its activities and bookings."""
    if user.role != "admin" and vendor.owner_id != user.id:
        raise PermissionDeniedError("Not allowed to manage this vendor")


async def create_activity(db: AsyncSession, activity_data: ActivityCreate, user: User) -> Activity:
    vendor = await get_vendor(db, activity_data.vendor_id)
    ensure_vendor_manager(vendor, user)
    if not vendor.is_active:
        raise BadRequestError("Vendor is inactive")

    activity = Activity(
        **activity_data.model_dump(),
        slug=await unique_slug(db, Activity, activity_data.title),
        currency=settings.DEFAULT_CURRENCY,
        created_by=user.id,
        is_active=True,
        status="active",
    )
    db.add(activity)
    await db.flush()
    await db.refresh(activity)

    logger.info(
        "activity_created",
        activity_id=activity.id,
        vendor_id=vendor.id,
        capacity=activity.max_participants,
    )
    return activity


async def get_activity(db: AsyncSession, activity_id: int) -> Activity:
    """Any activity by id, regardless of status."""
    result = await db.execute(select(Activity).where(Activity.id == activity_id))
    activity = result.scalar_one_or_none()
    if not activity:
        raise NotFoundError(f"Activity {activity_id} not found")
    return activity


async def get_active_activity(db: AsyncSession, activity_id: int) -> Activity:
    """Public view: inactive or unpublished activities look missing."""
    activity = await get_activity(db, activity_id)
    if not activity.is_bookable:
        raise NotFoundError(f"Activity {activity_id} not found")
    return activity


async def list_activities(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 12,
    category: Optional[str] = None,
    city: Optional[str] = None,
    search: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
) -> tuple[list[Activity], int]:
    query = select(Activity).where(Activity.is_active.is_(True), Activity.status == "active")

    if category:
        query = query.where(Activity.category == category)
    if city:
        query = query.where(Activity.city.ilike(f"%{city}%"))
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Activity.title.ilike(pattern), Activity.description.ilike(pattern)))
    if min_price is not None:
        query = query.where(Activity.base_price >= min_price)
    if max_price is not None:
        query = query.where(Activity.base_price <= max_price)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    result = await db.execute(
        query
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def update_activity(
    db: AsyncSession, activity_id: int, update: ActivityUpdate, user: User,
) -> Activity:
    """
    Partial update by the vendor owner or an admin.

    Capacity edits apply to future admissions only; bookings already taken
    are never revisited.
    """
    activity = await get_activity(db, activity_id)
    vendor = await get_vendor(db, activity.vendor_id)
    ensure_vendor_manager(vendor, user)

    changes = update.model_dump(exclude_unset=True)
    min_participants = changes.get("min_participants", activity.min_participants)
    max_participants = changes.get("max_participants", activity.max_participants)
    if min_participants > max_participants:
        raise BadRequestError("min_participants cannot exceed max_participants")

    for field, value in changes.items():
        setattr(activity, field, value)
    await db.flush()
    await db.refresh(activity)

    logger.info("activity_updated", activity_id=activity.id, fields=sorted(changes), user_id=user.id)
    return activity
