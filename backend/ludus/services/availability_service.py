"""
Availability calculator: how many participants an activity already holds
on a date.

A booking counts against capacity unless its status is in
RELEASED_STATUSES. The pool is one calendar date by default; with
CAPACITY_GRANULARITY=slot each start time has its own pool.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ludus.models.activity import Activity
from ludus.models.booking import Booking, RELEASED_STATUSES
from ludus.core.config import get_settings

settings = get_settings()

GRANULARITIES = ("date", "slot")


@dataclass(frozen=True)
class AvailabilitySummary:
    activity_id: int
    date: date
    start_time: Optional[str]
    granularity: str
    capacity: int
    booked: int

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.booked, 0)


def pool_slot(start_time: Optional[str], granularity: Optional[str] = None) -> Optional[str]:
    """The start time that scopes the capacity pool, or None for a whole-date pool."""
    granularity = granularity or settings.CAPACITY_GRANULARITY
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unknown capacity granularity: {granularity!r}")
    return start_time if granularity == "slot" else None


async def count_booked_participants(
    db: AsyncSession,
    activity_id: int,
    booking_date: date,
    start_time: Optional[str] = None,
    granularity: Optional[str] = None,
) -> int:
    """Sum of participants_total over the activity's non-released bookings for the pool."""
    query = select(func.coalesce(func.sum(Booking.participants_total), 0)).where(
        Booking.activity_id == activity_id,
        Booking.booking_date == booking_date,
        Booking.status.not_in(RELEASED_STATUSES),
    )
    slot = pool_slot(start_time, granularity)
    if slot is not None:
        query = query.where(Booking.start_time == slot)

    return int((await db.execute(query)).scalar_one())


async def get_availability(
    db: AsyncSession,
    activity: Activity,
    booking_date: date,
    start_time: Optional[str] = None,
    granularity: Optional[str] = None,
) -> AvailabilitySummary:
    granularity = granularity or settings.CAPACITY_GRANULARITY
    booked = await count_booked_participants(db, activity.id, booking_date, start_time, granularity)
    return AvailabilitySummary(
        activity_id=activity.id,
        date=booking_date,
        start_time=pool_slot(start_time, granularity),
        granularity=granularity,
        capacity=activity.max_participants,
        booked=booked,
    )
