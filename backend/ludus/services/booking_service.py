"""
Booking service with capacity-safe admission.

CONCURRENCY STRATEGY: Serialized Admission per Capacity Pool
============================================================

Problem:
  Admission is "sum booked participants -> compare to capacity -> insert".
  Two requests for the last places on the same activity/date can both read
  the same sum, both pass the check and both insert. Result: overbooking.

Solution:
  Every admission for one capacity pool runs under the same lock key,
  admission:{activity_id}:{date}[:{start_time}], taken from the configured
  AdmissionLock strategy (in-process or Redis). Inside the lock we:

  1. Read the activity row FOR UPDATE (serializes across workers on
     PostgreSQL even if the Redis lock is degraded)
  2. Sum participants of the non-released bookings for the pool
  3. Insert the booking and COMMIT before the lock is released

  Committing inside the lock matters: the next holder must see this
  booking in its sum.

Capacity is only checked here. Status updates never re-validate it, which
is safe because released bookings (cancelled, refunded) can never return
to an active status.
"""

import secrets
import string
import time
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ludus.models.activity import Activity
from ludus.models.booking import Booking, RELEASED_STATUSES, STATUS_TRANSITIONS
from ludus.models.user import User
from ludus.models.vendor import Vendor
from ludus.schemas.booking import BookingCreate
from ludus.services.activity_service import ensure_vendor_manager, get_activity
from ludus.services.availability_service import count_booked_participants, pool_slot
from ludus.services.interfaces.admission import AdmissionLock, admission_key
from ludus.services.strategy_factory import get_admission
from ludus.services.vendor_service import get_vendor
from ludus.core.config import get_settings
from ludus.core.exceptions import (
    AdmissionBusyError,
    BookingRuleError,
    CapacityExceededError,
    LudusError,
    NotFoundError,
)
from ludus.core.logging import get_logger
from ludus.core.metrics import booking_latency, record_booking_attempt, record_status_change

logger = get_logger(__name__)
settings = get_settings()

_BASE36 = string.digits + string.ascii_uppercase

_OUTCOMES = (
    (CapacityExceededError, "capacity_exceeded"),
    (NotFoundError, "not_found"),
    (AdmissionBusyError, "busy"),
    (BookingRuleError, "rule_violation"),
)


def _to_base36(number: int) -> str:
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def generate_reference() -> str:
    """Human-readable booking reference, e.g. LDS-M1ABC2DE-7QX3Z."""
    stamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"LDS-{stamp}-{suffix}"


def compute_total_price(activity: Activity, participants: int) -> float:
    if activity.price_type == "per_group":
        return round(activity.base_price, 2)
    return round(activity.base_price * participants, 2)


def _outcome_for(error: LudusError) -> str:
    for error_type, outcome in _OUTCOMES:
        if isinstance(error, error_type):
            return outcome
    return "error"


async def create_booking(
    db: AsyncSession,
    user_id: int,
    booking_data: BookingCreate,
    admission: Optional[AdmissionLock] = None,
    today: Optional[date] = None,
) -> Booking:
    """
    Admit and persist a booking in `pending` status.

    Raises:
        NotFoundError: activity missing/inactive, or its vendor inactive
        BookingRuleError: date not in the future, bad slot, below minimum size
        CapacityExceededError: the pool cannot take the requested participants
        AdmissionBusyError: the admission lock could not be taken in time
    """
    admission = admission or get_admission()
    key = admission_key(
        booking_data.activity_id,
        booking_data.booking_date,
        pool_slot(booking_data.start_time),
    )

    started = time.perf_counter()
    try:
        async with admission.hold(key):
            booking = await _admit(db, user_id, booking_data, today)
            await db.commit()
    except LudusError as e:
        record_booking_attempt(_outcome_for(e))
        raise
    finally:
        booking_latency.observe(time.perf_counter() - started)

    record_booking_attempt("created")
    logger.info(
        "booking_created",
        booking_id=booking.id,
        reference=booking.reference,
        user_id=user_id,
        activity_id=booking.activity_id,
        date=booking.booking_date.isoformat(),
        participants=booking.participants_total,
    )
    return booking


async def _admit(
    db: AsyncSession,
    user_id: int,
    booking_data: BookingCreate,
    today: Optional[date],
) -> Booking:
    result = await db.execute(
        select(Activity)
        .where(Activity.id == booking_data.activity_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    activity = result.scalar_one_or_none()
    if not activity or not activity.is_bookable:
        raise NotFoundError("Activity not found or inactive")

    result = await db.execute(select(Vendor).where(Vendor.id == activity.vendor_id))
    vendor = result.scalar_one_or_none()
    if not vendor or not vendor.is_active:
        raise NotFoundError("Vendor not found or inactive")

    today = today or datetime.now(timezone.utc).date()
    if booking_data.booking_date <= today:
        raise BookingRuleError("Booking date must be in the future")

    if (
        booking_data.start_time
        and booking_data.end_time
        and booking_data.end_time <= booking_data.start_time
    ):
        raise BookingRuleError("end_time must be after start_time")

    # Slot pools only see bookings with the same start time
    if settings.CAPACITY_GRANULARITY == "slot" and not booking_data.start_time:
        raise BookingRuleError("start_time is required when capacity is tracked per slot")

    requested = booking_data.participants_total
    if requested < activity.min_participants:
        raise BookingRuleError(f"Minimum {activity.min_participants} participants required")

    already_booked = await count_booked_participants(
        db, activity.id, booking_data.booking_date, booking_data.start_time,
    )
    remaining = activity.max_participants - already_booked
    if requested > remaining:
        logger.warning(
            "booking_rejected_capacity",
            activity_id=activity.id,
            date=booking_data.booking_date.isoformat(),
            requested=requested,
            booked=already_booked,
            capacity=activity.max_participants,
        )
        raise CapacityExceededError(requested=requested, remaining=max(remaining, 0))

    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one()

    booking = Booking(
        reference=generate_reference(),
        user_id=user.id,
        activity_id=activity.id,
        vendor_id=vendor.id,
        booking_date=booking_data.booking_date,
        start_time=booking_data.start_time,
        end_time=booking_data.end_time,
        participants_total=requested,
        status="pending",
        payment_status="pending",
        activity_title=activity.title,
        activity_category=activity.category,
        vendor_name=vendor.business_name,
        user_name=user.full_name,
        user_email=user.email,
        base_price=activity.base_price,
        price_type=activity.price_type,
        currency=activity.currency,
        total_price=compute_total_price(activity, requested),
        contact_email=booking_data.contact_email or user.email,
        contact_phone=booking_data.contact_phone or user.phone,
        special_requests=booking_data.special_requests,
        waiver_signed=booking_data.waiver_signed,
        waiver_signed_at=datetime.now(timezone.utc) if booking_data.waiver_signed else None,
    )
    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    return booking


async def get_user_bookings(
    db: AsyncSession,
    user_id: int,
    page: int = 1,
    page_size: int = 10,
    status: Optional[str] = None,
) -> tuple[list[Booking], int]:
    """A user's bookings, newest first."""
    query = select(Booking).where(Booking.user_id == user_id)
    if status:
        query = query.where(Booking.status == status)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()
    result = await db.execute(
        query
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def get_booking(db: AsyncSession, booking_id: int, user_id: int) -> Booking:
    result = await db.execute(
        select(Booking).where(Booking.id == booking_id, Booking.user_id == user_id)
    )
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


async def get_vendor_bookings(
    db: AsyncSession,
    vendor_id: int,
    actor: User,
    booking_date: Optional[date] = None,
    status: Optional[str] = None,
) -> list[Booking]:
    """Booking ledger of a vendor, optionally narrowed to one date or status."""
    vendor = await get_vendor(db, vendor_id)
    ensure_vendor_manager(vendor, actor)

    query = select(Booking).where(Booking.vendor_id == vendor_id)
    if booking_date:
        query = query.where(Booking.booking_date == booking_date)
    if status:
        query = query.where(Booking.status == status)

    result = await db.execute(query.order_by(Booking.booking_date.asc(), Booking.start_time.asc()))
    return list(result.scalars().all())


async def cancel_booking(
    db: AsyncSession,
    booking_id: int,
    user_id: int,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Booking:
    """
    Cancel the user's own booking; its participants return to the pool.

    Refund: full more than FULL_REFUND_HOURS ahead, PARTIAL_REFUND_RATE of the
    total between the cutoff and that; no cancellation inside the cutoff.
    """
    booking = await get_booking(db, booking_id, user_id)

    if booking.status in RELEASED_STATUSES:
        raise BookingRuleError("Booking is already cancelled")
    if booking.status in ("completed", "no_show"):
        raise BookingRuleError(f"Cannot cancel a {booking.status} booking")

    now = now or datetime.now(timezone.utc)
    cutoff = settings.CANCELLATION_CUTOFF_HOURS
    if not booking.can_be_cancelled(cutoff, now):
        raise BookingRuleError(
            f"Booking cannot be cancelled less than {cutoff} hours before the activity"
        )

    refund = booking.refund_amount_for(
        cutoff, settings.FULL_REFUND_HOURS, settings.PARTIAL_REFUND_RATE, now,
    )
    booking.status = "cancelled"
    booking.cancelled_at = now
    booking.cancelled_by = user_id
    booking.cancellation_reason = reason
    booking.refund_amount = refund
    await db.flush()
    await db.refresh(booking)

    record_status_change("cancelled")
    logger.info(
        "booking_cancelled",
        booking_id=booking.id,
        user_id=user_id,
        activity_id=booking.activity_id,
        participants_released=booking.participants_total,
        refund_amount=refund,
    )
    return booking


async def update_booking_status(
    db: AsyncSession,
    booking_id: int,
    actor: User,
    new_status: str,
    notes: Optional[str] = None,
) -> Booking:
    """
    Vendor owner or admin moves a booking along STATUS_TRANSITIONS.

    A vendor/admin cancellation refunds the full total; the late-cancellation
    policy only binds the customer.
    """
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFoundError("Booking not found")

    vendor = await get_vendor(db, booking.vendor_id)
    ensure_vendor_manager(vendor, actor)

    previous = booking.status
    if new_status != previous:
        if new_status not in STATUS_TRANSITIONS[previous]:
            raise BookingRuleError(f"Cannot change booking status from {previous} to {new_status}")

        booking.status = new_status
        if new_status == "cancelled":
            booking.cancelled_at = datetime.now(timezone.utc)
            booking.cancelled_by = actor.id
            booking.refund_amount = booking.total_price
        elif new_status == "refunded":
            booking.payment_status = "refunded"
        record_status_change(new_status)

    if notes:
        if actor.role == "admin":
            booking.admin_notes = notes
        else:
            booking.vendor_notes = notes

    await db.flush()
    await db.refresh(booking)

    logger.info(
        "booking_status_updated",
        booking_id=booking.id,
        actor_id=actor.id,
        previous=previous,
        status=booking.status,
    )
    return booking


async def add_booking_review(
    db: AsyncSession,
    booking_id: int,
    user_id: int,
    rating: int,
    comment: Optional[str] = None,
) -> Booking:
    """Review a completed booking once; folds the rating into the activity average."""
    booking = await get_booking(db, booking_id, user_id)

    if booking.status != "completed":
        raise BookingRuleError("Can only review completed bookings")
    if booking.review_rating is not None:
        raise BookingRuleError("Booking already reviewed")

    booking.review_rating = rating
    booking.review_comment = comment
    booking.reviewed_at = datetime.now(timezone.utc)

    activity = await get_activity(db, booking.activity_id)
    total = activity.rating_average * activity.rating_count + rating
    activity.rating_count += 1
    activity.rating_average = round(total / activity.rating_count, 2)

    await db.flush()
    await db.refresh(booking)

    logger.info(
        "booking_reviewed",
        booking_id=booking.id,
        activity_id=activity.id,
        rating=rating,
        activity_rating=activity.rating_average,
    )
    return booking
