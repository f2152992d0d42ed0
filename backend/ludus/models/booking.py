"""
Booking model representing a user's reservation for an activity on a date.

Key design decisions:
- Status field allows cancellation without deleting records
- Activity, vendor, user and pricing fields are copied at creation time and
  never refreshed: the booking shows what the user agreed to
- Index on (activity_id, booking_date) backs the capacity sum on admission
"""

from datetime import datetime, time, timezone

from sqlalchemy import (
    Column, Integer, String, Boolean, Float, Date, DateTime, ForeignKey, Index, CheckConstraint,
)
from sqlalchemy.orm import relationship

from ludus.db.base import Base, TimestampMixin

BOOKING_STATUSES = (
    "pending", "confirmed", "in_progress", "completed", "cancelled", "no_show", "refunded",
)

# Bookings in these states give their participants back to the capacity pool
RELEASED_STATUSES = ("cancelled", "refunded")

# Allowed moves for vendor/admin status updates. Released bookings never come
# back, so a status change cannot push a date over capacity.
STATUS_TRANSITIONS = {
    "pending": ("confirmed", "cancelled"),
    "confirmed": ("in_progress", "completed", "cancelled", "no_show"),
    "in_progress": ("completed", "no_show"),
    "cancelled": ("refunded",),
    "completed": (),
    "no_show": (),
    "refunded": (),
}


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(32), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    activity_id = Column(Integer, ForeignKey("activities.id"), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)

    booking_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=True)  # HH:MM
    end_time = Column(String(5), nullable=True)
    participants_total = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    payment_status = Column(String(20), nullable=False, default="pending")

    # Snapshot taken at creation
    activity_title = Column(String(100), nullable=False)
    activity_category = Column(String(20), nullable=False)
    vendor_name = Column(String(100), nullable=False)
    user_name = Column(String(201), nullable=False)
    user_email = Column(String(255), nullable=False)
    base_price = Column(Float, nullable=False)
    price_type = Column(String(20), nullable=False)
    currency = Column(String(3), nullable=False)
    total_price = Column(Float, nullable=False)

    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(30), nullable=True)
    special_requests = Column(String(1000), nullable=True)
    waiver_signed = Column(Boolean, nullable=False, default=False)
    waiver_signed_at = Column(DateTime(timezone=True), nullable=True)

    # Cancellation
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(String(500), nullable=True)
    refund_amount = Column(Float, nullable=True)

    vendor_notes = Column(String(1000), nullable=True)
    admin_notes = Column(String(1000), nullable=True)

    # Review
    review_rating = Column(Integer, nullable=True)
    review_comment = Column(String(1000), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="bookings", foreign_keys=[user_id])
    activity = relationship("Activity", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("participants_total > 0", name="check_booking_participants_positive"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'in_progress', 'completed', "
            "'cancelled', 'no_show', 'refunded')",
            name="check_booking_status",
        ),
        CheckConstraint(
            "review_rating IS NULL OR (review_rating >= 1 AND review_rating <= 5)",
            name="check_booking_review_rating",
        ),
        Index("ix_bookings_activity_date", "activity_id", "booking_date"),
    )

    def starts_at(self) -> datetime:
        """Start of the booked slot in UTC; midnight when no slot was given."""
        slot = time.fromisoformat(self.start_time) if self.start_time else time(0, 0)
        return datetime.combine(self.booking_date, slot, tzinfo=timezone.utc)

    def hours_until_start(self, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        return (self.starts_at() - now).total_seconds() / 3600

    def can_be_cancelled(self, cutoff_hours: int, now: datetime | None = None) -> bool:
        if self.status in RELEASED_STATUSES or self.status == "completed":
            return False
        return self.hours_until_start(now) > cutoff_hours

    def refund_amount_for(
        self,
        cutoff_hours: int,
        full_refund_hours: int,
        partial_rate: float,
        now: datetime | None = None,
    ) -> float:
        if not self.can_be_cancelled(cutoff_hours, now):
            return 0.0
        hours = self.hours_until_start(now)
        if hours > full_refund_hours:
            return round(self.total_price, 2)
        return round(self.total_price * partial_rate, 2)

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, activity={self.activity_id}, date={self.booking_date}, "
            f"participants={self.participants_total}, status={self.status})>"
        )
