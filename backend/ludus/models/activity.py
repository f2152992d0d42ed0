"""
Activity model: a bookable offering with a per-date participant capacity.

Key design decisions:
- `max_participants` is the capacity pool shared by all bookings of one date
  (or one slot, depending on CAPACITY_GRANULARITY)
- Bookability needs both `is_active` and `status == 'active'`; vendors toggle
  the flag, moderation moves the status
- Rating is kept as a running average so listings never aggregate reviews
"""

from sqlalchemy import Column, Integer, String, Boolean, Float, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from ludus.db.base import Base, TimestampMixin

ACTIVITY_CATEGORIES = ("fitness", "arts", "food", "outdoor", "unique", "wellness")
ACTIVITY_STATUSES = ("draft", "active", "suspended", "archived")
PRICE_TYPES = ("per_person", "per_group")
DIFFICULTY_LEVELS = ("beginner", "intermediate", "advanced", "all_levels")


class Activity(Base, TimestampMixin):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(100), nullable=False)
    slug = Column(String(120), unique=True, index=True, nullable=False)
    description = Column(String(2000), nullable=False)
    short_description = Column(String(300), nullable=False)
    category = Column(String(20), nullable=False)

    # Location
    city = Column(String(100), nullable=True)
    address = Column(String(255), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Pricing
    base_price = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="SAR")
    price_type = Column(String(20), nullable=False, default="per_person")

    duration_minutes = Column(Integer, nullable=True)
    difficulty = Column(String(20), nullable=False, default="beginner")

    # Capacity descriptor
    min_participants = Column(Integer, nullable=False, default=1)
    max_participants = Column(Integer, nullable=False)

    # Availability
    is_active = Column(Boolean, nullable=False, default=True)
    status = Column(String(20), nullable=False, default="active")

    rating_average = Column(Float, nullable=False, default=0.0)
    rating_count = Column(Integer, nullable=False, default=0)

    vendor = relationship("Vendor", back_populates="activities")
    bookings = relationship("Booking", back_populates="activity")

    __table_args__ = (
        CheckConstraint("min_participants >= 1", name="check_activity_min_participants"),
        CheckConstraint("max_participants >= min_participants", name="check_activity_capacity_range"),
        CheckConstraint("base_price >= 0", name="check_activity_price_non_negative"),
        CheckConstraint(
            "status IN ('draft', 'active', 'suspended', 'archived')",
            name="check_activity_status",
        ),
        # Listing query: active activities by category, newest first
        Index("ix_activities_active_category", "is_active", "category"),
    )

    @property
    def is_bookable(self) -> bool:
        return bool(self.is_active) and self.status == "active"

    def __repr__(self) -> str:
        return (
            f"<Activity(id={self.id}, title={self.title}, "
            f"capacity={self.min_participants}-{self.max_participants}, status={self.status})>"
        )
