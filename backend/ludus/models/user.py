"""
User model with secure password storage and a marketplace role.
"""

from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint
from sqlalchemy.orm import relationship

from ludus.db.base import Base, TimestampMixin

USER_ROLES = ("user", "vendor", "admin")


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    is_active = Column(Boolean, default=True, nullable=False)

    vendors = relationship("Vendor", back_populates="owner")
    bookings = relationship("Booking", back_populates="user", foreign_keys="Booking.user_id")

    __table_args__ = (
        CheckConstraint("role IN ('user', 'vendor', 'admin')", name="check_user_role"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
