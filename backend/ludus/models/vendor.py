"""
Vendor model: a business that owns and runs activities.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from ludus.db.base import Base, TimestampMixin


class Vendor(Base, TimestampMixin):
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    business_name = Column(String(100), nullable=False)
    slug = Column(String(120), unique=True, index=True, nullable=False)
    description = Column(String(1000), nullable=False)
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(30), nullable=False)
    city = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    owner = relationship("User", back_populates="vendors")
    activities = relationship("Activity", back_populates="vendor")

    def __repr__(self) -> str:
        return f"<Vendor(id={self.id}, business_name={self.business_name}, active={self.is_active})>"
