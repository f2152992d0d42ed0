"""
Vendor endpoints: profile registration, lookup, moderation and booking ledger.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ludus.db.session import get_db
from ludus.models.user import User
from ludus.schemas.booking import BookingResponse
from ludus.schemas.vendor import VendorCreate, VendorResponse, VendorStatusUpdate
from ludus.services.booking_service import get_vendor_bookings
from ludus.services.vendor_service import create_vendor, get_vendor, update_vendor_status
from ludus.core.security import get_current_user, require_admin

router = APIRouter(prefix="/vendors", tags=["Vendors"])


@router.post("/", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
async def create_vendor_endpoint(
    vendor_data: VendorCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Register a vendor profile for the authenticated user."""
    return await create_vendor(db, vendor_data, user)


@router.get("/{vendor_id}", response_model=VendorResponse)
async def get_vendor_endpoint(vendor_id: int, db: AsyncSession = Depends(get_db)):
    return await get_vendor(db, vendor_id)


@router.patch("/{vendor_id}/status", response_model=VendorResponse)
async def update_vendor_status_endpoint(
    vendor_id: int,
    update: VendorStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Activate, deactivate or verify a vendor. Admin only."""
    return await update_vendor_status(db, vendor_id, update, admin)


@router.get("/{vendor_id}/bookings", response_model=list[BookingResponse])
async def list_vendor_bookings(
    vendor_id: int,
    booking_date: Optional[date] = Query(None, alias="date"),
    status_filter: Optional[str] = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Bookings taken by a vendor. Vendor owner or admin."""
    return await get_vendor_bookings(db, vendor_id, user, booking_date, status_filter)
