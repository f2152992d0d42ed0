"""
Vendor service: vendor profiles and their moderation flags.
"""

import re

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ludus.models.user import User
from ludus.models.vendor import Vendor
from ludus.schemas.vendor import VendorCreate, VendorStatusUpdate
from ludus.core.exceptions import NotFoundError
from ludus.core.logging import get_logger

logger = get_logger(__name__)


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9 -]", "", text.lower())
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"-+", "-", slug).strip("-") or "item"


async def unique_slug(db: AsyncSession, model, text: str) -> str:
    """Slug for `text`, suffixed with -2, -3... until free in `model`'s table."""
    base = slugify(text)
    slug, n = base, 1
    while (await db.execute(select(model.id).where(model.slug == slug))).first():
        n += 1
        slug = f"{base}-{n}"
    return slug


async def create_vendor(db: AsyncSession, vendor_data: VendorCreate, owner: User) -> Vendor:
    """Create a vendor profile; the owner becomes a vendor if they were a plain user."""
    vendor = Vendor(
        owner_id=owner.id,
        business_name=vendor_data.business_name,
        slug=await unique_slug(db, Vendor, vendor_data.business_name),
        description=vendor_data.description,
        contact_email=vendor_data.contact_email,
        contact_phone=vendor_data.contact_phone,
        city=vendor_data.city,
    )
    db.add(vendor)

    if owner.role == "user":
        owner.role = "vendor"

    await db.flush()
    await db.refresh(vendor)

    logger.info("vendor_created", vendor_id=vendor.id, owner_id=owner.id, name=vendor.business_name)
    return vendor


async def get_vendor(db: AsyncSession, vendor_id: int) -> Vendor:
    result = await db.execute(select(Vendor).where(Vendor.id == vendor_id))
    vendor = result.scalar_one_or_none()
    if not vendor:
        raise NotFoundError(f"Vendor {vendor_id} not found")
    return vendor


async def update_vendor_status(
    db: AsyncSession, vendor_id: int, update: VendorStatusUpdate, admin: User,
) -> Vendor:
    vendor = await get_vendor(db, vendor_id)
    if update.is_active is not None:
        vendor.is_active = update.is_active
    if update.is_verified is not None:
        vendor.is_verified = update.is_verified
    await db.flush()
    await db.refresh(vendor)

    logger.info(
        "vendor_status_updated",
        vendor_id=vendor.id,
        admin_id=admin.id,
        is_active=vendor.is_active,
        is_verified=vendor.is_verified,
    )
    return vendor
