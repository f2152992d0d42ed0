"""Initial schema: users, vendors, activities, bookings with indexes and constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("role IN ('user', 'vendor', 'admin')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("business_name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("description", sa.String(1000), nullable=False),
        sa.Column("contact_email", sa.String(255), nullable=False),
        sa.Column("contact_phone", sa.String(30), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
    )
    op.create_index("ix_vendors_id", "vendors", ["id"])
    op.create_index("ix_vendors_owner_id", "vendors", ["owner_id"])
    op.create_index("ix_vendors_slug", "vendors", ["slug"], unique=True)

    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("description", sa.String(2000), nullable=False),
        sa.Column("short_description", sa.String(300), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("base_price", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default=sa.text("'SAR'")),
        sa.Column("price_type", sa.String(20), nullable=False, server_default=sa.text("'per_person'")),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("difficulty", sa.String(20), nullable=False, server_default=sa.text("'beginner'")),
        sa.Column("min_participants", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("max_participants", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.Column("rating_average", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("rating_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint("min_participants >= 1", name="check_activity_min_participants"),
        sa.CheckConstraint("max_participants >= min_participants", name="check_activity_capacity_range"),
        sa.CheckConstraint("base_price >= 0", name="check_activity_price_non_negative"),
        sa.CheckConstraint(
            "status IN ('draft', 'active', 'suspended', 'archived')",
            name="check_activity_status",
        ),
    )
    op.create_index("ix_activities_id", "activities", ["id"])
    op.create_index("ix_activities_vendor_id", "activities", ["vendor_id"])
    op.create_index("ix_activities_slug", "activities", ["slug"], unique=True)
    op.create_index("ix_activities_active_category", "activities", ["is_active", "category"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("reference", sa.String(32), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("activity_id", sa.Integer(), sa.ForeignKey("activities.id"), nullable=False),
        sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=True),
        sa.Column("end_time", sa.String(5), nullable=True),
        sa.Column("participants_total", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("activity_title", sa.String(100), nullable=False),
        sa.Column("activity_category", sa.String(20), nullable=False),
        sa.Column("vendor_name", sa.String(100), nullable=False),
        sa.Column("user_name", sa.String(201), nullable=False),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("base_price", sa.Float(), nullable=False),
        sa.Column("price_type", sa.String(20), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("total_price", sa.Float(), nullable=False),
        sa.Column("contact_email", sa.String(255), nullable=False),
        sa.Column("contact_phone", sa.String(30), nullable=True),
        sa.Column("special_requests", sa.String(1000), nullable=True),
        sa.Column("waiver_signed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("waiver_signed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("cancellation_reason", sa.String(500), nullable=True),
        sa.Column("refund_amount", sa.Float(), nullable=True),
        sa.Column("vendor_notes", sa.String(1000), nullable=True),
        sa.Column("admin_notes", sa.String(1000), nullable=True),
        sa.Column("review_rating", sa.Integer(), nullable=True),
        sa.Column("review_comment", sa.String(1000), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("participants_total > 0", name="check_booking_participants_positive"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'in_progress', 'completed', "
            "'cancelled', 'no_show', 'refunded')",
            name="check_booking_status",
        ),
        sa.CheckConstraint(
            "review_rating IS NULL OR (review_rating >= 1 AND review_rating <= 5)",
            name="check_booking_review_rating",
        ),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_reference", "bookings", ["reference"], unique=True)
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_activity_id", "bookings", ["activity_id"])
    op.create_index("ix_bookings_vendor_id", "bookings", ["vendor_id"])
    # Capacity sum on admission: WHERE activity_id = ? AND booking_date = ?
    op.create_index("ix_bookings_activity_date", "bookings", ["activity_id", "booking_date"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("activities")
    op.drop_table("vendors")
    op.drop_table("users")
