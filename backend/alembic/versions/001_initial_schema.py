# backend/alembic/versions/001_initial_schema.py
"""Items, availability rules and bookings

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create catalog, availability and booking tables."""
    op.create_table(
        "items",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("is_bookable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_items_id", "items", ["id"])

    op.create_table(
        "availability_rules",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("item_id", sa.String(26), nullable=False),
        sa.Column("day_of_week", sa.String(3), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("start_time < end_time", name="ck_availability_rules_time_order"),
        sa.CheckConstraint(
            "day_of_week IN ('MON', 'TUE', 'WED', 'THU', 'FRI', 'SAT', 'SUN')",
            name="ck_availability_rules_day_of_week",
        ),
    )
    op.create_index("ix_availability_rules_id", "availability_rules", ["id"])
    op.create_index(
        "ix_availability_rules_item_day", "availability_rules", ["item_id", "day_of_week"]
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("item_id", sa.String(26), nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=True),
        sa.Column("customer_phone", sa.String(20), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="CONFIRMED"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("status IN ('CONFIRMED', 'CANCELLED')", name="ck_bookings_status"),
        sa.CheckConstraint("start_time < end_time", name="ck_bookings_time_order"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_booking_date", "bookings", ["booking_date"])
    op.create_index(
        "ix_bookings_item_date_time",
        "bookings",
        ["item_id", "booking_date", "start_time", "end_time"],
    )
    op.create_index(
        "ix_bookings_item_date_status", "bookings", ["item_id", "booking_date", "status"]
    )


def downgrade() -> None:
    """Drop booking, availability and catalog tables."""
    op.drop_index("ix_bookings_item_date_status", table_name="bookings")
    op.drop_index("ix_bookings_item_date_time", table_name="bookings")
    op.drop_index("ix_bookings_booking_date", table_name="bookings")
    op.drop_index("ix_bookings_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("ix_availability_rules_item_day", table_name="availability_rules")
    op.drop_index("ix_availability_rules_id", table_name="availability_rules")
    op.drop_table("availability_rules")

    op.drop_index("ix_items_id", table_name="items")
    op.drop_table("items")
