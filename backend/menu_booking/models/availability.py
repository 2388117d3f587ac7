# backend/menu_booking/models/availability.py
"""
Availability rule model.

A rule declares a recurring weekly window during which an item accepts
reservations. Several rules may exist for the same item and day; they are
never merged, and a booking must fit entirely inside one of them.

Rules are never hard-deleted. Deactivation flips ``is_active``.
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import DayOfWeek
from ..core.time_range import TimeRange
from ..database import Base

logger = logging.getLogger(__name__)


class AvailabilityRule(Base):
    __tablename__ = "availability_rules"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    item_id = Column(String(26), ForeignKey("items.id"), nullable=False)
    day_of_week = Column(String(3), nullable=False)
    # Zero-padded "HH:MM", so string order equals time order
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    item = relationship("Item", back_populates="availability_rules")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_availability_rules_time_order"),
        CheckConstraint(
            "day_of_week IN ('MON', 'TUE', 'WED', 'THU', 'FRI', 'SAT', 'SUN')",
            name="ck_availability_rules_day_of_week",
        ),
        Index("ix_availability_rules_item_day", "item_id", "day_of_week"),
    )

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)

    @property
    def day(self) -> DayOfWeek:
        return DayOfWeek(self.day_of_week)

    def deactivate(self) -> None:
        self.is_active = False
        self.updated_at = datetime.now(timezone.utc)
        logger.info(f"Availability rule {self.id} deactivated")

    def __repr__(self) -> str:
        return (
            f"<AvailabilityRule {self.id}: item={self.item_id}, "
            f"{self.day_of_week} {self.start_time}-{self.end_time}, active={self.is_active}>"
        )
