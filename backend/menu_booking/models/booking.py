# backend/menu_booking/models/booking.py
"""
Booking model.

Bookings are self-contained: they store item, date and time directly so a
confirmed reservation survives later changes to availability rules.

For a fixed (item_id, booking_date), CONFIRMED bookings never overlap under
half-open [start, end) semantics. That invariant is maintained by the
booking coordinator, not by a database constraint, so rows must only be
created through BookingService.create_booking.
"""

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import BookingStatus
from ..core.time_range import TimeRange
from ..database import Base

logger = logging.getLogger(__name__)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    item_id = Column(String(26), ForeignKey("items.id"), nullable=False)

    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(20), nullable=True)

    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    item = relationship("Item", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("status IN ('CONFIRMED', 'CANCELLED')", name="ck_bookings_status"),
        CheckConstraint("start_time < end_time", name="ck_bookings_time_order"),
        Index("ix_bookings_item_date_time", "item_id", "booking_date", "start_time", "end_time"),
        Index("ix_bookings_item_date_status", "item_id", "booking_date", "status"),
    )

    def __init__(self, **kwargs: Any) -> None:
        """Initialize as CONFIRMED unless told otherwise."""
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.CONFIRMED.value

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: item={self.item_id}, date={self.booking_date}, "
            f"time={self.start_time}-{self.end_time}, status={self.status}>"
        )

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED.value

    def cancel(self) -> None:
        """Cancel this booking. CANCELLED is terminal."""
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} cancelled")
