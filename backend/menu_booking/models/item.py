# backend/menu_booking/models/item.py
"""
Menu item model.

The booking engine treats items as read-only catalog facts: it only needs
to know whether an item exists and whether it accepts reservations.
"""

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Item(Base):
    """A menu entry (dish, service, room...) that may be reservable."""

    __tablename__ = "items"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False)
    is_bookable = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    availability_rules = relationship("AvailabilityRule", back_populates="item")
    bookings = relationship("Booking", back_populates="item")

    def __repr__(self) -> str:
        return f"<Item {self.id}: {self.name!r} bookable={self.is_bookable}>"
