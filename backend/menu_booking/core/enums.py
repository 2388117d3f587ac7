# backend/menu_booking/core/enums.py
"""
Core enums for the menu booking engine.

Enum values are persisted verbatim, so existing members must never be
renamed.
"""

from datetime import date
from enum import Enum
from typing import List


class DayOfWeek(str, Enum):
    """
    Day of week used by availability rules.

    Stored as three-letter codes. ``date.weekday()`` returns 0 for Monday,
    which is why members are declared Monday first.
    """

    MON = "MON"
    TUE = "TUE"
    WED = "WED"
    THU = "THU"
    FRI = "FRI"
    SAT = "SAT"
    SUN = "SUN"

    @classmethod
    def ordered(cls) -> List["DayOfWeek"]:
        return list(cls)

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        """Map a calendar date to its day-of-week code."""
        return cls.ordered()[value.weekday()]

    @property
    def sort_index(self) -> int:
        return DayOfWeek.ordered().index(self)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses. CANCELLED is terminal."""

    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class SlotMode(str, Enum):
    """How rule windows are reported by the slot calculator."""

    WINDOW = "window"  # whole rule window or nothing
    SPLIT = "split"  # free sub-intervals around bookings
