# backend/menu_booking/schemas/booking.py
"""
Booking schemas.

Bookings are self-contained: item, date and "HH:MM" times are stored on
the booking itself and never reference a rule.
"""

from datetime import date, datetime
import re
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from ..core.enums import BookingStatus, DayOfWeek, SlotMode
from ..core.time_range import DATE_PATTERN, TIME_PATTERN
from ._strict_base import StrictModel, StrictRequestModel
from .availability import AvailabilityRuleResponse

DATE_ONLY_REGEX = re.compile(DATE_PATTERN)


def _ensure_date_only(value: object, field_name: str) -> object:
    if isinstance(value, str):
        candidate = value.strip()
        if not DATE_ONLY_REGEX.fullmatch(candidate):
            raise ValueError(f"{field_name} must be a YYYY-MM-DD date-only string")
        return candidate
    return value


class BookingCreate(StrictRequestModel):
    item_id: str = Field(..., min_length=1, description="Item to reserve")
    booking_date: date = Field(..., description="Date of the booking (YYYY-MM-DD)")
    start_time: str = Field(..., pattern=TIME_PATTERN, examples=["10:00"])
    end_time: str = Field(..., pattern=TIME_PATTERN, examples=["11:00"])
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=20)

    # start < end is enforced by BookingService after the availability check,
    # so an inverted range is reported as INVALID_TIME_RANGE rather than a 422.

    @field_validator("booking_date", mode="before")
    @classmethod
    def _enforce_date_only(cls, v: object) -> object:
        return _ensure_date_only(v, "booking_date")

    @field_validator("booking_date")
    @classmethod
    def validate_not_past(cls, v: date) -> date:
        if v < date.today():
            raise ValueError("Cannot book for past dates")
        return v


class BookingResponse(StrictModel):
    id: str
    item_id: str
    booking_date: date
    start_time: str
    end_time: str
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    status: BookingStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None


class TimeSlot(StrictModel):
    start_time: str
    end_time: str


class BookedSlotResponse(StrictModel):
    start_time: str
    end_time: str
    customer_name: str


class AvailableSlotsResponse(StrictModel):
    item_id: str
    date: date
    day_of_week: DayOfWeek
    mode: SlotMode
    availability_rules: List[AvailabilityRuleResponse]
    booked_slots: List[BookedSlotResponse]
    available_slots: List[TimeSlot]
