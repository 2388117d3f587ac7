# backend/menu_booking/services/slot_calculator.py
"""
Slot Calculator

Read-only free/busy breakdown for one item on one date. No lock and no
transaction: the answer is a snapshot and may be stale by the time a client
acts on it; create_booking remains the authority.

Two reporting modes:

- ``window`` (default): a rule window is listed as available only when no
  confirmed booking overlaps it, and then it is listed whole. One booking
  anywhere inside a window removes the entire window.
- ``split``: each window is reported as the free sub-intervals left after
  subtracting the confirmed bookings.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import DayOfWeek, SlotMode
from ..core.time_range import TimeRange
from ..models.availability import AvailabilityRule
from ..models.booking import Booking
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from .availability_service import AvailabilityService
from .base import BaseService
from .catalog_service import CatalogService


@dataclass
class BookedSlot:
    start_time: str
    end_time: str
    customer_name: str


@dataclass
class AvailableSlots:
    item_id: str
    date: date
    day_of_week: DayOfWeek
    mode: SlotMode = SlotMode.WINDOW
    availability_rules: List[AvailabilityRule] = field(default_factory=list)
    booked_slots: List[BookedSlot] = field(default_factory=list)
    available_slots: List[TimeRange] = field(default_factory=list)


def calculate_available_slots(
    windows: Iterable[TimeRange],
    booked: Iterable[TimeRange],
    mode: SlotMode = SlotMode.WINDOW,
) -> List[TimeRange]:
    """Pure free-slot computation over rule windows and booked intervals."""
    busy = list(booked)
    free: List[TimeRange] = []
    for window in windows:
        if SlotMode(mode) is SlotMode.SPLIT:
            free.extend(window.subtract(busy))
        elif not any(window.overlaps(interval) for interval in busy):
            free.append(window)
    return free


class SlotCalculator(BaseService):
    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        availability_service: Optional[AvailabilityService] = None,
        catalog_service: Optional[CatalogService] = None,
    ):
        super().__init__(db)
        self.booking_repository = booking_repository or RepositoryFactory.create_booking_repository(db)
        self.catalog_service = catalog_service or CatalogService(db)
        self.availability_service = availability_service or AvailabilityService(
            db, catalog_service=self.catalog_service
        )

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self, item_id: str, target_date: date, mode: SlotMode = SlotMode.WINDOW
    ) -> AvailableSlots:
        """
        Free/busy breakdown for ``item_id`` on ``target_date``.

        Raises:
            NotFoundException: item does not exist
            NotBookableException: item is not bookable
        """
        self.catalog_service.require_bookable(item_id)

        result = AvailableSlots(
            item_id=item_id,
            date=target_date,
            day_of_week=self.availability_service.day_of_week_of(target_date),
            mode=SlotMode(mode),
        )
        rules = self.availability_service.get_rules_for_day(item_id, target_date)
        if not rules:
            return result

        bookings: List[Booking] = self.booking_repository.get_confirmed_for_date(item_id, target_date)
        result.availability_rules = rules
        result.booked_slots = [
            BookedSlot(b.start_time, b.end_time, b.customer_name) for b in bookings
        ]
        result.available_slots = calculate_available_slots(
            (rule.time_range for rule in rules),
            (booking.time_range for booking in bookings),
            mode,
        )
        return result
