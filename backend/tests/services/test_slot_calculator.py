# backend/tests/services/test_slot_calculator.py
"""SlotCalculator against SQLite."""

from unittest.mock import patch

import pytest

from menu_booking.core.enums import DayOfWeek, SlotMode
from menu_booking.core.exceptions import NotBookableException, NotFoundException
from menu_booking.core.time_range import TimeRange
from menu_booking.repositories.booking_repository import BookingRepository
from menu_booking.services.booking_service import BookingService
from menu_booking.services.slot_calculator import SlotCalculator


@pytest.fixture
def calculator(db):
    return SlotCalculator(db)


@pytest.fixture
def booking_service(db, lock_registry):
    return BookingService(db, lock_registry=lock_registry)


@pytest.fixture
def two_windows(bookable_item, add_rule):
    add_rule(bookable_item, DayOfWeek.MON, "13:00", "17:00")
    add_rule(bookable_item, DayOfWeek.MON, "09:00", "12:00")


def test_day_without_rules_is_empty_and_skips_booking_lookup(calculator, bookable_item, monday):
    with patch.object(BookingRepository, "get_confirmed_for_date") as lookup:
        slots = calculator.get_available_slots(bookable_item.id, monday)

    lookup.assert_not_called()
    assert slots.day_of_week is DayOfWeek.MON
    assert slots.availability_rules == []
    assert slots.booked_slots == []
    assert slots.available_slots == []


def test_free_day_lists_every_window_in_order(calculator, bookable_item, two_windows, monday):
    slots = calculator.get_available_slots(bookable_item.id, monday)

    assert [r.start_time for r in slots.availability_rules] == ["09:00", "13:00"]
    assert slots.available_slots == [TimeRange("09:00", "12:00"), TimeRange("13:00", "17:00")]
    assert slots.booked_slots == []


def test_booking_removes_its_whole_window(
    calculator, booking_service, bookable_item, two_windows, monday
):
    booking_service.create_booking(bookable_item.id, monday, "10:00", "11:00", "John")

    slots = calculator.get_available_slots(bookable_item.id, monday)

    assert slots.available_slots == [TimeRange("13:00", "17:00")]
    assert [(b.start_time, b.end_time, b.customer_name) for b in slots.booked_slots] == [
        ("10:00", "11:00", "John")
    ]


def test_split_mode_reports_remaining_gaps(
    calculator, booking_service, bookable_item, two_windows, monday
):
    booking_service.create_booking(bookable_item.id, monday, "10:00", "11:00", "John")

    slots = calculator.get_available_slots(bookable_item.id, monday, SlotMode.SPLIT)

    assert slots.mode is SlotMode.SPLIT
    assert slots.available_slots == [
        TimeRange("09:00", "10:00"),
        TimeRange("11:00", "12:00"),
        TimeRange("13:00", "17:00"),
    ]


def test_cancelled_bookings_are_not_busy(
    calculator, booking_service, bookable_item, two_windows, monday
):
    booking = booking_service.create_booking(bookable_item.id, monday, "10:00", "11:00", "John")
    booking_service.cancel_booking(booking.id)

    slots = calculator.get_available_slots(bookable_item.id, monday)

    assert slots.booked_slots == []
    assert len(slots.available_slots) == 2


def test_non_bookable_item(calculator, non_bookable_item, monday):
    with pytest.raises(NotBookableException):
        calculator.get_available_slots(non_bookable_item.id, monday)


def test_unknown_item(calculator, monday):
    with pytest.raises(NotFoundException):
        calculator.get_available_slots("01HF4G12ABCDEF3456789XYZAB", monday)
