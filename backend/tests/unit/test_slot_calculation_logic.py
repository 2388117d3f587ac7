# backend/tests/unit/test_slot_calculation_logic.py
"""
Pure slot calculation, independent of the database.

Default mode reports whole rule windows: a single booking anywhere inside a
window removes that whole window from the available list.
"""

from menu_booking.core.enums import SlotMode
from menu_booking.core.time_range import TimeRange
from menu_booking.services.slot_calculator import calculate_available_slots

MORNING = TimeRange("09:00", "12:00")
AFTERNOON = TimeRange("13:00", "17:00")


class TestWindowMode:
    def test_no_bookings_returns_all_windows(self):
        assert calculate_available_slots([MORNING, AFTERNOON], []) == [MORNING, AFTERNOON]

    def test_booking_inside_window_removes_whole_window(self):
        free = calculate_available_slots([MORNING, AFTERNOON], [TimeRange("10:00", "11:00")])
        assert free == [AFTERNOON]

    def test_booking_in_gap_between_windows_removes_nothing(self):
        free = calculate_available_slots([MORNING, AFTERNOON], [TimeRange("12:00", "13:00")])
        assert free == [MORNING, AFTERNOON]

    def test_no_windows_means_no_slots(self):
        assert calculate_available_slots([], [TimeRange("10:00", "11:00")]) == []


class TestSplitMode:
    def test_reports_free_sub_intervals(self):
        free = calculate_available_slots(
            [MORNING, AFTERNOON],
            [TimeRange("10:00", "11:00"), TimeRange("13:00", "14:30")],
            SlotMode.SPLIT,
        )
        assert free == [
            TimeRange("09:00", "10:00"),
            TimeRange("11:00", "12:00"),
            TimeRange("14:30", "17:00"),
        ]

    def test_accepts_string_mode(self):
        free = calculate_available_slots([MORNING], [TimeRange("09:00", "12:00")], "split")
        assert free == []
