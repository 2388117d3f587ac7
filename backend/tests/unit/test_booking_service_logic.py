# backend/tests/unit/test_booking_service_logic.py
"""
BookingService precondition ordering and atomic-phase failure handling,
with collaborators mocked out.
"""

from datetime import date
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from menu_booking.core.booking_lock import BookingLockRegistry
from menu_booking.core.enums import DayOfWeek
from menu_booking.core.exceptions import (
    InvalidTimeRangeException,
    NotBookableException,
    OutsideAvailabilityException,
    SlotConflictException,
    TransientBookingException,
)
from menu_booking.models.booking import Booking
from menu_booking.repositories.booking_repository import BookingRepository
from menu_booking.services.availability_service import AvailabilityService
from menu_booking.services.booking_service import BookingService
from menu_booking.services.catalog_service import CatalogService

MONDAY = date(2030, 1, 7)


@pytest.fixture
def collaborators():
    db = Mock(spec=Session)
    repository = Mock(spec=BookingRepository)
    repository.find_conflicting_booking.return_value = None
    catalog = Mock(spec=CatalogService)
    availability = Mock(spec=AvailabilityService)
    availability.is_within_availability.return_value = True
    availability.day_of_week_of.return_value = DayOfWeek.MON
    service = BookingService(
        db,
        repository=repository,
        availability_service=availability,
        catalog_service=catalog,
        lock_registry=BookingLockRegistry(backend="local", timeout_seconds=0.1),
    )
    return service, db, repository, catalog, availability


def _create(service, start="10:00", end="11:00"):
    return service.create_booking("item-1", MONDAY, start, end, "John")


class TestPreconditionOrder:
    def test_not_bookable_checked_first(self, collaborators):
        service, _, repository, catalog, availability = collaborators
        catalog.require_bookable.side_effect = NotBookableException("item-1")
        availability.is_within_availability.return_value = False

        with pytest.raises(NotBookableException):
            _create(service, "11:00", "10:00")
        availability.is_within_availability.assert_not_called()
        repository.create.assert_not_called()

    def test_availability_checked_before_range(self, collaborators):
        service, _, repository, _, availability = collaborators
        availability.is_within_availability.return_value = False

        with pytest.raises(OutsideAvailabilityException) as exc_info:
            _create(service, "11:00", "10:00")
        assert exc_info.value.details["day_of_week"] == "MON"
        repository.find_conflicting_booking.assert_not_called()

    def test_inverted_range_inside_rule_is_invalid(self, collaborators):
        service, _, repository, _, _ = collaborators
        with pytest.raises(InvalidTimeRangeException):
            _create(service, "11:00", "10:00")
        repository.acquire_slot_lock.assert_not_called()


class TestAtomicPhase:
    def test_conflict_rolls_back_and_reports_interval(self, collaborators):
        service, db, repository, _, _ = collaborators
        existing = Mock(spec=Booking)
        existing.id = "01EXISTING"
        existing.start_time = "10:00"
        existing.end_time = "11:00"
        repository.find_conflicting_booking.return_value = existing

        with pytest.raises(SlotConflictException) as exc_info:
            _create(service, "10:30", "11:30")
        assert exc_info.value.details["conflicting_start_time"] == "10:00"
        assert exc_info.value.details["conflicting_booking_id"] == "01EXISTING"
        repository.create.assert_not_called()
        db.rollback.assert_called_once()
        db.commit.assert_not_called()

    def test_storage_failure_is_transient_and_rolled_back(self, collaborators):
        service, db, repository, _, _ = collaborators
        repository.create.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))

        with pytest.raises(TransientBookingException) as exc_info:
            _create(service)
        assert exc_info.value.details["retryable"] is True
        db.rollback.assert_called_once()
        db.commit.assert_not_called()

    def test_success_commits_once(self, collaborators):
        service, db, repository, _, _ = collaborators
        created = Mock(spec=Booking)
        created.id = "01NEW"
        repository.create.return_value = created

        assert _create(service) is created
        repository.acquire_slot_lock.assert_called_once_with("item-1", MONDAY)
        repository.find_conflicting_booking.assert_called_once_with(
            "item-1", MONDAY, "10:00", "11:00"
        )
        db.commit.assert_called_once()
        assert repository.create.call_args.kwargs["status"] == "CONFIRMED"
