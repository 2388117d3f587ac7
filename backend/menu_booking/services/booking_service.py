# backend/menu_booking/services/booking_service.py
"""
Booking Service

Coordinates reservation creation so that, for any (item, date), confirmed
bookings never overlap.

create_booking runs in two phases:

1. Preconditions (no lock held): the item must exist and be bookable, the
   interval must sit inside one active availability rule, and start < end.
2. Atomic phase, serialized per (item_id, booking_date): take the slot lock,
   scan confirmed bookings for an overlap, insert, commit. Any failure rolls
   the whole phase back so nothing partial is ever persisted.

Serialization is layered. The in-process lock registry (or redis, when
configured) orders concurrent requests for the same key, and on PostgreSQL
a transaction-scoped advisory lock extends that guarantee to every process
sharing the database.
"""

from datetime import date
import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.booking_lock import BookingLockRegistry, get_booking_lock_registry
from ..core.config import settings
from ..core.enums import BookingStatus
from ..core.exceptions import (
    AlreadyCancelledException,
    InvalidTimeRangeException,
    NotFoundException,
    OutsideAvailabilityException,
    RepositoryException,
    SlotConflictException,
    TransientBookingException,
    ValidationException,
)
from ..core.time_range import is_valid_range, normalize_time
from ..models.booking import Booking
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from .availability_service import AvailabilityService
from .base import BaseService
from .catalog_service import CatalogService

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        availability_service: Optional[AvailabilityService] = None,
        catalog_service: Optional[CatalogService] = None,
        lock_registry: Optional[BookingLockRegistry] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.catalog_service = catalog_service or CatalogService(db)
        self.availability_service = availability_service or AvailabilityService(
            db, catalog_service=self.catalog_service
        )
        self.lock_registry = lock_registry or get_booking_lock_registry()

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        item_id: str,
        booking_date: date,
        start_time: str,
        end_time: str,
        customer_name: str,
        customer_email: Optional[str] = None,
        customer_phone: Optional[str] = None,
    ) -> Booking:
        """
        Create a CONFIRMED booking if the interval is legal and free.

        Raises:
            NotFoundException: item does not exist
            NotBookableException: item is not bookable
            OutsideAvailabilityException: no single active rule covers the interval
            InvalidTimeRangeException: start_time is not before end_time
            SlotConflictException: a confirmed booking overlaps the interval
            BookingLockTimeoutException: the slot lock could not be taken in time
            TransientBookingException: storage failed during the atomic phase
        """
        start_time, end_time = normalize_time(start_time), normalize_time(end_time)

        try:
            self.catalog_service.require_bookable(item_id)
            if not self.availability_service.is_within_availability(
                item_id, booking_date, start_time, end_time
            ):
                raise OutsideAvailabilityException(
                    item_id,
                    self.availability_service.day_of_week_of(booking_date).value,
                    start_time,
                    end_time,
                )
            if not is_valid_range(start_time, end_time):
                raise InvalidTimeRangeException(start_time, end_time)
        except ValidationException:
            prometheus_metrics.record_booking_outcome("rejected")
            raise

        with self.lock_registry.hold(item_id, booking_date):
            booking = self._insert_if_free(
                item_id=item_id,
                booking_date=booking_date,
                start_time=start_time,
                end_time=end_time,
                customer_name=customer_name,
                customer_email=customer_email,
                customer_phone=customer_phone,
            )

        prometheus_metrics.record_booking_outcome("created")
        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            item_id=item_id,
            booking_date=booking_date.isoformat(),
            start_time=start_time,
            end_time=end_time,
        )
        return booking

    def _insert_if_free(
        self,
        *,
        item_id: str,
        booking_date: date,
        start_time: str,
        end_time: str,
        customer_name: str,
        customer_email: Optional[str],
        customer_phone: Optional[str],
    ) -> Booking:
        """Conflict scan plus insert as one transaction. Caller holds the slot lock."""
        try:
            self.repository.acquire_slot_lock(item_id, booking_date)
            conflict = self.repository.find_conflicting_booking(
                item_id, booking_date, start_time, end_time
            )
            if conflict is not None:
                raise SlotConflictException(
                    conflict.start_time,
                    conflict.end_time,
                    conflicting_booking_id=conflict.id,
                )
            booking = self.repository.create(
                item_id=item_id,
                booking_date=booking_date,
                start_time=start_time,
                end_time=end_time,
                customer_name=customer_name,
                customer_email=customer_email,
                customer_phone=customer_phone,
                status=BookingStatus.CONFIRMED.value,
            )
            self.db.commit()
            return booking
        except SlotConflictException as exc:
            self.db.rollback()
            prometheus_metrics.record_booking_outcome("conflict")
            logger.warning(
                "booking_slot_conflict",
                extra={
                    "item_id": item_id,
                    "booking_date": booking_date.isoformat(),
                    "requested": f"{start_time}-{end_time}",
                    "conflicting_booking_id": exc.details.get("conflicting_booking_id"),
                },
            )
            raise
        except (SQLAlchemyError, RepositoryException) as exc:
            self.db.rollback()
            prometheus_metrics.record_booking_outcome("failed")
            logger.error(
                "booking_atomic_phase_failed",
                extra={
                    "item_id": item_id,
                    "booking_date": booking_date.isoformat(),
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise TransientBookingException(
                retry_after_seconds=settings.booking_retry_after_seconds
            ) from exc

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str) -> Booking:
        """
        Move a CONFIRMED booking to CANCELLED. No conflict check is needed.

        Raises:
            NotFoundException: booking does not exist
            AlreadyCancelledException: booking was already cancelled
        """
        booking = self.get_booking(booking_id)

        # Same key as create, so a cancel never interleaves with a scan for that slot.
        with self.lock_registry.hold(booking.item_id, booking.booking_date):
            self.db.refresh(booking)
            if booking.is_cancelled:
                raise AlreadyCancelledException(booking_id)
            with self.transaction():
                booking.cancel()
                self.db.flush()

        prometheus_metrics.record_booking_outcome("cancelled")
        self.log_operation("cancel_booking", booking_id=booking_id, item_id=booking.item_id)
        return booking

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return booking

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        *,
        page: int = 1,
        limit: Optional[int] = None,
        item_id: Optional[str] = None,
        booking_date: Optional[date] = None,
        status: Optional[BookingStatus] = None,
        customer_name: Optional[str] = None,
    ) -> Tuple[List[Booking], int]:
        """Return one page of bookings and the total number of matches."""
        page = max(page, 1)
        limit = min(max(limit or settings.default_page_size, 1), settings.max_page_size)
        return self.repository.list_bookings(
            offset=(page - 1) * limit,
            limit=limit,
            item_id=item_id,
            booking_date=booking_date,
            status=status,
            customer_name=customer_name,
        )
