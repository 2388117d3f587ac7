# backend/menu_booking/repositories/booking_repository.py
"""
Booking Repository

Data access for reservations, including the overlap scan used inside the
booking coordinator's atomic phase and the PostgreSQL advisory lock that
serializes that phase across processes.

All time comparisons happen on zero-padded "HH:MM" strings, whose
lexicographic order equals chronological order.
"""

from datetime import date
import hashlib
import logging
from typing import List, Optional, Tuple

from sqlalchemy import and_, func, or_, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import BookingStatus
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


def advisory_lock_key(item_id: str, booking_date: date) -> int:
    """Stable signed 64-bit key for pg_advisory_xact_lock."""
    digest = hashlib.blake2b(
        f"booking:{item_id}:{booking_date.isoformat()}".encode("utf-8"), digest_size=8
    ).digest()
    return int.from_bytes(digest, byteorder="big", signed=True)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    # Atomic-phase helpers

    def acquire_slot_lock(self, item_id: str, booking_date: date) -> bool:
        """
        Take a transaction-scoped advisory lock for (item_id, booking_date).

        Only PostgreSQL supports this; other dialects return False and rely on
        the application-level lock registry. The lock is released when the
        surrounding transaction commits or rolls back.
        """
        if self.dialect_name != "postgresql":
            return False
        try:
            self.db.execute(
                text("SELECT pg_advisory_xact_lock(:key)"),
                {"key": advisory_lock_key(item_id, booking_date)},
            )
            return True
        except SQLAlchemyError as e:
            self.logger.error(f"Error acquiring advisory lock: {str(e)}")
            raise RepositoryException(f"Failed to acquire slot lock: {str(e)}") from e

    def find_conflicting_booking(
        self,
        item_id: str,
        booking_date: date,
        start_time: str,
        end_time: str,
    ) -> Optional[Booking]:
        """
        First CONFIRMED booking on the same item and date overlapping [start, end).

        Args:
            item_id: Item being reserved
            booking_date: Reservation date
            start_time: Proposed start ("HH:MM")
            end_time: Proposed end ("HH:MM")

        Returns:
            The earliest conflicting booking, or None when the interval is free
        """
        query = self._build_query().filter(
            Booking.item_id == item_id,
            Booking.booking_date == booking_date,
            Booking.status == BookingStatus.CONFIRMED.value,
            or_(
                # proposed start falls inside an existing booking
                and_(Booking.start_time <= start_time, Booking.end_time > start_time),
                # proposed end falls inside an existing booking
                and_(Booking.start_time < end_time, Booking.end_time >= end_time),
                # proposed interval engulfs an existing booking
                and_(Booking.start_time >= start_time, Booking.end_time <= end_time),
            ),
        )
        return self._execute_first(query.order_by(Booking.start_time))

    # Read helpers

    def get_confirmed_for_date(self, item_id: str, booking_date: date) -> List[Booking]:
        """CONFIRMED bookings for an item on a date, ordered by start time."""
        query = (
            self._build_query()
            .filter(
                Booking.item_id == item_id,
                Booking.booking_date == booking_date,
                Booking.status == BookingStatus.CONFIRMED.value,
            )
            .order_by(Booking.start_time)
        )
        return self._execute_query(query)

    def list_bookings(
        self,
        *,
        offset: int,
        limit: int,
        item_id: Optional[str] = None,
        booking_date: Optional[date] = None,
        status: Optional[BookingStatus] = None,
        customer_name: Optional[str] = None,
    ) -> Tuple[List[Booking], int]:
        """
        Filtered page of bookings plus the total match count.

        ``customer_name`` is a case-insensitive substring match. Results are
        ordered newest date first, then by start time.
        """
        query = self._build_query()
        if item_id:
            query = query.filter(Booking.item_id == item_id)
        if booking_date:
            query = query.filter(Booking.booking_date == booking_date)
        if status:
            query = query.filter(Booking.status == BookingStatus(status).value)
        if customer_name:
            needle = (
                customer_name.lower()
                .replace("\\", "\\\\")
                .replace("%", "\\%")
                .replace("_", "\\_")
            )
            query = query.filter(
                func.lower(Booking.customer_name).like(f"%{needle}%", escape="\\")
            )

        total = self._execute_count(query)
        page = query.order_by(
            Booking.booking_date.desc(), Booking.start_time.asc(), Booking.id.asc()
        ).offset(offset).limit(limit)
        return self._execute_query(page), total
