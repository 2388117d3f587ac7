"""
FastAPI dependency providers.

Each request gets its own Session via ``get_db``; services are built on top
of it so nothing shares a session across threads.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..core.booking_lock import BookingLockRegistry, get_booking_lock_registry
from ..database import get_db
from ..services.availability_service import AvailabilityService
from ..services.booking_service import BookingService
from ..services.slot_calculator import SlotCalculator


def get_lock_registry() -> BookingLockRegistry:
    return get_booking_lock_registry()


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    lock_registry: BookingLockRegistry = Depends(get_lock_registry),
) -> BookingService:
    return BookingService(db, lock_registry=lock_registry)


def get_slot_calculator(db: Session = Depends(get_db)) -> SlotCalculator:
    return SlotCalculator(db)


__all__ = [
    "get_availability_service",
    "get_booking_service",
    "get_db",
    "get_lock_registry",
    "get_slot_calculator",
]
