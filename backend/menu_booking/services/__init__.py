from .availability_service import AvailabilityService
from .base import BaseService
from .booking_service import BookingService
from .catalog_service import CatalogService, ItemSnapshot
from .slot_calculator import SlotCalculator, calculate_available_slots

__all__ = [
    "AvailabilityService",
    "BaseService",
    "BookingService",
    "CatalogService",
    "ItemSnapshot",
    "SlotCalculator",
    "calculate_available_slots",
]
