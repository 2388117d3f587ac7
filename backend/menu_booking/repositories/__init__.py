from .availability_repository import AvailabilityRuleRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .item_repository import ItemRepository

__all__ = [
    "AvailabilityRuleRepository",
    "BaseRepository",
    "BookingRepository",
    "ItemRepository",
    "RepositoryFactory",
]
