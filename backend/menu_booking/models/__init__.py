"""ORM models. Importing this package registers every mapper on ``Base``."""

from .availability import AvailabilityRule
from .booking import Booking
from .item import Item

__all__ = ["AvailabilityRule", "Booking", "Item"]
