# backend/menu_booking/repositories/factory.py
"""
Repository Factory

Central place for constructing repositories so services can be given
substitutes in tests without touching their constructors' callers.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

if TYPE_CHECKING:
    from .availability_repository import AvailabilityRuleRepository
    from .booking_repository import BookingRepository
    from .item_repository import ItemRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_item_repository(db: Session) -> "ItemRepository":
        """Create repository for catalog item lookups."""
        from .item_repository import ItemRepository

        return ItemRepository(db)

    @staticmethod
    def create_availability_rule_repository(db: Session) -> "AvailabilityRuleRepository":
        """Create repository for availability rule operations."""
        from .availability_repository import AvailabilityRuleRepository

        return AvailabilityRuleRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)
