"""
Catalog collaborator.

The booking core consumes exactly one fact from the catalog: whether an item
exists and whether it is bookable.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotBookableException, NotFoundException
from ..repositories.factory import RepositoryFactory
from ..repositories.item_repository import ItemRepository
from .base import BaseService


@dataclass(frozen=True)
class ItemSnapshot:
    item_id: str
    exists: bool
    is_bookable: bool


class CatalogService(BaseService):
    def __init__(self, db: Session, item_repository: Optional[ItemRepository] = None):
        super().__init__(db)
        self.item_repository = item_repository or RepositoryFactory.create_item_repository(db)

    def get_item(self, item_id: str) -> ItemSnapshot:
        item = self.item_repository.get_item(item_id)
        if item is None:
            return ItemSnapshot(item_id=item_id, exists=False, is_bookable=False)
        return ItemSnapshot(item_id=item_id, exists=True, is_bookable=bool(item.is_bookable))

    def require_bookable(self, item_id: str) -> ItemSnapshot:
        """Raise NotFound for a missing item and NotBookable for a non-reservable one."""
        snapshot = self.get_item(item_id)
        if not snapshot.exists:
            raise NotFoundException("Item not found", details={"item_id": item_id})
        if not snapshot.is_bookable:
            raise NotBookableException(item_id)
        return snapshot
