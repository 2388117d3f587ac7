"""Read-only access to catalog items."""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.item import Item
from .base_repository import BaseRepository


class ItemRepository(BaseRepository[Item]):
    def __init__(self, db: Session):
        super().__init__(db, Item)

    def get_item(self, item_id: str) -> Optional[Item]:
        # Existence does not depend on is_active; only is_bookable gates reservations.
        return self.get_by_id(item_id)
