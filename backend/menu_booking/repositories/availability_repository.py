# backend/menu_booking/repositories/availability_repository.py
"""
Availability rule queries.

Rules are looked up by (item_id, day_of_week), which the composite index
``ix_availability_rules_item_day`` serves directly.
"""

from typing import List, Optional

from sqlalchemy import case
from sqlalchemy.orm import Session

from ..core.enums import DayOfWeek
from ..models.availability import AvailabilityRule
from .base_repository import BaseRepository

_WEEKDAY_ORDER = case(
    {day.value: index for index, day in enumerate(DayOfWeek.ordered())},
    value=AvailabilityRule.day_of_week,
    else_=len(DayOfWeek.ordered()),
)


class AvailabilityRuleRepository(BaseRepository[AvailabilityRule]):
    def __init__(self, db: Session):
        super().__init__(db, AvailabilityRule)

    def get_active_rules_for_day(self, item_id: str, day_of_week: DayOfWeek) -> List[AvailabilityRule]:
        """Active rules for one item and weekday, earliest window first."""
        query = (
            self._build_query()
            .filter(
                AvailabilityRule.item_id == item_id,
                AvailabilityRule.day_of_week == DayOfWeek(day_of_week).value,
                AvailabilityRule.is_active.is_(True),
            )
            .order_by(AvailabilityRule.start_time, AvailabilityRule.end_time)
        )
        return self._execute_query(query)

    def list_rules(
        self,
        item_id: Optional[str] = None,
        day_of_week: Optional[DayOfWeek] = None,
        active: Optional[bool] = None,
    ) -> List[AvailabilityRule]:
        """Filtered rules ordered by weekday (MON first) then start time."""
        query = self._build_query()
        if item_id:
            query = query.filter(AvailabilityRule.item_id == item_id)
        if day_of_week:
            query = query.filter(AvailabilityRule.day_of_week == DayOfWeek(day_of_week).value)
        if active is not None:
            query = query.filter(AvailabilityRule.is_active.is_(active))
        query = query.order_by(_WEEKDAY_ORDER, AvailabilityRule.start_time, AvailabilityRule.id)
        return self._execute_query(query)
