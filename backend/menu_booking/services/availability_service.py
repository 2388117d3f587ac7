# backend/menu_booking/services/availability_service.py
"""
Availability Service

Two responsibilities:

1. Resolving availability: deciding whether a requested interval on a date
   falls wholly inside one active weekly rule for the item. This is a pure
   read with no side effects and is used by the booking coordinator.
2. Administering rules: create, update, deactivate and list. Rules are
   never hard-deleted.

A request that spans two rules separated by a gap is NOT available, even
if each half is covered; rules are not merged.
"""

from datetime import date
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import DayOfWeek
from ..core.exceptions import InvalidTimeRangeException, NotFoundException
from ..core.time_range import TimeRange, is_valid_range, normalize_time
from ..models.availability import AvailabilityRule
from ..repositories.availability_repository import AvailabilityRuleRepository
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .catalog_service import CatalogService

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    def __init__(
        self,
        db: Session,
        rule_repository: Optional[AvailabilityRuleRepository] = None,
        catalog_service: Optional[CatalogService] = None,
    ):
        super().__init__(db)
        self.repository = rule_repository or RepositoryFactory.create_availability_rule_repository(db)
        self.catalog_service = catalog_service or CatalogService(db)

    # Resolver

    @staticmethod
    def day_of_week_of(target_date: date) -> DayOfWeek:
        return DayOfWeek.from_date(target_date)

    def get_rules_for_day(self, item_id: str, target_date: date) -> List[AvailabilityRule]:
        """Active rules for the item on the weekday of ``target_date``, earliest first."""
        return self.repository.get_active_rules_for_day(item_id, self.day_of_week_of(target_date))

    def find_covering_rule(
        self, item_id: str, target_date: date, start_time: str, end_time: str
    ) -> Optional[AvailabilityRule]:
        requested = TimeRange.of(start_time, end_time)
        for rule in self.get_rules_for_day(item_id, target_date):
            if rule.time_range.contains(requested):
                return rule
        return None

    def is_within_availability(
        self, item_id: str, target_date: date, start_time: str, end_time: str
    ) -> bool:
        """
        True iff one active rule for the date's weekday fully contains the interval.

        No rule for the day is a plain False, not an error.
        """
        return self.find_covering_rule(item_id, target_date, start_time, end_time) is not None

    # Administration

    @BaseService.measure_operation("create_availability_rule")
    def create_availability_rule(
        self, item_id: str, day_of_week: DayOfWeek, start_time: str, end_time: str
    ) -> AvailabilityRule:
        """
        Create a weekly availability window for a bookable item.

        Raises:
            NotFoundException: item does not exist
            NotBookableException: item is not flagged bookable
            InvalidTimeRangeException: start_time is not before end_time
        """
        start_time, end_time = normalize_time(start_time), normalize_time(end_time)
        self.catalog_service.require_bookable(item_id)
        if not is_valid_range(start_time, end_time):
            raise InvalidTimeRangeException(start_time, end_time)

        with self.transaction():
            rule = self.repository.create(
                item_id=item_id,
                day_of_week=DayOfWeek(day_of_week).value,
                start_time=start_time,
                end_time=end_time,
                is_active=True,
            )
        self.log_operation(
            "create_availability_rule",
            rule_id=rule.id,
            item_id=item_id,
            day_of_week=rule.day_of_week,
        )
        return rule

    def get_availability_rule(self, rule_id: str) -> AvailabilityRule:
        rule = self.repository.get_by_id(rule_id)
        if rule is None:
            raise NotFoundException("Availability not found", details={"rule_id": rule_id})
        return rule

    def list_availability_rules(
        self,
        item_id: Optional[str] = None,
        day_of_week: Optional[DayOfWeek] = None,
        active: Optional[bool] = None,
    ) -> List[AvailabilityRule]:
        return self.repository.list_rules(item_id=item_id, day_of_week=day_of_week, active=active)

    @BaseService.measure_operation("update_availability_rule")
    def update_availability_rule(
        self,
        rule_id: str,
        *,
        day_of_week: Optional[DayOfWeek] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> AvailabilityRule:
        """
        Partially update a rule.

        A single new bound is checked against the rule's other, unchanged
        bound, so the stored range always keeps start < end.
        """
        rule = self.get_availability_rule(rule_id)

        updates: Dict[str, Any] = {}
        if day_of_week is not None:
            updates["day_of_week"] = DayOfWeek(day_of_week).value
        if start_time is not None:
            updates["start_time"] = normalize_time(start_time)
        if end_time is not None:
            updates["end_time"] = normalize_time(end_time)
        if is_active is not None:
            updates["is_active"] = is_active

        effective_start = updates.get("start_time", rule.start_time)
        effective_end = updates.get("end_time", rule.end_time)
        if not is_valid_range(effective_start, effective_end):
            raise InvalidTimeRangeException(effective_start, effective_end)

        if not updates:
            return rule

        with self.transaction():
            updated = self.repository.update(rule_id, **updates)
        self.log_operation("update_availability_rule", rule_id=rule_id, fields=sorted(updates))
        return updated

    @BaseService.measure_operation("deactivate_availability_rule")
    def deactivate_availability_rule(self, rule_id: str) -> None:
        """Soft-delete: the rule stays stored but no longer grants availability."""
        rule = self.get_availability_rule(rule_id)
        with self.transaction():
            rule.deactivate()
            self.db.flush()
        self.log_operation("deactivate_availability_rule", rule_id=rule_id)
