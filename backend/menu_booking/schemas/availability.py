# backend/menu_booking/schemas/availability.py
"""Availability rule schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..core.enums import DayOfWeek
from ..core.time_range import TIME_PATTERN
from ._strict_base import StrictModel, StrictRequestModel


class AvailabilityRuleCreate(StrictRequestModel):
    item_id: str = Field(..., min_length=1, description="Item the rule applies to")
    day_of_week: DayOfWeek = Field(..., description="MON..SUN")
    start_time: str = Field(..., pattern=TIME_PATTERN, examples=["09:00"])
    end_time: str = Field(..., pattern=TIME_PATTERN, examples=["17:00"])


class AvailabilityRuleUpdate(StrictRequestModel):
    """
    Partial update. Time order is checked by the service, using the stored
    value for any bound that is not sent.
    """

    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    is_active: Optional[bool] = None


class AvailabilityRuleResponse(StrictModel):
    id: str
    item_id: str
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
