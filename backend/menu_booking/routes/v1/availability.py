# backend/menu_booking/routes/v1/availability.py
"""
Availability rule routes - API v1

Endpoints:
    GET / - List rules (filter by item_id, day_of_week, active)
    POST / - Create a rule for a bookable item
    GET /{rule_id} - Rule details
    PATCH /{rule_id} - Partial update
    PATCH /{rule_id}/deactivate - Soft delete
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status

from ...api.dependencies import get_availability_service
from ...core.enums import DayOfWeek
from ...core.exceptions import DomainException
from ...schemas.availability import (
    AvailabilityRuleCreate,
    AvailabilityRuleResponse,
    AvailabilityRuleUpdate,
)
from ...schemas.base_responses import SuccessResponse
from ...services.availability_service import AvailabilityService
from .bookings import ULID_PATH_PATTERN, handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


@router.get("", response_model=List[AvailabilityRuleResponse])
async def list_availability_rules(
    item_id: Optional[str] = Query(None),
    day_of_week: Optional[DayOfWeek] = Query(None),
    active: Optional[bool] = Query(None),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[AvailabilityRuleResponse]:
    rules = await asyncio.to_thread(
        availability_service.list_availability_rules,
        item_id=item_id,
        day_of_week=day_of_week,
        active=active,
    )
    return [AvailabilityRuleResponse.model_validate(rule) for rule in rules]


@router.post(
    "",
    response_model=AvailabilityRuleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Item not bookable or invalid time range"},
        404: {"description": "Item not found"},
    },
)
async def create_availability_rule(
    payload: AvailabilityRuleCreate = Body(...),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityRuleResponse:
    try:
        rule = await asyncio.to_thread(
            availability_service.create_availability_rule,
            payload.item_id,
            payload.day_of_week,
            payload.start_time,
            payload.end_time,
        )
        return AvailabilityRuleResponse.model_validate(rule)
    except DomainException as e:
        handle_domain_exception(e)


@router.get(
    "/{rule_id}",
    response_model=AvailabilityRuleResponse,
    responses={404: {"description": "Availability not found"}},
)
async def get_availability_rule(
    rule_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityRuleResponse:
    try:
        rule = await asyncio.to_thread(availability_service.get_availability_rule, rule_id)
        return AvailabilityRuleResponse.model_validate(rule)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch(
    "/{rule_id}",
    response_model=AvailabilityRuleResponse,
    responses={
        400: {"description": "Invalid time range"},
        404: {"description": "Availability not found"},
    },
)
async def update_availability_rule(
    rule_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    payload: AvailabilityRuleUpdate = Body(...),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityRuleResponse:
    try:
        rule = await asyncio.to_thread(
            availability_service.update_availability_rule,
            rule_id,
            **payload.model_dump(exclude_unset=True, exclude_none=True),
        )
        return AvailabilityRuleResponse.model_validate(rule)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch(
    "/{rule_id}/deactivate",
    response_model=SuccessResponse,
    responses={404: {"description": "Availability not found"}},
)
async def deactivate_availability_rule(
    rule_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SuccessResponse:
    """Soft delete: the rule is kept but no longer grants availability."""
    try:
        await asyncio.to_thread(availability_service.deactivate_availability_rule, rule_id)
        return SuccessResponse(message="Availability deactivated successfully")
    except DomainException as e:
        handle_domain_exception(e)
