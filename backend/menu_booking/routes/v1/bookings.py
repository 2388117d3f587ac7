# backend/menu_booking/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService and SlotCalculator.

Endpoints:
    GET /available-slots/{item_id} - Free/busy breakdown for a date
    GET / - List bookings with filters and pagination
    POST / - Create a booking
    GET /{booking_id} - Booking details
    PATCH /{booking_id}/cancel - Cancel a booking
"""

import asyncio
from datetime import date
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from ...api.dependencies import get_booking_service, get_slot_calculator
from ...core.config import settings
from ...core.enums import BookingStatus, SlotMode
from ...core.exceptions import DomainException
from ...models.booking import Booking
from ...schemas.availability import AvailabilityRuleResponse
from ...schemas.base_responses import PaginatedResponse
from ...schemas.booking import (
    AvailableSlotsResponse,
    BookedSlotResponse,
    BookingCreate,
    BookingResponse,
    TimeSlot,
)
from ...services.booking_service import BookingService
from ...services.slot_calculator import AvailableSlots, SlotCalculator

logger = logging.getLogger(__name__)

# V1 router - no prefix here, added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _to_response(booking: Booking) -> BookingResponse:
    return BookingResponse.model_validate(booking)


def _slots_to_response(slots: AvailableSlots) -> AvailableSlotsResponse:
    return AvailableSlotsResponse(
        item_id=slots.item_id,
        date=slots.date,
        day_of_week=slots.day_of_week,
        mode=slots.mode,
        availability_rules=[
            AvailabilityRuleResponse.model_validate(rule) for rule in slots.availability_rules
        ],
        booked_slots=[
            BookedSlotResponse(
                start_time=b.start_time, end_time=b.end_time, customer_name=b.customer_name
            )
            for b in slots.booked_slots
        ],
        available_slots=[
            TimeSlot(start_time=slot.start, end_time=slot.end) for slot in slots.available_slots
        ],
    )


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get(
    "/available-slots/{item_id}",
    response_model=AvailableSlotsResponse,
    responses={
        400: {"description": "Item is not bookable"},
        404: {"description": "Item not found"},
    },
)
async def get_available_slots(
    item_id: str = Path(..., description="Item ULID", pattern=ULID_PATH_PATTERN),
    target_date: Optional[date] = Query(
        None, alias="date", description="Date to inspect (YYYY-MM-DD); defaults to today"
    ),
    mode: SlotMode = Query(SlotMode.WINDOW, description="window (whole rule windows) or split"),
    slot_calculator: SlotCalculator = Depends(get_slot_calculator),
) -> AvailableSlotsResponse:
    """Free/busy breakdown of an item's availability windows on one date."""
    try:
        slots = await asyncio.to_thread(
            slot_calculator.get_available_slots, item_id, target_date or date.today(), mode
        )
        return _slots_to_response(slots)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Collection routes
# ============================================================================


@router.get("", response_model=PaginatedResponse[BookingResponse])
async def list_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    item_id: Optional[str] = Query(None),
    booking_date: Optional[date] = Query(None),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    customer_name: Optional[str] = Query(None, min_length=1),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[BookingResponse]:
    """List bookings, newest date first."""
    try:
        bookings, total = await asyncio.to_thread(
            booking_service.list_bookings,
            page=page,
            limit=limit,
            item_id=item_id,
            booking_date=booking_date,
            status=status_filter,
            customer_name=customer_name,
        )
        return PaginatedResponse[BookingResponse].build(
            [_to_response(b) for b in bookings], total=total, page=page, limit=limit
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Item not bookable, outside availability, or invalid range"},
        404: {"description": "Item not found"},
        409: {"description": "Time slot already booked"},
        503: {"description": "Temporarily unable to book; retry after the given delay"},
    },
)
async def create_booking(
    booking_data: BookingCreate = Body(...),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Create a booking.

    The booking is CONFIRMED immediately if it lies inside an availability
    rule and overlaps no other confirmed booking for the same item and date.
    """
    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking,
            booking_data.item_id,
            booking_data.booking_date,
            booking_data.start_time,
            booking_data.end_time,
            booking_data.customer_name,
            booking_data.customer_email,
            booking_data.customer_phone,
        )
        return _to_response(booking)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 3: Dynamic routes (with path parameters - placed last)
# ============================================================================


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def get_booking(
    booking_id: str = Path(..., description="Booking ULID", pattern=ULID_PATH_PATTERN),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.get_booking, booking_id)
        return _to_response(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    responses={
        404: {"description": "Booking not found"},
        409: {"description": "Booking already cancelled"},
    },
)
async def cancel_booking(
    booking_id: str = Path(..., description="Booking ULID", pattern=ULID_PATH_PATTERN),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Cancel a booking, freeing its time slot."""
    try:
        booking = await asyncio.to_thread(booking_service.cancel_booking, booking_id)
        return _to_response(booking)
    except DomainException as e:
        handle_domain_exception(e)
