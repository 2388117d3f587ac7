# backend/tests/routes/test_booking_routes.py
"""
HTTP tests for /api/v1/bookings.

Every error response is a problem document, and the ``code`` field is what
clients branch on, so the tests assert on it rather than on messages.
"""

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from menu_booking.api.dependencies import get_lock_registry
from menu_booking.core.booking_lock import BookingLockRegistry
from menu_booking.core.enums import DayOfWeek
from menu_booking.main import app

BASE = "/api/v1/bookings"
MISSING_ID = "01HF4G12ABCDEF3456789XYZAB"


@pytest.fixture
def monday_rule(bookable_item, add_rule):
    return add_rule(bookable_item, DayOfWeek.MON, "09:00", "17:00")


def _payload(item_id, booking_date, start="10:00", end="11:00", **extra):
    body = {
        "item_id": item_id,
        "booking_date": booking_date.isoformat(),
        "start_time": start,
        "end_time": end,
        "customer_name": "John Doe",
    }
    body.update(extra)
    return body


class TestCreateBooking:
    def test_created(self, client, bookable_item, monday_rule, monday):
        response = client.post(
            BASE,
            json=_payload(bookable_item.id, monday, customer_email="john@example.com"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "CONFIRMED"
        assert data["item_id"] == bookable_item.id
        assert data["booking_date"] == monday.isoformat()
        assert (data["start_time"], data["end_time"]) == ("10:00", "11:00")
        assert data["customer_email"] == "john@example.com"
        assert len(data["id"]) == 26

    def test_overlap_is_409(self, client, bookable_item, monday_rule, monday):
        assert client.post(BASE, json=_payload(bookable_item.id, monday)).status_code == 201

        response = client.post(BASE, json=_payload(bookable_item.id, monday, "10:30", "11:30"))

        assert response.status_code == 409
        problem = response.json()
        assert problem["code"] == "SLOT_CONFLICT"
        assert problem["detail"] == "Time slot already booked. Conflicting booking: 10:00-11:00"
        assert problem["errors"]["conflicting_start_time"] == "10:00"

    def test_adjacent_is_201(self, client, bookable_item, monday_rule, monday):
        client.post(BASE, json=_payload(bookable_item.id, monday))
        response = client.post(BASE, json=_payload(bookable_item.id, monday, "11:00", "12:00"))
        assert response.status_code == 201

    def test_outside_availability_is_400(self, client, bookable_item, monday_rule, upcoming):
        tuesday = upcoming(DayOfWeek.TUE)
        response = client.post(BASE, json=_payload(bookable_item.id, tuesday))

        assert response.status_code == 400
        assert response.json()["code"] == "OUTSIDE_AVAILABILITY"

    def test_not_bookable_is_400(self, client, non_bookable_item, monday):
        response = client.post(BASE, json=_payload(non_bookable_item.id, monday))
        assert response.status_code == 400
        assert response.json()["code"] == "ITEM_NOT_BOOKABLE"

    def test_unknown_item_is_404(self, client, monday):
        response = client.post(BASE, json=_payload(MISSING_ID, monday))
        assert response.status_code == 404

    def test_inverted_range_inside_rule_is_400(self, client, bookable_item, monday_rule, monday):
        response = client.post(BASE, json=_payload(bookable_item.id, monday, "11:00", "10:00"))
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_TIME_RANGE"

    def test_empty_range_is_400(self, client, bookable_item, monday_rule, monday):
        response = client.post(BASE, json=_payload(bookable_item.id, monday, "10:00", "10:00"))
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_TIME_RANGE"

    def test_inverted_range_outside_rules_reports_availability_first(
        self, client, bookable_item, monday_rule, monday
    ):
        response = client.post(BASE, json=_payload(bookable_item.id, monday, "18:00", "08:00"))
        assert response.status_code == 400
        assert response.json()["code"] == "OUTSIDE_AVAILABILITY"

    def test_unreachable_lock_backend_is_503_with_retry_after(
        self, client, bookable_item, monday_rule, monday
    ):
        redis_client = MagicMock()
        redis_client.lock.return_value.acquire.side_effect = RedisConnectionError("down")
        registry = BookingLockRegistry(
            backend="redis", redis_client=redis_client, retry_after_seconds=3
        )
        app.dependency_overrides[get_lock_registry] = lambda: registry

        response = client.post(BASE, json=_payload(bookable_item.id, monday))

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "3"
        assert response.json()["code"] == "BOOKING_LOCK_UNAVAILABLE"
        assert response.json()["errors"]["retryable"] is True
        assert client.get(BASE, params={"item_id": bookable_item.id}).json()["total"] == 0

    @pytest.mark.parametrize("bad_time", ["9:00", "24:00", "10:60", "10.00"])
    def test_malformed_time_is_422(self, client, bookable_item, monday, bad_time):
        response = client.post(BASE, json=_payload(bookable_item.id, monday, start=bad_time))
        assert response.status_code == 422

    def test_past_date_is_422(self, client, bookable_item, monday_rule):
        yesterday = date.today() - timedelta(days=1)
        response = client.post(BASE, json=_payload(bookable_item.id, yesterday))
        assert response.status_code == 422

    def test_unknown_field_is_422(self, client, bookable_item, monday):
        response = client.post(BASE, json=_payload(bookable_item.id, monday, rule_id="x"))
        assert response.status_code == 422

    def test_missing_customer_name_is_422(self, client, bookable_item, monday):
        body = _payload(bookable_item.id, monday)
        del body["customer_name"]
        assert client.post(BASE, json=body).status_code == 422


class TestGetAndCancel:
    def test_get_round_trip(self, client, bookable_item, monday_rule, monday):
        created = client.post(BASE, json=_payload(bookable_item.id, monday)).json()

        response = client.get(f"{BASE}/{created['id']}")

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]
        assert response.json()["customer_name"] == "John Doe"

    def test_get_unknown_is_404(self, client):
        response = client.get(f"{BASE}/{MISSING_ID}")
        assert response.status_code == 404

    def test_get_malformed_id_is_422(self, client):
        assert client.get(f"{BASE}/not-a-ulid").status_code == 422

    def test_cancel_then_rebook(self, client, bookable_item, monday_rule, monday):
        created = client.post(BASE, json=_payload(bookable_item.id, monday)).json()

        response = client.patch(f"{BASE}/{created['id']}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
        assert response.json()["cancelled_at"] is not None

        again = client.patch(f"{BASE}/{created['id']}/cancel")
        assert again.status_code == 409
        assert again.json()["code"] == "ALREADY_CANCELLED"

        rebooked = client.post(BASE, json=_payload(bookable_item.id, monday))
        assert rebooked.status_code == 201

    def test_cancel_unknown_is_404(self, client):
        assert client.patch(f"{BASE}/{MISSING_ID}/cancel").status_code == 404


class TestListBookings:
    def test_paginated_and_filtered(self, client, bookable_item, monday_rule, monday):
        for start, end in [("09:00", "10:00"), ("10:00", "11:00"), ("11:00", "12:00")]:
            client.post(BASE, json=_payload(bookable_item.id, monday, start, end))

        response = client.get(BASE, params={"page": 1, "limit": 2, "item_id": bookable_item.id})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["total_pages"] == 2
        assert data["has_next"] is True
        assert data["has_prev"] is False
        assert [b["start_time"] for b in data["items"]] == ["09:00", "10:00"]

    def test_status_filter(self, client, bookable_item, monday_rule, monday):
        created = client.post(BASE, json=_payload(bookable_item.id, monday)).json()
        client.patch(f"{BASE}/{created['id']}/cancel")

        confirmed = client.get(BASE, params={"status": "CONFIRMED"}).json()
        cancelled = client.get(BASE, params={"status": "CANCELLED"}).json()
        assert (confirmed["total"], cancelled["total"]) == (0, 1)

    def test_limit_over_maximum_is_422(self, client):
        assert client.get(BASE, params={"limit": 1000}).status_code == 422


class TestAvailableSlots:
    def test_window_mode(self, client, bookable_item, add_rule, monday):
        add_rule(bookable_item, DayOfWeek.MON, "09:00", "12:00")
        add_rule(bookable_item, DayOfWeek.MON, "13:00", "17:00")
        client.post(BASE, json=_payload(bookable_item.id, monday))

        response = client.get(
            f"{BASE}/available-slots/{bookable_item.id}", params={"date": monday.isoformat()}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["day_of_week"] == "MON"
        assert data["mode"] == "window"
        assert len(data["availability_rules"]) == 2
        assert data["booked_slots"] == [
            {"start_time": "10:00", "end_time": "11:00", "customer_name": "John Doe"}
        ]
        assert data["available_slots"] == [{"start_time": "13:00", "end_time": "17:00"}]

    def test_split_mode(self, client, bookable_item, monday_rule, monday):
        client.post(BASE, json=_payload(bookable_item.id, monday))

        response = client.get(
            f"{BASE}/available-slots/{bookable_item.id}",
            params={"date": monday.isoformat(), "mode": "split"},
        )

        assert response.json()["available_slots"] == [
            {"start_time": "09:00", "end_time": "10:00"},
            {"start_time": "11:00", "end_time": "17:00"},
        ]

    def test_no_rules_is_all_empty(self, client, bookable_item, upcoming):
        sunday = upcoming(DayOfWeek.SUN)
        data = client.get(
            f"{BASE}/available-slots/{bookable_item.id}", params={"date": sunday.isoformat()}
        ).json()

        assert data["availability_rules"] == []
        assert data["booked_slots"] == []
        assert data["available_slots"] == []

    def test_not_bookable_is_400(self, client, non_bookable_item, monday):
        response = client.get(
            f"{BASE}/available-slots/{non_bookable_item.id}", params={"date": monday.isoformat()}
        )
        assert response.status_code == 400

    def test_unknown_item_is_404(self, client, monday):
        response = client.get(
            f"{BASE}/available-slots/{MISSING_ID}", params={"date": monday.isoformat()}
        )
        assert response.status_code == 404
