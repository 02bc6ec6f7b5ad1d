"""End-to-end tests for the booking endpoints."""

import uuid

from conftest import OWNER_ID, RENTER_ID

BASE = "/api/v1/bookings"


async def _create(client, renter_headers) -> dict:
    response = await client.post(
        f"{BASE}/",
        json={
            "listing_id": "listing-kayak-7",
            "owner_id": OWNER_ID,
            "start_date": "2026-08-10",
            "end_date": "2026-08-11",
            "daily_rate": 4000,
            "upfront_fee": 1500,
            "upfront_payment_id": "pi_upfront_abc",
        },
        headers=renter_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _patch(client, booking_id, headers, **body):
    return await client.patch(f"{BASE}/{booking_id}", json=body, headers=headers)


async def test_create_booking(client, renter_headers):
    booking = await _create(client, renter_headers)
    assert booking["status"] == "pending_owner_approval"
    assert booking["renter_id"] == RENTER_ID
    assert booking["rental_days"] == 2
    assert booking["rental_fee"] == 8000
    assert booking["total_price"] == 9500
    assert booking["payment_required"] is False
    assert booking["refund_eligible"] is True


async def test_create_booking_rejects_inverted_dates(client, renter_headers):
    response = await client.post(
        f"{BASE}/",
        json={
            "listing_id": "listing-kayak-7",
            "owner_id": OWNER_ID,
            "start_date": "2026-08-10",
            "end_date": "2026-08-01",
            "daily_rate": 4000,
            "upfront_fee": 1500,
        },
        headers=renter_headers,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_owner_lifecycle_to_completion(client, renter_headers, owner_headers):
    booking_id = (await _create(client, renter_headers))["id"]

    response = await _patch(client, booking_id, owner_headers, status="confirmed")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["booking"]["status"] == "confirmed"
    assert body["booking"]["payment_required"] is True

    response = await _patch(client, booking_id, owner_headers, status="active")
    assert response.status_code == 200
    assert response.json()["booking"]["refund_eligible"] is False

    response = await _patch(client, booking_id, owner_headers, status="completed")
    assert response.status_code == 200
    assert response.json()["booking"]["completed_at"] is not None

    response = await _patch(client, booking_id, owner_headers, status="cancelled")
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_STATUS_TRANSITION"

    timeline = await client.get(f"{BASE}/{booking_id}/timeline", headers=renter_headers)
    assert timeline.status_code == 200
    assert [e["sequence"] for e in timeline.json()] == [1, 2, 3, 4]
    assert [e["to_status"] for e in timeline.json()] == [
        "pending_owner_approval",
        "confirmed",
        "active",
        "completed",
    ]


async def test_renter_cannot_confirm(client, renter_headers):
    booking_id = (await _create(client, renter_headers))["id"]

    response = await _patch(client, booking_id, renter_headers, status="confirmed")
    assert response.status_code == 403
    assert response.json()["code"] == "ACCESS_DENIED"

    detail = await client.get(f"{BASE}/{booking_id}", headers=renter_headers)
    assert detail.json()["booking"]["status"] == "pending_owner_approval"


async def test_owner_cannot_deny_confirmed_booking(client, renter_headers, owner_headers):
    booking_id = (await _create(client, renter_headers))["id"]
    await _patch(client, booking_id, owner_headers, status="confirmed")

    response = await _patch(client, booking_id, owner_headers, status="denied")
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_STATUS_TRANSITION"


async def test_renter_cancels_confirmed_booking_with_message(client, renter_headers, owner_headers):
    booking_id = (await _create(client, renter_headers))["id"]
    await _patch(client, booking_id, owner_headers, status="confirmed")

    response = await _patch(
        client, booking_id, renter_headers, status="cancelled", message="Trip postponed"
    )
    assert response.status_code == 200
    booking = response.json()["booking"]
    assert booking["status"] == "cancelled"
    assert booking["renter_message"] == "Trip postponed"
    assert booking["cancelled_at"] is not None


async def test_owner_confirmation_records_rental_payment(client, renter_headers, owner_headers):
    booking_id = (await _create(client, renter_headers))["id"]

    response = await _patch(
        client, booking_id, owner_headers, status="confirmed", rental_payment_id="pi_rental"
    )
    assert response.status_code == 200
    assert response.json()["booking"]["rental_payment_id"] == "pi_rental"
    assert "owner_notes" not in response.json()["booking"]

    detail = await client.get(f"{BASE}/{booking_id}", headers=renter_headers)
    assert detail.json()["booking"]["rental_payment_id"] == "pi_rental"


async def test_rental_payment_only_accepted_on_confirmation(client, renter_headers, owner_headers):
    booking_id = (await _create(client, renter_headers))["id"]
    await _patch(client, booking_id, owner_headers, status="confirmed")

    response = await _patch(
        client, booking_id, owner_headers, status="active", rental_payment_id="pi_late"
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"

    detail = await client.get(f"{BASE}/{booking_id}", headers=owner_headers)
    assert detail.json()["booking"]["status"] == "confirmed"
    assert detail.json()["booking"]["rental_payment_id"] is None


async def test_missing_or_unknown_status_is_validation_error(client, renter_headers, owner_headers):
    booking_id = (await _create(client, renter_headers))["id"]

    response = await client.patch(f"{BASE}/{booking_id}", json={}, headers=owner_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"

    response = await _patch(client, booking_id, owner_headers, status="paid")
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_requires_credentials(client, renter_headers):
    booking_id = (await _create(client, renter_headers))["id"]

    response = await client.patch(f"{BASE}/{booking_id}", json={"status": "confirmed"})
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"

    response = await client.get(
        f"{BASE}/{booking_id}", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401


async def test_stranger_is_denied(client, renter_headers, stranger_headers):
    booking_id = (await _create(client, renter_headers))["id"]

    response = await _patch(client, booking_id, stranger_headers, status="cancelled")
    assert response.status_code == 403
    assert response.json()["code"] == "ACCESS_DENIED"

    response = await client.get(f"{BASE}/{booking_id}", headers=stranger_headers)
    assert response.status_code == 403


async def test_unknown_booking_is_not_found(client, owner_headers):
    response = await _patch(client, uuid.uuid4(), owner_headers, status="confirmed")
    assert response.status_code == 404
    assert response.json()["code"] == "BOOKING_NOT_FOUND"


async def test_get_booking_uses_role_specific_message(client, renter_headers, owner_headers):
    booking_id = (await _create(client, renter_headers))["id"]

    as_owner = (await client.get(f"{BASE}/{booking_id}", headers=owner_headers)).json()
    as_renter = (await client.get(f"{BASE}/{booking_id}", headers=renter_headers)).json()

    assert as_owner["user_role"] == "owner"
    assert as_renter["user_role"] == "renter"
    assert as_owner["status_display"] == "Waiting for owner approval"
    assert as_owner["status_message"] == "You have a new booking request that needs your approval."
    assert as_renter["status_message"].startswith("Your booking request has been submitted")


async def test_list_my_bookings(client, renter_headers, owner_headers):
    await _create(client, renter_headers)
    await _create(client, renter_headers)

    response = await client.get(f"{BASE}/", params={"role": "owner"}, headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 2

    response = await client.get(
        f"{BASE}/", params={"status": "confirmed"}, headers=renter_headers
    )
    assert response.json()["total"] == 0


async def test_status_catalog(client):
    response = await client.get(f"{BASE}/statuses")
    assert response.status_code == 200
    by_status = {item["status"]: item for item in response.json()}
    assert set(by_status) == {
        "pending_owner_approval",
        "confirmed",
        "active",
        "completed",
        "cancelled",
        "denied",
    }
    assert by_status["pending_owner_approval"]["allowed_transitions"] == ["confirmed", "denied"]
    assert by_status["completed"]["is_terminal"] is True
    assert by_status["confirmed"]["payment_required"] is True


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
