#!/usr/bin/env python3
"""
Booking lifecycle flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Tokens are minted locally with the shared JWT secret, so this only works
against a development server configured with the same JWT_SECRET_KEY.

Usage:
    python scripts/flow_booking_lifecycle.py --listing-id listing-tent-42 --owner-id owner-1 --renter-id renter-1
    python scripts/flow_booking_lifecycle.py --listing-id listing-tent-42 --owner-id owner-1 --renter-id renter-1 --deny

Flow:
    1. Renter submits booking request (upfront fee already captured)
    2. Owner confirms (or denies with --deny)
    3. Owner starts the rental
    4. Owner completes the rental
    5. Renter tries to cancel the completed booking (expected 400)
"""

import argparse
import json
import sys
from pathlib import Path

import httpx

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.security import create_access_token  # noqa: E402

BASE_URL = "http://localhost:8000"


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    headers = {"Authorization": f"Bearer {token}"}
    url = f"{BASE_URL}{endpoint}"

    if method == "GET":
        response = httpx.get(url, headers=headers, timeout=10.0, follow_redirects=True)
    elif method == "POST":
        response = httpx.post(url, headers=headers, json=data or {}, timeout=10.0, follow_redirects=True)
    elif method == "PATCH":
        response = httpx.patch(url, headers=headers, json=data or {}, timeout=10.0, follow_redirects=True)
    else:
        raise ValueError(f"Unknown method: {method}")

    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    data = result["data"].get("booking", result["data"])
    if fields:
        filtered = {k: data.get(k) for k in fields if k in data}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(data, indent=2))
    return True


def change_status(token: str, booking_id: str, status: str, message: str | None = None) -> dict:
    body = {"status": status}
    if message:
        body["message"] = message
    return api_request(token, "PATCH", f"/api/v1/bookings/{booking_id}", body)


def main():
    parser = argparse.ArgumentParser(description="Walk a booking through its lifecycle")
    parser.add_argument("--listing-id", required=True, help="Listing id")
    parser.add_argument("--owner-id", required=True, help="Owner user id")
    parser.add_argument("--renter-id", required=True, help="Renter user id")
    parser.add_argument("--start-date", default="2026-07-01", help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end-date", default="2026-07-03", help="End date (YYYY-MM-DD)")
    parser.add_argument("--daily-rate", type=int, default=2500, help="Daily rate in cents")
    parser.add_argument("--upfront-fee", type=int, default=1000, help="Upfront fee in cents")
    parser.add_argument("--deny", action="store_true", help="Owner denies instead of confirming")
    args = parser.parse_args()

    renter_token = create_access_token({"sub": args.renter_id})
    owner_token = create_access_token({"sub": args.owner_id})
    fields = ["id", "status", "payment_required", "refund_eligible", "total_price"]

    # Step 1: Create booking
    print_step(1, "Renter submits booking request")
    booking_result = api_request(renter_token, "POST", "/api/v1/bookings/", {
        "listing_id": args.listing_id,
        "owner_id": args.owner_id,
        "start_date": args.start_date,
        "end_date": args.end_date,
        "daily_rate": args.daily_rate,
        "upfront_fee": args.upfront_fee,
    })
    if not print_result(booking_result, fields):
        sys.exit(1)
    booking_id = booking_result["data"]["id"]

    if args.deny:
        print_step(2, "Owner denies booking")
        if not print_result(change_status(owner_token, booking_id, "denied", "Gear unavailable"), fields):
            sys.exit(1)
        print("\nBooking DENIED")
        return

    # Step 2-4: Owner drives the rental
    for step, (status, title) in enumerate(
        [
            ("confirmed", "Owner confirms booking"),
            ("active", "Owner starts rental"),
            ("completed", "Owner completes rental"),
        ],
        start=2,
    ):
        print_step(step, title)
        if not print_result(change_status(owner_token, booking_id, status), fields):
            sys.exit(1)

    # Step 5: Terminal state is final
    print_step(5, "Renter tries to cancel completed booking")
    cancel_result = change_status(renter_token, booking_id, "cancelled")
    if cancel_result["status"] != 400:
        print(f"UNEXPECTED ({cancel_result['status']}): {json.dumps(cancel_result['data'], indent=2)}")
        sys.exit(1)
    print(f"Rejected as expected: {cancel_result['data'].get('code')}")

    # Final summary
    print_step(6, "Timeline")
    timeline = api_request(renter_token, "GET", f"/api/v1/bookings/{booking_id}/timeline")
    for event in timeline["data"]:
        print(f"  {event['created_at']}  {event['actor_role']:<6}  {event['title']}")

    print("\n" + "="*60)
    print("FULL FLOW COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
