"""Amenity booking tests: overlap, capacity, opening hours and approval."""
from datetime import datetime, time, timedelta

from hoa_portal.services.bookings import windows_overlap


def _window(day_offset: int, start_hour: int, end_hour: int) -> dict:
    day = (datetime.utcnow() + timedelta(days=day_offset)).replace(minute=0, second=0, microsecond=0)
    return {
        "start_time": day.replace(hour=start_hour).isoformat(),
        "end_time": day.replace(hour=end_hour).isoformat(),
    }


async def _create_amenity(client, seed, **overrides) -> dict:
    payload = {"association_id": str(seed.association.id), "name": "Clubhouse", "capacity": 40}
    payload.update(overrides)
    response = await client.post("/v1/amenities", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_windows_touching_at_endpoint_do_not_overlap():
    nine = datetime(2026, 5, 1, 9)
    ten = datetime(2026, 5, 1, 10)
    eleven = datetime(2026, 5, 1, 11)

    assert not windows_overlap(nine, ten, ten, eleven)
    assert windows_overlap(nine, eleven, ten, eleven)
    assert windows_overlap(ten, eleven, nine, datetime(2026, 5, 1, 10, 30))


async def test_overlapping_booking_is_rejected_with_conflicts(client, seed):
    amenity = await _create_amenity(client, seed)

    first = await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=_window(3, 10, 12))
    assert first.status_code == 201
    assert first.json()["status"] == "confirmed"

    clash = await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=_window(3, 11, 13))
    assert clash.status_code == 409
    body = clash.json()
    assert body["error"] == "Booking conflicts with an existing booking"
    assert [b["id"] for b in body["details"]] == [first.json()["id"]]

    adjacent = await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=_window(3, 12, 14))
    assert adjacent.status_code == 201


async def test_cancelled_booking_frees_the_window(client, seed):
    amenity = await _create_amenity(client, seed)
    booking = (await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=_window(4, 9, 11))).json()

    cancelled = await client.post(f"/v1/amenities/bookings/{booking['id']}/cancel")
    assert cancelled.json()["status"] == "cancelled"

    check = await client.post(f"/v1/amenities/{amenity['id']}/conflict-check", json=_window(4, 9, 11))
    assert check.json() == {"has_conflict": False, "conflicts": []}

    rebook = await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=_window(4, 9, 11))
    assert rebook.status_code == 201


async def test_end_before_start_is_a_validation_error(client, seed):
    amenity = await _create_amenity(client, seed)
    window = _window(2, 14, 15)
    window["start_time"], window["end_time"] = window["end_time"], window["start_time"]

    response = await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=window)

    assert response.status_code == 400
    assert "End time must be after start time" in response.json()["error"]


async def test_guest_count_over_capacity(client, seed):
    amenity = await _create_amenity(client, seed, capacity=10)

    response = await client.post(
        f"/v1/amenities/{amenity['id']}/bookings",
        json={**_window(2, 10, 11), "guest_count": 11},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Guest count exceeds capacity of 10"


async def test_booking_outside_opening_hours(client, seed):
    amenity = await _create_amenity(
        client, seed, name="Pool", open_time=time(8).isoformat(), close_time=time(20).isoformat()
    )

    late = await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=_window(2, 19, 21))
    assert late.status_code == 400
    assert late.json()["error"].startswith("Bookings must fall within opening hours")

    inside = await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=_window(2, 8, 20))
    assert inside.status_code == 201


async def test_amenity_requiring_approval(client, seed):
    amenity = await _create_amenity(client, seed, requires_approval=True, booking_fee_cents=5000)

    booking = (await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=_window(5, 10, 12))).json()
    assert booking["status"] == "pending"
    assert booking["fee_cents"] == 5000

    approved = await client.post(f"/v1/amenities/bookings/{booking['id']}/approve")
    assert approved.json()["status"] == "confirmed"

    again = await client.post(f"/v1/amenities/bookings/{booking['id']}/approve")
    assert again.status_code == 400


async def test_inactive_amenity_cannot_be_booked(client, seed):
    amenity = await _create_amenity(client, seed)
    assert (await client.delete(f"/v1/amenities/{amenity['id']}")).status_code == 204

    response = await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=_window(2, 10, 11))

    assert response.status_code == 400
    assert response.json()["error"] == "Amenity is not available for booking"


async def test_opening_hours_must_be_set_together(client, seed):
    response = await client.post(
        "/v1/amenities",
        json={"association_id": str(seed.association.id), "name": "Gym", "open_time": "06:00:00"},
    )
    assert response.status_code == 400


async def test_booking_list_window_converts_offsets_to_utc(client, seed):
    amenity = await _create_amenity(client, seed)
    window = _window(5, 10, 12)
    booking = (await client.post(f"/v1/amenities/{amenity['id']}/bookings", json=window)).json()
    day = datetime.fromisoformat(window["start_time"]).date().isoformat()
    url = f"/v1/amenities/{amenity['id']}/bookings"

    # 14:00-16:00 at +05:00 is 09:00-11:00 UTC
    inside = await client.get(url, params={"start": f"{day}T14:00:00+05:00", "end": f"{day}T16:00:00+05:00"})
    assert [b["id"] for b in inside.json()] == [booking["id"]]

    # 08:00 at -05:00 is 13:00 UTC, after the booking ends
    after = await client.get(url, params={"start": f"{day}T08:00:00-05:00"})
    assert after.json() == []
