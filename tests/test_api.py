"""End-to-end tests of the staff API: auth, permissions and the booking flows."""

from datetime import datetime, time
from unittest.mock import AsyncMock

import pytest

from salonbook.models.salon import MemberRole, SalonMember, User
from salonbook.services import sms
from salonbook.services.auth import create_access_token, hash_password

from helpers import MONDAY, add_time_block


@pytest.fixture(autouse=True)
def quiet_sms(monkeypatch):
    monkeypatch.setattr(sms, "send_waiting_list_offer", AsyncMock(return_value=True))
    monkeypatch.setattr(sms, "send_booking_confirmation", AsyncMock(return_value=True))


async def make_user(db, salon, email, role=None):
    user = User(email=email, hashed_password=hash_password("testpass123"), is_active=True)
    db.add(user)
    await db.flush()
    if role is not None:
        db.add(SalonMember(salon_id=salon.id, user_id=user.id, role=role))
    await db.commit()
    return {"Authorization": f"Bearer {create_access_token(data={'sub': str(user.id)})}"}


def at(hour):
    return datetime.combine(MONDAY, time(hour, 0))


def booking_json(salon, employee, salon_client, service, start="2030-01-07T10:00:00"):
    return {
        "salon_id": str(salon.id),
        "client_id": str(salon_client.id),
        "employee_id": str(employee.id),
        "service_ids": [str(service.id)],
        "start_time": start,
    }


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_book_then_conflict(client, salon, service, employee, salon_client, auth_headers):
    resp = await client.post(
        "/api/v1/appointments", json=booking_json(salon, employee, salon_client, service), headers=auth_headers
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "PENDING"
    assert data["end_at"] == "2030-01-07T11:00:00"
    assert len(data["confirmation_code"]) == 8

    resp = await client.post(
        "/api/v1/appointments",
        json=booking_json(salon, employee, salon_client, service, start="2030-01-07T10:30:00"),
        headers=auth_headers,
    )
    assert resp.status_code == 409
    body = resp.json()
    assert body["conflict"]["conflict_type"] == "APPOINTMENT"
    assert body["alternatives"]
    assert "2030-01-07T10:00:00" not in body["alternatives"]


@pytest.mark.asyncio
async def test_booking_outside_hours(client, salon, service, employee, salon_client, auth_headers):
    resp = await client.post(
        "/api/v1/appointments",
        json=booking_json(salon, employee, salon_client, service, start="2030-01-07T16:30:00"),
        headers=auth_headers,
    )
    assert resp.status_code == 409
    assert resp.json()["conflict"]["conflict_type"] == "OUTSIDE_HOURS"


@pytest.mark.asyncio
async def test_non_member_forbidden(client, db, salon, service, employee, salon_client):
    headers = await make_user(db, salon, "stranger@example.com")

    resp = await client.post(
        "/api/v1/appointments", json=booking_json(salon, employee, salon_client, service), headers=headers
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_role_permissions(client, db, salon):
    headers = await make_user(db, salon, "desk@example.com", MemberRole.RECEPTIONIST)

    resp = await client.get(f"/api/v1/booking-config/{salon.id}", headers=headers)
    assert resp.status_code == 200
    resp = await client.put(f"/api/v1/booking-config/{salon.id}", json={"slot_interval": 30}, headers=headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_list_and_reschedule(client, salon, service, employee, salon_client, auth_headers):
    resp = await client.post(
        "/api/v1/appointments", json=booking_json(salon, employee, salon_client, service), headers=auth_headers
    )
    appointment_id = resp.json()["id"]

    resp = await client.put(
        f"/api/v1/appointments/{appointment_id}/reschedule",
        json={"start_time": "2030-01-07T14:00:00"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["start_at"] == "2030-01-07T14:00:00"
    assert resp.json()["reschedule_count"] == 1

    resp = await client.get(
        "/api/v1/appointments",
        params={"salon_id": str(salon.id), "status": ["PENDING", "CONFIRMED"]},
        headers=auth_headers,
    )
    assert resp.json()["total"] == 1

    resp = await client.put(
        f"/api/v1/appointments/{appointment_id}/status", json={"status": "DONE"}, headers=auth_headers
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_cancel_reports_waiting_list_matches(client, salon, service, employee, salon_client, auth_headers):
    resp = await client.post(
        "/api/v1/appointments", json=booking_json(salon, employee, salon_client, service), headers=auth_headers
    )
    appointment_id = resp.json()["id"]

    resp = await client.post(
        "/api/v1/waiting-list",
        json={"salon_id": str(salon.id), "client_id": str(salon_client.id), "service_ids": [str(service.id)]},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    entry_id = resp.json()["id"]

    resp = await client.put(
        f"/api/v1/appointments/{appointment_id}/cancel", json={"reason": "Sick"}, headers=auth_headers
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["appointment"]["status"] == "CANCELLED"
    assert data["waiting_list_matches"] == [entry_id]


@pytest.mark.asyncio
async def test_waiting_list_offer_and_accept(client, salon, service, employee, salon_client, auth_headers):
    resp = await client.post(
        "/api/v1/waiting-list",
        json={"salon_id": str(salon.id), "client_id": str(salon_client.id), "service_ids": [str(service.id)]},
        headers=auth_headers,
    )
    entry_id = resp.json()["id"]

    resp = await client.post(
        f"/api/v1/waiting-list/{entry_id}/notify",
        json={"start_time": "2030-01-07T10:00:00", "end_time": "2030-01-07T11:00:00"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "NOTIFIED"
    assert resp.json()["expires_at"] is not None

    resp = await client.post(
        f"/api/v1/waiting-list/{entry_id}/accept", json={"employee_id": str(employee.id)}, headers=auth_headers
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["waiting_list_entry"]["status"] == "ACCEPTED"
    assert data["appointment"]["booking_source"] == "WAITING_LIST"
    assert data["waiting_list_entry"]["appointment_id"] == data["appointment"]["id"]

    resp = await client.get(
        "/api/v1/waiting-list", params={"salon_id": str(salon.id), "status": "WAITING"}, headers=auth_headers
    )
    assert resp.json() == []


@pytest.mark.asyncio
async def test_availability_endpoints(client, db, salon, service, employee, auth_headers):
    await add_time_block(db, salon, employee, at(12), at(13))

    resp = await client.get(
        "/api/v1/availability/slots",
        params={
            "salon_id": str(salon.id),
            "employee_id": str(employee.id),
            "service_ids": [str(service.id)],
            "date": MONDAY.isoformat(),
        },
        headers=auth_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_duration"] == 60
    free = [slot["start_time"] for slot in data["slots"] if slot["available"]]
    assert "2030-01-07T09:00:00" in free
    assert "2030-01-07T12:00:00" not in free

    resp = await client.post(
        "/api/v1/availability/conflicts",
        json={
            "salon_id": str(salon.id),
            "employee_id": str(employee.id),
            "start_time": "2030-01-07T12:30:00",
            "end_time": "2030-01-07T13:30:00",
            "service_id": str(service.id),
        },
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["conflict_type"] == "TIME_BLOCK"


@pytest.mark.asyncio
async def test_recurrence_endpoints(client, auth_headers):
    resp = await client.post(
        "/api/v1/recurrence/expand",
        json={"start": "2030-01-07T10:00:00", "rule": {"frequency": "DAILY", "occurrences": 3}},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["occurrences"] == [
        "2030-01-07T10:00:00",
        "2030-01-08T10:00:00",
        "2030-01-09T10:00:00",
    ]

    resp = await client.post(
        "/api/v1/recurrence/parse",
        json={"rrule": "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE;COUNT=4"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["rule"]["days_of_week"] == [1, 3]

    resp = await client.post("/api/v1/recurrence/parse", json={"rrule": "FREQ=YEARLY"}, headers=auth_headers)
    assert resp.status_code == 400
