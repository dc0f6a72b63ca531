"""Tests for the waiting list and its offer lifecycle."""

from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from salonbook.core.exceptions import (
    AppointmentConflictError,
    BookingValidationError,
    DuplicateWaitingListEntry,
    InvalidStatusTransition,
    OfferExpiredError,
)
from salonbook.models.appointment import BookingSource
from salonbook.models.waiting_list import WaitingListStatus
from salonbook.schemas.waiting_list import WaitingListCreate
from salonbook.services import sms
from salonbook.services.waiting_list import (
    accept_waiting_list_slot,
    add_to_waiting_list,
    cancel_waiting_list_entry,
    expire_waiting_list_offers,
    find_waiting_list_matches,
    list_waiting_list,
    notify_waiting_list_client,
    update_waiting_list_entry,
)

from helpers import add_appointment

SLOT_START = datetime(2030, 1, 7, 10, 0)
SLOT_END = datetime(2030, 1, 7, 11, 0)
NOW = datetime(2030, 1, 1, 12, 0)


@pytest.fixture(autouse=True)
def offer_sms(monkeypatch):
    sender = AsyncMock(return_value=True)
    monkeypatch.setattr(sms, "send_waiting_list_offer", sender)
    return sender


async def enqueue(repos, salon, client, service, **extra):
    return await add_to_waiting_list(
        repos,
        WaitingListCreate(salon_id=salon.id, client_id=client.id, service_ids=[service.id], **extra),
    )


@pytest.mark.asyncio
async def test_add_and_duplicate(repos, salon, service, salon_client):
    entry = await enqueue(repos, salon, salon_client, service)
    assert entry.status == WaitingListStatus.WAITING
    assert entry.service_ids == [str(service.id)]

    with pytest.raises(DuplicateWaitingListEntry):
        await enqueue(repos, salon, salon_client, service)


@pytest.mark.asyncio
async def test_preferred_window_is_validated(repos, salon, service, salon_client):
    with pytest.raises(BookingValidationError):
        await enqueue(repos, salon, salon_client, service, preferred_start_time="14:00", preferred_end_time="10:00")


@pytest.mark.asyncio
async def test_notify_then_accept(repos, salon, employee, service, salon_client, offer_sms):
    entry = await enqueue(repos, salon, salon_client, service, employee_id=employee.id)
    entry_id = entry.id

    notified = await notify_waiting_list_client(repos, entry_id, SLOT_START, SLOT_END, now=NOW)
    assert notified.status == WaitingListStatus.NOTIFIED
    assert notified.expires_at == NOW + timedelta(minutes=30)
    offer_sms.assert_awaited_once()
    assert offer_sms.await_args.args[0] == "+5511999990000"

    appointment, accepted = await accept_waiting_list_slot(repos, entry_id, now=NOW + timedelta(minutes=29))

    assert accepted.status == WaitingListStatus.ACCEPTED
    assert accepted.appointment_id == appointment.id
    assert appointment.start_at == SLOT_START
    assert appointment.booking_source == BookingSource.WAITING_LIST


@pytest.mark.asyncio
async def test_late_acceptance_expires_the_offer(repos, salon, employee, service, salon_client):
    entry = await enqueue(repos, salon, salon_client, service, employee_id=employee.id)
    entry_id = entry.id
    await notify_waiting_list_client(repos, entry_id, SLOT_START, SLOT_END, now=NOW)

    with pytest.raises(OfferExpiredError):
        await accept_waiting_list_slot(repos, entry_id, now=NOW + timedelta(minutes=31))

    expired = await repos.waiting_list.get(entry_id)
    assert expired.status == WaitingListStatus.EXPIRED
    with pytest.raises(InvalidStatusTransition):
        await accept_waiting_list_slot(repos, entry_id, now=NOW)


@pytest.mark.asyncio
async def test_accept_reruns_conflict_check(repos, db, salon, employee, service, salon_client):
    entry = await enqueue(repos, salon, salon_client, service, employee_id=employee.id)
    entry_id = entry.id
    await notify_waiting_list_client(repos, entry_id, SLOT_START, SLOT_END, now=NOW)
    await add_appointment(db, salon, employee, salon_client, service, SLOT_START)

    with pytest.raises(AppointmentConflictError):
        await accept_waiting_list_slot(repos, entry_id, now=NOW)

    still_open = await repos.waiting_list.get(entry_id)
    assert still_open.status == WaitingListStatus.NOTIFIED


@pytest.mark.asyncio
async def test_accept_requires_a_professional(repos, salon, service, salon_client):
    entry = await enqueue(repos, salon, salon_client, service)
    await notify_waiting_list_client(repos, entry.id, SLOT_START, SLOT_END, now=NOW)

    with pytest.raises(BookingValidationError):
        await accept_waiting_list_slot(repos, entry.id, now=NOW)


@pytest.mark.asyncio
async def test_transitions_never_return_to_waiting(repos, salon, service, salon_client):
    entry = await enqueue(repos, salon, salon_client, service)
    await notify_waiting_list_client(repos, entry.id, SLOT_START, SLOT_END, now=NOW)

    with pytest.raises(InvalidStatusTransition):
        await notify_waiting_list_client(repos, entry.id, SLOT_START, SLOT_END, now=NOW)
    with pytest.raises(InvalidStatusTransition):
        await update_waiting_list_entry(repos, entry.id, {"priority": 5})

    cancelled = await cancel_waiting_list_entry(repos, entry.id, "Found another salon")
    assert cancelled.status == WaitingListStatus.CANCELLED
    assert cancelled.notes == "Cancelled: Found another salon"
    with pytest.raises(InvalidStatusTransition):
        await cancel_waiting_list_entry(repos, entry.id)


@pytest.mark.asyncio
async def test_sweep_expires_lapsed_offers(repos, salon, service, salon_client):
    entry = await enqueue(repos, salon, salon_client, service)
    entry_id = entry.id
    await notify_waiting_list_client(repos, entry_id, SLOT_START, SLOT_END, now=NOW)

    assert await expire_waiting_list_offers(repos, now=NOW + timedelta(minutes=10)) == 0
    assert await expire_waiting_list_offers(repos, now=NOW + timedelta(minutes=30)) == 1

    swept = await repos.waiting_list.get(entry_id)
    await repos.db.refresh(swept)
    assert swept.status == WaitingListStatus.EXPIRED


@pytest.mark.asyncio
async def test_list_orders_by_priority_then_age(repos, db, salon, service, salon_client):
    from salonbook.models.service import Client

    other = Client(salon_id=salon.id, name="Joana", phone="+5511888880000")
    db.add(other)
    await db.commit()

    first = await enqueue(repos, salon, salon_client, service)
    urgent = await enqueue(repos, salon, other, service, priority=10)

    entries = await list_waiting_list(repos, salon.id)
    assert [e.id for e in entries] == [urgent.id, first.id]


@pytest.mark.asyncio
async def test_matches_respect_employee_duration_and_window(repos, db, salon, employee, service, salon_client):
    from salonbook.models.employee import Employee
    from salonbook.models.service import Client

    bruno = Employee(salon_id=salon.id, name="Bruno")
    morning = Client(salon_id=salon.id, name="Morning person")
    other = Client(salon_id=salon.id, name="Wants Bruno")
    db.add_all([bruno, morning, other])
    await db.commit()

    flexible = await enqueue(repos, salon, salon_client, service)
    wants_bruno = await enqueue(repos, salon, other, service, employee_id=bruno.id)
    mornings = await enqueue(
        repos,
        salon,
        morning,
        service,
        flexible_timing=False,
        preferred_date=date(2030, 1, 7),
        preferred_start_time="08:00",
        preferred_end_time="10:30",
    )

    matches = await find_waiting_list_matches(repos, salon.id, employee.id, SLOT_START, SLOT_END)
    assert [m.id for m in matches] == [flexible.id]

    early = await find_waiting_list_matches(
        repos, salon.id, employee.id, datetime(2030, 1, 7, 8, 30), datetime(2030, 1, 7, 9, 30)
    )
    assert {m.id for m in early} == {flexible.id, mornings.id}

    short = await find_waiting_list_matches(
        repos, salon.id, employee.id, datetime(2030, 1, 7, 8, 30), datetime(2030, 1, 7, 9, 0)
    )
    assert short == []
    assert wants_bruno.id not in {m.id for m in early}
