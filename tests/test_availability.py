"""Tests for slot generation and availability searches."""

from datetime import date, datetime

import pytest

from salonbook.core.exceptions import BookingValidationError, NotFoundError
from salonbook.models.employee import Employee, EmployeeSchedule, EmployeeService
from salonbook.services.availability import (
    calculate_available_slots,
    find_next_available_slot,
    get_availability_range,
    get_multi_employee_availability,
    get_occupied_time_blocks,
    get_total_duration,
    is_slot_available,
)

from helpers import MONDAY, add_appointment, add_time_block


@pytest.mark.asyncio
async def test_full_day_grid(repos, salon, employee, service, booking_config):
    slots = await calculate_available_slots(repos, salon.id, employee.id, [service.id], MONDAY)

    assert len(slots) == 15
    assert slots[0].start_time == datetime(2030, 1, 7, 9, 0)
    assert slots[-1].start_time == datetime(2030, 1, 7, 16, 0)
    assert slots[-1].end_time == datetime(2030, 1, 7, 17, 0)
    assert all(slot.available for slot in slots)


@pytest.mark.asyncio
async def test_booked_time_is_marked_unavailable(repos, db, salon, employee, service, salon_client, booking_config):
    await add_appointment(db, salon, employee, salon_client, service, datetime(2030, 1, 7, 10, 0))

    slots = await calculate_available_slots(repos, salon.id, employee.id, [service.id], MONDAY)
    taken = [slot.start_time.strftime("%H:%M") for slot in slots if not slot.available]

    assert taken == ["09:30", "10:00", "10:30"]


@pytest.mark.asyncio
async def test_custom_duration_override(repos, db, salon, employee, service, booking_config):
    link = await repos.employees.get_assignment(employee.id, service.id)
    link.custom_duration = 90
    await db.commit()

    assert await get_total_duration(repos, salon.id, employee.id, [service.id]) == 90
    slots = await calculate_available_slots(repos, salon.id, employee.id, [service.id], MONDAY)
    assert slots[-1].start_time == datetime(2030, 1, 7, 15, 30)


@pytest.mark.asyncio
async def test_unknown_service_is_rejected(repos, salon, employee):
    from uuid import uuid4

    with pytest.raises(BookingValidationError):
        await get_total_duration(repos, salon.id, employee.id, [uuid4()])


@pytest.mark.asyncio
async def test_day_off_has_no_slots(repos, salon, employee, service):
    assert await calculate_available_slots(repos, salon.id, employee.id, [service.id], date(2030, 1, 6)) == []


@pytest.mark.asyncio
async def test_multi_employee_sorted_by_next_available(repos, db, salon, employee, service, booking_config):
    bruno = Employee(salon_id=salon.id, name="Bruno")
    db.add(bruno)
    await db.flush()
    db.add(EmployeeSchedule(employee_id=bruno.id, day_of_week=1, start_time="13:00", end_time="17:00"))
    db.add(EmployeeService(employee_id=bruno.id, service_id=service.id))
    await db.commit()
    # Ana is on vacation all Monday.
    await add_time_block(db, salon, employee, datetime(2030, 1, 7, 0, 0), datetime(2030, 1, 8, 0, 0), reason="Vacation")

    results = await get_multi_employee_availability(repos, salon.id, [service.id], MONDAY)

    assert [r.employee_name for r in results] == ["Bruno", "Ana"]
    assert results[0].next_available == datetime(2030, 1, 7, 13, 0)
    assert results[1].next_available is None
    assert results[1].available_slots == []


@pytest.mark.asyncio
async def test_next_available_slot(repos, salon, employee, service, booking_config):
    same_day = await find_next_available_slot(repos, salon.id, employee.id, [service.id], datetime(2030, 1, 7, 10, 20))
    assert same_day == datetime(2030, 1, 7, 10, 30)

    next_week = await find_next_available_slot(repos, salon.id, employee.id, [service.id], date(2030, 1, 8))
    assert next_week == datetime(2030, 1, 14, 9, 0)

    assert await find_next_available_slot(repos, salon.id, employee.id, [service.id], date(2030, 1, 8), search_days=3) is None


@pytest.mark.asyncio
async def test_availability_range(repos, salon, employee, service, booking_config):
    days = await get_availability_range(repos, salon.id, employee.id, [service.id], MONDAY, date(2030, 1, 8))

    assert [d.date for d in days] == [MONDAY, date(2030, 1, 8)]
    assert len(days[0].slots) == 15
    assert days[1].slots == []

    with pytest.raises(BookingValidationError):
        await get_availability_range(repos, salon.id, employee.id, [service.id], MONDAY, date(2030, 3, 1))
    with pytest.raises(BookingValidationError):
        await get_availability_range(repos, salon.id, employee.id, [service.id], MONDAY, date(2030, 1, 1))


@pytest.mark.asyncio
async def test_is_slot_available(repos, db, salon, employee, service, salon_client):
    await add_appointment(db, salon, employee, salon_client, service, datetime(2030, 1, 7, 10, 0))

    assert await is_slot_available(repos, salon.id, employee.id, [service.id], datetime(2030, 1, 7, 11, 0))
    assert not await is_slot_available(repos, salon.id, employee.id, [service.id], datetime(2030, 1, 7, 10, 30))


@pytest.mark.asyncio
async def test_occupied_blocks_for_calendar(repos, db, salon, employee, service, salon_client):
    appointment = await add_appointment(db, salon, employee, salon_client, service, datetime(2030, 1, 7, 14, 0))
    await add_time_block(db, salon, employee, datetime(2030, 1, 7, 12, 0), datetime(2030, 1, 7, 13, 0))

    blocks = await get_occupied_time_blocks(repos, salon.id, employee.id, MONDAY)

    assert [b.type for b in blocks] == ["TIME_BLOCK", "APPOINTMENT"]
    assert blocks[1].details["id"] == str(appointment.id)
    assert blocks[0].details["reason"] == "Lunch"


@pytest.mark.asyncio
async def test_occupied_blocks_unknown_employee(repos, salon):
    from uuid import uuid4

    with pytest.raises(NotFoundError):
        await get_occupied_time_blocks(repos, salon.id, uuid4(), MONDAY)
