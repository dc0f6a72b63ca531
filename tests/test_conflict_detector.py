"""Tests for the conflict detector."""

from datetime import datetime

import pytest

from salonbook.core.exceptions import BookingValidationError
from salonbook.models.appointment import AppointmentStatus
from salonbook.models.booking_config import BookingConfig
from salonbook.models.service import Service
from salonbook.schemas.conflict import ConflictType, NoConflict
from salonbook.services.conflict_detector import check_conflicts, find_alternative_slots

from helpers import add_appointment, add_time_block


def at(hour, minute=0, day=7):
    return datetime(2030, 1, day, hour, minute)


@pytest.mark.asyncio
async def test_overlapping_appointment_is_reported(repos, db, salon, employee, service, salon_client):
    existing = await add_appointment(db, salon, employee, salon_client, service, at(10))

    result = await check_conflicts(repos, salon.id, employee.id, at(10, 30), at(11, 30), service.id)

    assert result.has_conflict is True
    assert result.conflict_type == ConflictType.APPOINTMENT
    assert [item.id for item in result.conflicts] == [existing.id]
    assert result.conflicts[0].kind == "APPOINTMENT"


@pytest.mark.asyncio
async def test_back_to_back_is_free(repos, db, salon, employee, service, salon_client):
    await add_appointment(db, salon, employee, salon_client, service, at(10))

    result = await check_conflicts(repos, salon.id, employee.id, at(11), at(12), service.id)
    assert isinstance(result, NoConflict)


@pytest.mark.asyncio
async def test_cancelled_and_excluded_appointments_are_ignored(repos, db, salon, employee, service, salon_client):
    await add_appointment(db, salon, employee, salon_client, service, at(10), status=AppointmentStatus.CANCELLED)
    moving = await add_appointment(db, salon, employee, salon_client, service, at(14))

    assert not (await check_conflicts(repos, salon.id, employee.id, at(10), at(11), service.id)).has_conflict
    result = await check_conflicts(repos, salon.id, employee.id, at(14, 30), at(15, 30), service.id, moving.id)
    assert not result.has_conflict


@pytest.mark.asyncio
async def test_buffer_time(repos, db, salon, employee, service, salon_client):
    db.add(BookingConfig(salon_id=salon.id, buffer_time_minutes=15))
    await db.commit()
    await add_appointment(db, salon, employee, salon_client, service, at(10))

    too_close = await check_conflicts(repos, salon.id, employee.id, at(11, 10), at(12, 10), service.id)
    assert too_close.conflict_type == ConflictType.BUFFER_TIME

    far_enough = await check_conflicts(repos, salon.id, employee.id, at(11, 15), at(12, 15), service.id)
    assert not far_enough.has_conflict


@pytest.mark.asyncio
async def test_buffer_time_before_next_appointment(repos, db, salon, employee, service, salon_client):
    db.add(BookingConfig(salon_id=salon.id, buffer_time_minutes=15))
    await db.commit()
    following = await add_appointment(db, salon, employee, salon_client, service, at(12))

    too_close = await check_conflicts(repos, salon.id, employee.id, at(10, 50), at(11, 50), service.id)
    assert too_close.conflict_type == ConflictType.BUFFER_TIME
    assert [item.id for item in too_close.conflicts] == [following.id]

    far_enough = await check_conflicts(repos, salon.id, employee.id, at(10, 45), at(11, 45), service.id)
    assert not far_enough.has_conflict


@pytest.mark.asyncio
async def test_employee_and_salon_wide_time_blocks(repos, db, salon, employee, service):
    await add_time_block(db, salon, employee, at(12), at(13))
    result = await check_conflicts(repos, salon.id, employee.id, at(12, 30), at(13, 30), service.id)
    assert result.conflict_type == ConflictType.TIME_BLOCK
    assert "Lunch" in result.message

    await add_time_block(db, salon, None, at(15), at(16), reason="Staff training")
    result = await check_conflicts(repos, salon.id, employee.id, at(15), at(16), service.id)
    assert result.conflict_type == ConflictType.TIME_BLOCK
    assert result.conflicts[0].label == "Staff training"


@pytest.mark.asyncio
async def test_deleted_time_block_is_ignored(repos, db, salon, employee, service):
    block = await add_time_block(db, salon, employee, at(12), at(13))
    block.deleted_at = at(8)
    await db.commit()

    assert not (await check_conflicts(repos, salon.id, employee.id, at(12), at(13), service.id)).has_conflict


@pytest.mark.asyncio
async def test_working_hours(repos, salon, employee, service):
    sunday = await check_conflicts(repos, salon.id, employee.id, at(10, day=6), at(11, day=6), service.id)
    assert sunday.conflict_type == ConflictType.OUTSIDE_HOURS
    assert "does not work" in sunday.message

    late = await check_conflicts(repos, salon.id, employee.id, at(16, 30), at(17, 30), service.id)
    assert late.conflict_type == ConflictType.OUTSIDE_HOURS
    assert "outside" in late.message


@pytest.mark.asyncio
async def test_unassigned_service(repos, db, salon, employee):
    color = Service(salon_id=salon.id, name="Coloring", duration=90)
    db.add(color)
    await db.commit()

    result = await check_conflicts(repos, salon.id, employee.id, at(10), at(11, 30), color.id)
    assert result.conflict_type == ConflictType.SERVICE_UNAVAILABLE


@pytest.mark.asyncio
async def test_appointment_conflict_wins_over_time_block(repos, db, salon, employee, service, salon_client):
    await add_appointment(db, salon, employee, salon_client, service, at(12))
    await add_time_block(db, salon, employee, at(12), at(13))

    result = await check_conflicts(repos, salon.id, employee.id, at(12), at(13), service.id)
    assert result.conflict_type == ConflictType.APPOINTMENT


@pytest.mark.asyncio
async def test_empty_interval_is_rejected(repos, salon, employee, service):
    with pytest.raises(BookingValidationError):
        await check_conflicts(repos, salon.id, employee.id, at(10), at(10), service.id)


@pytest.mark.asyncio
async def test_alternative_slots(repos, db, salon, employee, service, salon_client):
    await add_appointment(db, salon, employee, salon_client, service, at(10))

    alternatives = await find_alternative_slots(repos, salon.id, employee.id, service.id, at(10), 60)

    assert len(alternatives) == 10
    assert alternatives[0] == at(9)
    assert alternatives[1] == at(11)
    assert at(10) not in alternatives
    assert await find_alternative_slots(repos, salon.id, employee.id, service.id, at(10, day=6), 60) == []
