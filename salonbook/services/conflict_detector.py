"""Scheduling conflict detection.

``check_conflicts`` runs five checks in a fixed order and stops at the first
hit; the order decides which message a caller sees when several constraints
are violated at once:

1. overlapping appointment (employee as primary or assistant)
2. overlapping time block (employee's own or salon-wide)
3. outside the employee's working hours for that weekday
4. employee not assigned to the service
5. salon buffer time between consecutive appointments

A conflict is an ordinary return value, never an exception.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from salonbook.core.config import settings
from salonbook.core.exceptions import BookingValidationError
from salonbook.models.appointment import Appointment
from salonbook.models.time_block import TimeBlock
from salonbook.repositories.container import Repositories
from salonbook.schemas.conflict import (
    AppointmentConflict,
    BufferTimeConflict,
    ConflictingItem,
    ConflictResult,
    NoConflict,
    OutsideHoursConflict,
    ServiceUnavailableConflict,
    TimeBlockConflict,
)
from salonbook.services.booking_config import get_buffer_minutes, get_slot_interval
from salonbook.utils.date_utils import (
    add_minutes,
    generate_time_slots,
    get_day_of_week,
    parse_time_string,
    sub_minutes,
)

logger = logging.getLogger(__name__)


def _appointment_items(appointments: Sequence[Appointment]) -> list[ConflictingItem]:
    return [
        ConflictingItem(
            id=appointment.id,
            kind="APPOINTMENT",
            start=appointment.start_at,
            end=appointment.end_at,
            label=appointment.status.value,
        )
        for appointment in appointments
    ]


def _block_items(blocks: Sequence[TimeBlock]) -> list[ConflictingItem]:
    return [
        ConflictingItem(
            id=block.id,
            kind="TIME_BLOCK",
            start=block.start_time,
            end=block.end_time,
            label=block.reason or block.type.value,
        )
        for block in blocks
    ]


async def check_appointment_conflicts(
    repos: Repositories,
    employee_id: UUID,
    start: datetime,
    end: datetime,
    exclude_appointment_id: Optional[UUID] = None,
) -> ConflictResult:
    overlapping = await repos.appointments.find_overlapping(employee_id, start, end, exclude_appointment_id)
    if overlapping:
        return AppointmentConflict(
            message=f"The professional already has {len(overlapping)} appointment(s) at this time",
            conflicts=_appointment_items(overlapping),
        )
    return NoConflict()


async def check_time_block_conflicts(
    repos: Repositories,
    salon_id: UUID,
    employee_id: UUID,
    start: datetime,
    end: datetime,
) -> ConflictResult:
    blocks = await repos.time_blocks.find_overlapping(salon_id, employee_id, start, end)
    if blocks:
        first = blocks[0]
        return TimeBlockConflict(
            message=f"The professional is unavailable: {first.reason or first.type.value}",
            conflicts=_block_items(blocks),
        )
    return NoConflict()


async def check_working_hours(
    repos: Repositories,
    employee_id: UUID,
    start: datetime,
    end: datetime,
) -> ConflictResult:
    schedules = await repos.employees.schedules_for_day(employee_id, get_day_of_week(start))
    if not schedules:
        return OutsideHoursConflict(message="The professional does not work on this day of the week")

    for schedule in schedules:
        period_start = parse_time_string(schedule.start_time, start)
        period_end = parse_time_string(schedule.end_time, start)
        if start >= period_start and end <= period_end:
            return NoConflict()

    return OutsideHoursConflict(message="The requested time is outside the professional's working hours")


async def check_service_assignment(repos: Repositories, employee_id: UUID, service_id: UUID) -> ConflictResult:
    if await repos.employees.get_assignment(employee_id, service_id) is None:
        return ServiceUnavailableConflict(message="This professional does not perform the selected service")
    return NoConflict()


async def check_buffer_time(
    repos: Repositories,
    salon_id: UUID,
    employee_id: UUID,
    start: datetime,
    end: datetime,
    exclude_appointment_id: Optional[UUID] = None,
) -> ConflictResult:
    buffer_minutes = await get_buffer_minutes(repos, salon_id)
    if buffer_minutes <= 0:
        return NoConflict()

    adjacent = await repos.appointments.find_within_buffer(
        employee_id,
        start,
        end,
        sub_minutes(start, buffer_minutes),
        add_minutes(end, buffer_minutes),
        exclude_appointment_id,
    )
    if adjacent:
        return BufferTimeConflict(
            message=f"A gap of {buffer_minutes} minutes is required between appointments",
            conflicts=_appointment_items(adjacent),
        )
    return NoConflict()


async def check_conflicts(
    repos: Repositories,
    salon_id: UUID,
    employee_id: UUID,
    start: datetime,
    end: datetime,
    service_id: UUID,
    exclude_appointment_id: Optional[UUID] = None,
) -> ConflictResult:
    """Run every constraint check for ``[start, end)`` and return the first conflict."""
    if start >= end:
        raise BookingValidationError("Start time must be before end time")

    checks = (
        lambda: check_appointment_conflicts(repos, employee_id, start, end, exclude_appointment_id),
        lambda: check_time_block_conflicts(repos, salon_id, employee_id, start, end),
        lambda: check_working_hours(repos, employee_id, start, end),
        lambda: check_service_assignment(repos, employee_id, service_id),
        lambda: check_buffer_time(repos, salon_id, employee_id, start, end, exclude_appointment_id),
    )
    for check in checks:
        result = await check()
        if result.has_conflict:
            logger.debug(
                "Conflict %s for employee %s at %s-%s",
                result.conflict_type.value,
                employee_id,
                start,
                end,
            )
            return result
    return NoConflict()


async def find_alternative_slots(
    repos: Repositories,
    salon_id: UUID,
    employee_id: UUID,
    service_id: UUID,
    preferred_date: datetime,
    duration_minutes: int,
    limit: Optional[int] = None,
) -> list[datetime]:
    """Conflict-free start times on the preferred day, at most ``limit`` (default 10)."""
    limit = limit or settings.MAX_ALTERNATIVE_SLOTS
    alternatives: list[datetime] = []

    schedules = await repos.employees.schedules_for_day(employee_id, get_day_of_week(preferred_date))
    if not schedules:
        return alternatives

    slot_interval = await get_slot_interval(repos, salon_id)
    for schedule in schedules:
        period_start = parse_time_string(schedule.start_time, preferred_date)
        period_end = parse_time_string(schedule.end_time, preferred_date)

        for slot_start in generate_time_slots(period_start, period_end, slot_interval):
            slot_end = add_minutes(slot_start, duration_minutes)
            if slot_end > period_end:
                break
            conflict = await check_conflicts(repos, salon_id, employee_id, slot_start, slot_end, service_id)
            if not conflict.has_conflict:
                alternatives.append(slot_start)
                if len(alternatives) >= limit:
                    return alternatives

    return alternatives
