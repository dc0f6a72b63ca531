"""
Availability calculator.

Builds the slot grid for an employee's working periods (in ``slot_interval``
steps from the booking policy) and runs every candidate through the conflict
detector. Reads take no locks: the result is advisory and the booking path
re-checks at write time.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Union
from uuid import UUID

from salonbook.core.config import settings
from salonbook.core.exceptions import BookingValidationError, NotFoundError
from salonbook.repositories.container import Repositories
from salonbook.schemas.availability import (
    DayAvailability,
    EmployeeAvailability,
    OccupiedBlock,
    TimeSlot,
)
from salonbook.services.booking_config import get_slot_interval
from salonbook.services.conflict_detector import check_conflicts
from salonbook.utils.date_utils import (
    add_minutes,
    end_of_day,
    generate_time_slots,
    get_day_of_week,
    parse_time_string,
    start_of_day,
)

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


async def get_total_duration(
    repos: Repositories, salon_id: UUID, employee_id: UUID, service_ids: list[UUID]
) -> int:
    """Sum of service durations, using the employee's custom duration where set."""
    if not service_ids:
        raise BookingValidationError("At least one service is required")

    services = await repos.services.get_many(salon_id, service_ids)
    if len(services) != len(service_ids):
        raise BookingValidationError("One or more services were not found for this salon")

    overrides = await repos.employees.assignments_for(employee_id, service_ids)
    total = 0
    for service in services:
        link = overrides.get(service.id)
        total += (link.custom_duration if link and link.custom_duration else service.duration)
    return total


async def calculate_available_slots(
    repos: Repositories,
    salon_id: UUID,
    employee_id: UUID,
    service_ids: list[UUID],
    day: DateLike,
    exclude_appointment_id: Optional[UUID] = None,
    employee_name: Optional[str] = None,
) -> list[TimeSlot]:
    """Every candidate slot of the day, each marked available or not."""
    total_duration = await get_total_duration(repos, salon_id, employee_id, service_ids)

    schedules = await repos.employees.schedules_for_day(employee_id, get_day_of_week(day))
    if not schedules:
        return []

    slot_interval = await get_slot_interval(repos, salon_id)
    slots: list[TimeSlot] = []

    for schedule in schedules:
        period_start = parse_time_string(schedule.start_time, day)
        period_end = parse_time_string(schedule.end_time, day)

        for slot_start in generate_time_slots(period_start, period_end, slot_interval):
            slot_end = add_minutes(slot_start, total_duration)
            if slot_end > period_end:
                continue

            # Multi-service requests are checked against the first service.
            conflict = await check_conflicts(
                repos,
                salon_id,
                employee_id,
                slot_start,
                slot_end,
                service_ids[0],
                exclude_appointment_id,
            )
            slots.append(
                TimeSlot(
                    start_time=slot_start,
                    end_time=slot_end,
                    available=not conflict.has_conflict,
                    employee_id=employee_id,
                    employee_name=employee_name,
                )
            )

    return slots


async def get_multi_employee_availability(
    repos: Repositories, salon_id: UUID, service_ids: list[UUID], day: DateLike
) -> list[EmployeeAvailability]:
    """Available slots per active employee linked to the services.

    Employees are sorted by their earliest available slot; employees with
    nothing free that day come last.
    """
    employees = await repos.employees.list_for_services(salon_id, service_ids)
    results: list[EmployeeAvailability] = []

    for employee in employees:
        slots = await calculate_available_slots(
            repos, salon_id, employee.id, service_ids, day, employee_name=employee.name
        )
        available = [slot for slot in slots if slot.available]
        results.append(
            EmployeeAvailability(
                employee_id=employee.id,
                employee_name=employee.name,
                employee_color=employee.color,
                available_slots=available,
                next_available=available[0].start_time if available else None,
            )
        )

    results.sort(key=lambda item: (item.next_available is None, item.next_available or datetime.max))
    return results


async def get_availability_range(
    repos: Repositories,
    salon_id: UUID,
    employee_id: UUID,
    service_ids: list[UUID],
    start_date: date,
    end_date: date,
) -> list[DayAvailability]:
    if end_date < start_date:
        raise BookingValidationError("end_date must not be before start_date")
    span = (end_date - start_date).days + 1
    if span > settings.MAX_RANGE_DAYS:
        raise BookingValidationError(f"Date range is limited to {settings.MAX_RANGE_DAYS} days")

    days = []
    for offset in range(span):
        day = start_date + timedelta(days=offset)
        slots = await calculate_available_slots(repos, salon_id, employee_id, service_ids, day)
        days.append(DayAvailability(date=day, slots=[slot for slot in slots if slot.available]))
    return days


async def is_slot_available(
    repos: Repositories,
    salon_id: UUID,
    employee_id: UUID,
    service_ids: list[UUID],
    start: datetime,
) -> bool:
    total_duration = await get_total_duration(repos, salon_id, employee_id, service_ids)
    conflict = await check_conflicts(
        repos, salon_id, employee_id, start, add_minutes(start, total_duration), service_ids[0]
    )
    return not conflict.has_conflict


async def find_next_available_slot(
    repos: Repositories,
    salon_id: UUID,
    employee_id: UUID,
    service_ids: list[UUID],
    from_date: DateLike,
    search_days: Optional[int] = None,
) -> Optional[datetime]:
    """First available start at or after ``from_date``, searching day by day.

    Gives up after ``search_days`` days (30 by default) and returns None.
    """
    search_days = search_days or settings.AVAILABILITY_SEARCH_DAYS
    earliest = from_date if isinstance(from_date, datetime) else start_of_day(from_date)
    first_day = earliest.date()

    for offset in range(search_days):
        day = first_day + timedelta(days=offset)
        slots = await calculate_available_slots(repos, salon_id, employee_id, service_ids, day)
        for slot in slots:
            if slot.available and slot.start_time >= earliest:
                return slot.start_time

    logger.info("No availability for employee %s within %d days of %s", employee_id, search_days, first_day)
    return None


async def get_occupied_time_blocks(
    repos: Repositories, salon_id: UUID, employee_id: UUID, day: DateLike
) -> list[OccupiedBlock]:
    """Appointments and time blocks of the day, sorted by start, for calendar views."""
    employee = await repos.employees.get(employee_id)
    if employee is None or employee.salon_id != salon_id:
        raise NotFoundError("Employee not found")

    day_start, day_end = start_of_day(day), end_of_day(day)
    blocks: list[OccupiedBlock] = []

    for appointment in await repos.appointments.list_for_employee_between(employee_id, day_start, day_end):
        blocks.append(
            OccupiedBlock(
                start=appointment.start_at,
                end=appointment.end_at,
                type="APPOINTMENT",
                details={
                    "id": str(appointment.id),
                    "status": appointment.status.value,
                    "client_id": str(appointment.client_id),
                    "service_ids": [str(service_id) for service_id in appointment.service_ids],
                },
            )
        )

    for block in await repos.time_blocks.list_for_employee_between(salon_id, employee_id, day_start, day_end):
        blocks.append(
            OccupiedBlock(
                start=block.start_time,
                end=block.end_time,
                type="TIME_BLOCK",
                details={
                    "id": str(block.id),
                    "type": block.type.value,
                    "reason": block.reason,
                    "salon_wide": block.employee_id is None,
                },
            )
        )

    blocks.sort(key=lambda item: item.start)
    return blocks
