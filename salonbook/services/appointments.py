"""
Appointment booking path.

Every write that places an appointment on an employee's calendar goes through
``create_appointment`` or ``reschedule_appointment``: the employee row is
locked (SELECT ... FOR UPDATE), the conflict detector runs, and the insert or
update is flushed inside the same transaction. On PostgreSQL the
``ex_appointments_employee_no_overlap`` exclusion constraint backs the lock,
so two transactions can never both commit overlapping intervals.

The waiting list and the public booking page reuse ``create_appointment`` with
``commit=False`` so their own changes land in the same transaction.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from salonbook.core.exceptions import (
    AppointmentConflictError,
    BookingValidationError,
    InvalidStatusTransition,
    NotFoundError,
)
from salonbook.models.appointment import (
    Appointment,
    AppointmentAssistant,
    AppointmentRepetition,
    AppointmentService,
    AppointmentStatus,
    CancelledBy,
    STATUS_TRANSITIONS,
)
from salonbook.repositories.container import Repositories
from salonbook.schemas.appointment import AppointmentCreate, AppointmentReschedule, RecurringAppointmentCreate
from salonbook.schemas.conflict import AppointmentConflict
from salonbook.services.booking_config import get_policy_value
from salonbook.services.conflict_detector import (
    check_appointment_conflicts,
    check_conflicts,
    find_alternative_slots,
)
from salonbook.services.recurrence import (
    ensure_valid_rule,
    generate_occurrences,
    generate_rrule,
    get_recurrence_summary,
)
from salonbook.utils.date_utils import (
    add_minutes,
    calculate_duration,
    difference_in_hours,
    generate_confirmation_code,
    local_now,
)

logger = logging.getLogger(__name__)

OVERLAP_CONSTRAINT = "ex_appointments_employee_no_overlap"
CENTS = Decimal("0.01")


def _is_overlap_violation(exc: IntegrityError) -> bool:
    return OVERLAP_CONSTRAINT in str(exc.orig)


def _concurrent_booking_conflict() -> AppointmentConflictError:
    return AppointmentConflictError(
        AppointmentConflict(message="The professional was booked for this time by another request")
    )


async def _build_service_lines(
    repos: Repositories, salon_id: UUID, employee_id: UUID, service_ids: list[UUID]
) -> tuple[list[AppointmentService], int, Decimal]:
    """Service lines with the employee's duration/price overrides applied."""
    services = await repos.services.get_many(salon_id, service_ids)
    if len(services) != len(service_ids):
        raise BookingValidationError("One or more services were not found for this salon")

    overrides = await repos.employees.assignments_for(employee_id, service_ids)
    lines = []
    total_duration = 0
    total_price = Decimal("0")
    for service in services:
        link = overrides.get(service.id)
        duration = link.custom_duration if link and link.custom_duration else service.duration
        price = Decimal(link.custom_price if link and link.custom_price is not None else service.price or 0)
        lines.append(AppointmentService(service_id=service.id, duration=duration, price=price))
        total_duration += duration
        total_price += price
    return lines, total_duration, total_price


async def _ensure_employee(repos: Repositories, salon_id: UUID, employee_id: UUID):
    employee = await repos.employees.lock(employee_id)
    if employee is None or employee.salon_id != salon_id:
        raise NotFoundError("Employee not found")
    if not employee.is_active:
        raise BookingValidationError("This professional is not active")
    return employee


async def get_appointment(repos: Repositories, appointment_id: UUID) -> Appointment:
    appointment = await repos.appointments.get(appointment_id)
    if appointment is None:
        raise NotFoundError("Appointment not found")
    return appointment


async def list_appointments(
    repos: Repositories,
    salon_id: UUID,
    employee_id: Optional[UUID] = None,
    client_id: Optional[UUID] = None,
    statuses: Optional[list[AppointmentStatus]] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Appointment], int]:
    items, total = await repos.appointments.search(
        salon_id,
        employee_id=employee_id,
        client_id=client_id,
        statuses=statuses,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return list(items), total


async def create_appointment(
    repos: Repositories,
    data: AppointmentCreate,
    *,
    status: AppointmentStatus = AppointmentStatus.PENDING,
    commit: bool = True,
    with_alternatives: bool = True,
) -> Appointment:
    """Check and insert one appointment atomically.

    Raises AppointmentConflictError (with up to 10 alternative starts on the
    same day) when the slot is taken, after rolling the transaction back.
    """
    salon_id, employee_id, start = data.salon_id, data.employee_id, data.start_time

    client = await repos.clients.get(data.client_id)
    if client is None or client.salon_id != salon_id:
        raise NotFoundError("Client not found")

    await _ensure_employee(repos, salon_id, employee_id)
    lines, total_duration, total_price = await _build_service_lines(
        repos, salon_id, employee_id, data.service_ids
    )
    end = add_minutes(start, total_duration)

    conflict = await check_conflicts(repos, salon_id, employee_id, start, end, data.service_ids[0])

    if not conflict.has_conflict:
        for assistant_id in data.assistant_ids:
            if assistant_id == employee_id:
                raise BookingValidationError("The professional cannot also be an assistant")
            await _ensure_employee(repos, salon_id, assistant_id)
            assistant_conflict = await check_appointment_conflicts(repos, assistant_id, start, end)
            if assistant_conflict.has_conflict:
                conflict = AppointmentConflict(
                    message="An assistant already has an appointment at this time",
                    conflicts=assistant_conflict.conflicts,
                )
                break

    if conflict.has_conflict:
        await repos.rollback()
        alternatives = []
        if with_alternatives:
            alternatives = await find_alternative_slots(
                repos, salon_id, employee_id, data.service_ids[0], start, total_duration
            )
        logger.info(
            "Booking rejected for employee %s at %s: %s",
            employee_id,
            start,
            conflict.conflict_type.value,
        )
        raise AppointmentConflictError(conflict, alternatives)

    appointment = Appointment(
        salon_id=salon_id,
        client_id=data.client_id,
        employee_id=employee_id,
        start_at=start,
        end_at=end,
        status=status,
        total_price=total_price,
        booking_source=data.booking_source,
        confirmation_code=generate_confirmation_code(),
        notes=data.notes,
        reschedule_count=0,
        services=lines,
        assistants=[AppointmentAssistant(employee_id=assistant_id) for assistant_id in data.assistant_ids],
    )

    try:
        await repos.appointments.add(appointment)
        if commit:
            await repos.commit()
    except IntegrityError as exc:
        await repos.rollback()
        if _is_overlap_violation(exc):
            raise _concurrent_booking_conflict()
        raise

    logger.info(
        "Appointment %s booked for employee %s at %s (%s)",
        appointment.id,
        employee_id,
        start,
        data.booking_source.value,
    )
    return appointment


async def reschedule_appointment(
    repos: Repositories, appointment_id: UUID, data: AppointmentReschedule
) -> Appointment:
    """Move an appointment, re-running every conflict check except against itself."""
    appointment = await get_appointment(repos, appointment_id)
    if appointment.status not in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED):
        raise InvalidStatusTransition(f"A {appointment.status.value} appointment cannot be rescheduled")

    salon_id, employee_id = appointment.salon_id, appointment.employee_id
    if not await get_policy_value(repos, salon_id, "allow_rescheduling"):
        raise BookingValidationError("Rescheduling is disabled for this salon")
    max_reschedules = await get_policy_value(repos, salon_id, "max_reschedule_count")
    if max_reschedules is not None and appointment.reschedule_count >= max_reschedules:
        raise BookingValidationError(f"This appointment was already rescheduled {max_reschedules} times")

    new_start = data.start_time
    new_end = data.end_time or new_start + (appointment.end_at - appointment.start_at)
    if new_start >= new_end:
        raise BookingValidationError("Start time must be before end time")

    service_id = appointment.service_ids[0]
    await _ensure_employee(repos, salon_id, employee_id)
    conflict = await check_conflicts(repos, salon_id, employee_id, new_start, new_end, service_id, appointment_id)
    if conflict.has_conflict:
        await repos.rollback()
        alternatives = await find_alternative_slots(
            repos, salon_id, employee_id, service_id, new_start, calculate_duration(new_start, new_end)
        )
        raise AppointmentConflictError(conflict, alternatives)

    previous_start = appointment.start_at
    appointment.start_at = new_start
    appointment.end_at = new_end
    appointment.reschedule_count = (appointment.reschedule_count or 0) + 1

    try:
        await repos.db.flush()
        await repos.commit()
    except IntegrityError as exc:
        await repos.rollback()
        if _is_overlap_violation(exc):
            raise _concurrent_booking_conflict()
        raise

    logger.info("Appointment %s rescheduled from %s to %s", appointment_id, previous_start, new_start)
    return appointment


async def update_appointment_status(
    repos: Repositories, appointment_id: UUID, new_status: AppointmentStatus
) -> Appointment:
    appointment = await get_appointment(repos, appointment_id)
    if new_status == appointment.status:
        return appointment
    if new_status not in STATUS_TRANSITIONS[appointment.status]:
        raise InvalidStatusTransition(
            f"Cannot change an appointment from {appointment.status.value} to {new_status.value}"
        )
    if new_status == AppointmentStatus.CANCELLED:
        cancelled, _ = await cancel_appointment(repos, appointment_id)
        return cancelled

    appointment.status = new_status
    await repos.commit()
    logger.info("Appointment %s moved to %s", appointment_id, new_status.value)
    return appointment


async def calculate_cancellation_fee(
    repos: Repositories, appointment: Appointment, cancelled_by: CancelledBy, now: datetime
) -> Decimal:
    """Late-cancellation fee, charged only when the client cancels inside the late window."""
    if cancelled_by != CancelledBy.CLIENT:
        return Decimal("0.00")

    late_hours = await get_policy_value(repos, appointment.salon_id, "late_cancellation_hours")
    fee_percent = await get_policy_value(repos, appointment.salon_id, "late_cancellation_fee")
    if difference_in_hours(appointment.start_at, now) >= late_hours:
        return Decimal("0.00")
    fee = Decimal(appointment.total_price or 0) * Decimal(fee_percent) / Decimal(100)
    return fee.quantize(CENTS)


async def cancel_appointment(
    repos: Repositories,
    appointment_id: UUID,
    reason: Optional[str] = None,
    cancelled_by: CancelledBy = CancelledBy.STAFF,
) -> tuple[Appointment, list]:
    """Cancel and return the waiting-list entries that fit the freed slot."""
    from salonbook.services.waiting_list import find_waiting_list_matches  # circular import

    appointment = await get_appointment(repos, appointment_id)
    if AppointmentStatus.CANCELLED not in STATUS_TRANSITIONS[appointment.status]:
        raise InvalidStatusTransition(f"A {appointment.status.value} appointment cannot be cancelled")

    salon = await repos.salons.get(appointment.salon_id)
    now = local_now(salon.timezone)

    appointment.cancellation_fee = await calculate_cancellation_fee(repos, appointment, cancelled_by, now)
    appointment.status = AppointmentStatus.CANCELLED
    appointment.cancelled_by = cancelled_by
    appointment.cancellation_reason = reason
    await repos.commit()
    logger.info(
        "Appointment %s cancelled by %s (fee %s)",
        appointment_id,
        cancelled_by.value,
        appointment.cancellation_fee,
    )

    matches = await find_waiting_list_matches(
        repos, appointment.salon_id, appointment.employee_id, appointment.start_at, appointment.end_at
    )
    if matches:
        logger.info("%d waiting-list entries match the slot freed by %s", len(matches), appointment_id)
    return appointment, matches


async def create_recurring_appointment(repos: Repositories, data: RecurringAppointmentCreate) -> dict:
    """Book a series: the first occurrence must succeed, later ones are skipped on conflict."""
    rule = data.recurrence_rule
    ensure_valid_rule(rule)
    occurrences = generate_occurrences(data.start_time, rule)
    rrule = generate_rrule(rule)
    repeat_until = rule.end_date or occurrences[-1].date()

    base = AppointmentCreate(**data.model_dump(exclude={"recurrence_rule"}))
    parent = await create_appointment(repos, base, commit=False)
    parent_id = parent.id
    repos.db.add(AppointmentRepetition(appointment_id=parent_id, rule=rrule, repeat_until=repeat_until))
    await repos.commit()

    created_ids = []
    skipped: list[datetime] = []
    for occurrence in occurrences[1:]:
        try:
            child = await create_appointment(
                repos,
                base.model_copy(update={"start_time": occurrence}),
                with_alternatives=False,
            )
        except AppointmentConflictError as exc:
            logger.warning("Skipping recurring occurrence %s: %s", occurrence, exc.message)
            skipped.append(occurrence)
            continue
        created_ids.append(child.id)

    # A skipped occurrence rolls back the session, which expires loaded rows.
    parent = await repos.appointments.get(parent_id, refresh=True)
    children = await repos.appointments.get_many(created_ids)

    logger.info(
        "Recurring series %s: %d booked, %d skipped (%s)",
        parent_id,
        len(children) + 1,
        len(skipped),
        rrule,
    )
    return {
        "parent": parent,
        "children": children,
        "skipped": skipped,
        "rrule": rrule,
        "summary": get_recurrence_summary(rule),
        "total_created": len(children) + 1,
        "repeat_until": repeat_until,
    }
