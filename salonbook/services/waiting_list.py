"""
Waiting list manager.

Each entry follows WAITING -> NOTIFIED -> {ACCEPTED | EXPIRED | CANCELLED}
(or WAITING -> CANCELLED); nothing ever returns to WAITING. An offer is a
slot put in front of a NOTIFIED client for WAITING_LIST_OFFER_MINUTES;
accepting it books through the normal appointment path, so the conflict
detector always runs again.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from salonbook.core.config import settings
from salonbook.core.exceptions import (
    BookingValidationError,
    DuplicateWaitingListEntry,
    InvalidStatusTransition,
    NotFoundError,
    OfferExpiredError,
)
from salonbook.models.appointment import Appointment, BookingSource
from salonbook.models.waiting_list import (
    TERMINAL_STATUSES,
    WAITING_LIST_TRANSITIONS,
    WaitingListEntry,
    WaitingListStatus,
)
from salonbook.repositories.container import Repositories
from salonbook.schemas.appointment import AppointmentCreate
from salonbook.schemas.waiting_list import WaitingListCreate
from salonbook.services import sms
from salonbook.services.appointments import create_appointment
from salonbook.utils.date_utils import calculate_duration, parse_hh_mm, parse_time_string, utcnow

logger = logging.getLogger(__name__)


def _transition(entry: WaitingListEntry, target: WaitingListStatus) -> None:
    if target not in WAITING_LIST_TRANSITIONS[entry.status]:
        raise InvalidStatusTransition(
            f"Waiting list entry cannot move from {entry.status.value} to {target.value}"
        )
    logger.info("Waiting list entry %s: %s -> %s", entry.id, entry.status.value, target.value)
    entry.status = target


def _validate_preferred_window(start: Optional[str], end: Optional[str]) -> None:
    if start is not None and end is not None and parse_hh_mm(start) >= parse_hh_mm(end):
        raise BookingValidationError("Preferred start time must be before preferred end time")
    if start is not None:
        parse_hh_mm(start)
    if end is not None:
        parse_hh_mm(end)


async def add_to_waiting_list(repos: Repositories, data: WaitingListCreate) -> WaitingListEntry:
    client = await repos.clients.get(data.client_id)
    if client is None or client.salon_id != data.salon_id:
        raise NotFoundError("Client not found")
    if data.employee_id is not None:
        employee = await repos.employees.get(data.employee_id)
        if employee is None or employee.salon_id != data.salon_id:
            raise NotFoundError("Employee not found")

    services = await repos.services.get_many(data.salon_id, data.service_ids)
    if len(services) != len(data.service_ids):
        raise BookingValidationError("One or more services were not found for this salon")
    _validate_preferred_window(data.preferred_start_time, data.preferred_end_time)

    if await repos.waiting_list.find_waiting(data.salon_id, data.client_id) is not None:
        raise DuplicateWaitingListEntry("Client is already on the waiting list for this salon")

    entry = WaitingListEntry(
        salon_id=data.salon_id,
        client_id=data.client_id,
        employee_id=data.employee_id,
        service_ids=[str(service_id) for service_id in data.service_ids],
        preferred_date=data.preferred_date,
        preferred_start_time=data.preferred_start_time,
        preferred_end_time=data.preferred_end_time,
        flexible_timing=data.flexible_timing,
        priority=data.priority,
        notes=data.notes,
        status=WaitingListStatus.WAITING,
    )
    try:
        await repos.waiting_list.add(entry)
        await repos.commit()
    except IntegrityError:
        # Lost the race against a concurrent insert for the same client.
        await repos.rollback()
        raise DuplicateWaitingListEntry("Client is already on the waiting list for this salon")

    logger.info("Client %s added to the waiting list of salon %s", data.client_id, data.salon_id)
    return entry


async def get_waiting_list_entry(repos: Repositories, entry_id: UUID) -> WaitingListEntry:
    entry = await repos.waiting_list.get(entry_id)
    if entry is None:
        raise NotFoundError("Waiting list entry not found")
    return entry


async def update_waiting_list_entry(repos: Repositories, entry_id: UUID, values: dict) -> WaitingListEntry:
    """Edit preferences; only while the entry is still WAITING."""
    entry = await get_waiting_list_entry(repos, entry_id)
    if entry.status != WaitingListStatus.WAITING:
        raise InvalidStatusTransition("Only WAITING entries can be edited")

    _validate_preferred_window(
        values.get("preferred_start_time", entry.preferred_start_time),
        values.get("preferred_end_time", entry.preferred_end_time),
    )
    for key, value in values.items():
        setattr(entry, key, value)
    await repos.commit()
    return entry


async def list_waiting_list(
    repos: Repositories,
    salon_id: UUID,
    status: Optional[WaitingListStatus] = None,
    employee_id: Optional[UUID] = None,
    client_id: Optional[UUID] = None,
) -> list[WaitingListEntry]:
    """Entries by priority (highest first), oldest first within a priority."""
    return list(await repos.waiting_list.search(salon_id, status=status, employee_id=employee_id, client_id=client_id))


async def notify_waiting_list_client(
    repos: Repositories,
    entry_id: UUID,
    start: datetime,
    end: datetime,
    now: Optional[datetime] = None,
) -> WaitingListEntry:
    """Offer a freed slot to the client and start the acceptance clock."""
    if start >= end:
        raise BookingValidationError("Start time must be before end time")

    entry = await get_waiting_list_entry(repos, entry_id)
    _transition(entry, WaitingListStatus.NOTIFIED)

    now = now or utcnow()
    entry.notified_at = now
    entry.expires_at = now + timedelta(minutes=settings.WAITING_LIST_OFFER_MINUTES)
    entry.offered_start = start
    entry.offered_end = end
    await repos.commit()

    client = await repos.clients.get(entry.client_id)
    salon = await repos.salons.get(entry.salon_id)
    await sms.send_waiting_list_offer(client.phone if client else None, salon.name, start, entry.expires_at)
    return entry


async def accept_waiting_list_slot(
    repos: Repositories,
    entry_id: UUID,
    start_time: Optional[datetime] = None,
    employee_id: Optional[UUID] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> tuple[Appointment, WaitingListEntry]:
    """Book the offered slot and mark the entry ACCEPTED in one transaction.

    An offer past its expiry is moved to EXPIRED and OfferExpiredError is
    raised; the booking is never attempted.
    """
    entry = await get_waiting_list_entry(repos, entry_id)
    if entry.status != WaitingListStatus.NOTIFIED:
        raise InvalidStatusTransition("This entry has no open offer")

    now = now or utcnow()
    if entry.expires_at is not None and entry.expires_at <= now:
        _transition(entry, WaitingListStatus.EXPIRED)
        await repos.commit()
        raise OfferExpiredError("The offer for this slot has expired")

    start = start_time or entry.offered_start
    if start is None:
        raise BookingValidationError("A start time is required to accept this offer")
    booking_employee = employee_id or entry.employee_id
    if booking_employee is None:
        raise BookingValidationError("A professional is required to accept this offer")

    appointment = await create_appointment(
        repos,
        AppointmentCreate(
            salon_id=entry.salon_id,
            client_id=entry.client_id,
            employee_id=booking_employee,
            service_ids=[UUID(str(service_id)) for service_id in entry.service_ids],
            start_time=start,
            notes=notes or entry.notes or "Booked from the waiting list",
            booking_source=BookingSource.WAITING_LIST,
        ),
        commit=False,
    )

    _transition(entry, WaitingListStatus.ACCEPTED)
    entry.appointment_id = appointment.id
    await repos.commit()
    return appointment, entry


async def cancel_waiting_list_entry(
    repos: Repositories, entry_id: UUID, reason: Optional[str] = None
) -> WaitingListEntry:
    entry = await get_waiting_list_entry(repos, entry_id)
    if entry.status in TERMINAL_STATUSES:
        raise InvalidStatusTransition(f"Entry is already {entry.status.value}")

    _transition(entry, WaitingListStatus.CANCELLED)
    if reason:
        entry.notes = f"{entry.notes}\nCancelled: {reason}" if entry.notes else f"Cancelled: {reason}"
    await repos.commit()
    return entry


async def expire_waiting_list_offers(
    repos: Repositories, salon_id: Optional[UUID] = None, now: Optional[datetime] = None
) -> int:
    """Flip every NOTIFIED entry whose offer has lapsed to EXPIRED."""
    expired = await repos.waiting_list.expire_offers(now or utcnow(), salon_id)
    await repos.commit()
    if expired:
        logger.info("Expired %d waiting-list offers%s", expired, f" for salon {salon_id}" if salon_id else "")
    return expired


async def find_waiting_list_matches(
    repos: Repositories, salon_id: UUID, employee_id: UUID, start: datetime, end: datetime
) -> list[WaitingListEntry]:
    """WAITING entries a freed slot could serve, in waiting-list order.

    An entry matches when it accepts the employee, its services fit in the
    slot and, unless its timing is flexible, the slot falls on the preferred
    date and inside the preferred window.
    """
    slot_minutes = calculate_duration(start, end)
    matches = []

    for entry in await repos.waiting_list.search(salon_id, status=WaitingListStatus.WAITING):
        if entry.employee_id is not None and entry.employee_id != employee_id:
            continue

        if not entry.flexible_timing:
            if entry.preferred_date is not None and entry.preferred_date != start.date():
                continue
            if entry.preferred_start_time and start < parse_time_string(entry.preferred_start_time, start):
                continue
            if entry.preferred_end_time and end > parse_time_string(entry.preferred_end_time, start):
                continue

        services = await repos.services.get_many(salon_id, [UUID(str(sid)) for sid in entry.service_ids])
        if sum(service.duration for service in services) > slot_minutes:
            continue
        matches.append(entry)

    return matches
