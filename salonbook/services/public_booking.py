"""
Public booking page.

Unauthenticated, addressed by the salon's ``booking_slug``; only salons with
``enable_online_booking`` are reachable. Availability and booking reuse the
staff primitives, with the booking window (min advance hours, max advance
days, same-day rule) applied on top.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional
from uuid import UUID

from salonbook.core.exceptions import BookingValidationError, NotFoundError
from salonbook.models.appointment import AppointmentStatus, BookingSource
from salonbook.models.booking_config import BookingConfig
from salonbook.models.service import Client
from salonbook.repositories.container import Repositories
from salonbook.schemas.appointment import AppointmentCreate
from salonbook.schemas.public_booking import (
    PublicAvailabilityResponse,
    PublicBookingConfigResponse,
    PublicBookingCreate,
    PublicBookingResponse,
    PublicPolicy,
    PublicProfessional,
    PublicSalon,
    PublicService,
    PublicSlot,
)
from salonbook.services import sms
from salonbook.services.appointments import create_appointment
from salonbook.services.availability import calculate_available_slots
from salonbook.utils.date_utils import add_hours, local_now

logger = logging.getLogger(__name__)

ONLINE_BOOKING_SOURCE = "ONLINE_BOOKING"


async def _load_page(repos: Repositories, booking_slug: str):
    config = await repos.booking_configs.get_by_slug(booking_slug)
    if config is None:
        raise NotFoundError("Booking page not found or unavailable")
    salon = await repos.salons.get(config.salon_id)
    return config, salon


async def _get_bookable_service(repos: Repositories, salon_id: UUID, service_id: UUID):
    service = await repos.services.get(service_id)
    if service is None or service.salon_id != salon_id or not service.is_active:
        raise NotFoundError("Service not found or inactive")
    return service


async def _get_bookable_professional(repos: Repositories, salon_id: UUID, employee_id: UUID):
    employee = await repos.employees.get(employee_id)
    if (
        employee is None
        or employee.salon_id != salon_id
        or not employee.is_active
        or not employee.accepts_online_booking
    ):
        raise NotFoundError("Professional not available")
    return employee


def _check_booking_window(config: BookingConfig, start: datetime, now: datetime) -> None:
    if start < add_hours(now, config.min_advance_hours):
        raise BookingValidationError(
            f"Bookings must be made at least {config.min_advance_hours} hours in advance"
        )
    if start > now + timedelta(days=config.max_advance_days):
        raise BookingValidationError(
            f"Bookings can be made at most {config.max_advance_days} days in advance"
        )
    if not config.allow_same_day_booking and start.date() == now.date():
        raise BookingValidationError("Same-day booking is not allowed")


async def get_public_booking_config(repos: Repositories, booking_slug: str) -> PublicBookingConfigResponse:
    config, salon = await _load_page(repos, booking_slug)
    services = await repos.services.list_active(salon.id)
    professionals = await repos.employees.list_bookable_online(salon.id)

    return PublicBookingConfigResponse(
        salon=PublicSalon(id=salon.id, name=salon.name, phone=salon.phone, email=salon.email),
        booking_config=PublicPolicy(
            booking_page_title=config.booking_page_title or salon.name,
            min_advance_hours=config.min_advance_hours,
            max_advance_days=config.max_advance_days,
            allow_same_day_booking=config.allow_same_day_booking,
            slot_interval=config.slot_interval,
            free_cancellation_hours=config.free_cancellation_hours,
            collect_client_phone=config.collect_client_phone,
            collect_client_email=config.collect_client_email,
            require_terms_acceptance=config.require_terms_acceptance,
            auto_approve_bookings=config.auto_approve_bookings,
        ),
        services=[
            PublicService(
                id=service.id,
                name=service.name,
                duration=service.duration,
                price=service.price,
                category=service.category,
            )
            for service in services
        ],
        professionals=[
            PublicProfessional(id=employee.id, name=employee.name, color=employee.color)
            for employee in professionals
        ],
    )


async def get_public_availability(
    repos: Repositories,
    booking_slug: str,
    day: date,
    service_id: UUID,
    professional_id: Optional[UUID] = None,
) -> PublicAvailabilityResponse:
    """Free slots on ``day`` across the salon's online professionals, sorted by time."""
    config, salon = await _load_page(repos, booking_slug)
    await _get_bookable_service(repos, salon.id, service_id)

    now = local_now(salon.timezone)
    last_day = (now + timedelta(days=config.max_advance_days)).date()
    if day < now.date() or day > last_day:
        raise BookingValidationError("Date is outside the booking window")
    if not config.allow_same_day_booking and day == now.date():
        raise BookingValidationError("Same-day booking is not allowed")

    if professional_id:
        professionals = [await _get_bookable_professional(repos, salon.id, professional_id)]
    else:
        professionals = await repos.employees.list_bookable_online(salon.id)

    earliest = add_hours(now, config.min_advance_hours)
    slots: list[PublicSlot] = []
    for employee in professionals:
        for slot in await calculate_available_slots(repos, salon.id, employee.id, [service_id], day):
            if slot.available and slot.start_time >= earliest:
                slots.append(
                    PublicSlot(
                        start_time=slot.start_time,
                        end_time=slot.end_time,
                        professional_id=employee.id,
                        professional_name=employee.name,
                    )
                )

    slots.sort(key=lambda item: (item.start_time, item.professional_name))
    return PublicAvailabilityResponse(available_slots=slots)


async def _find_or_create_client(repos: Repositories, salon_id: UUID, data) -> Client:
    client = None
    if data.phone:
        client = await repos.clients.find_by_phone(salon_id, data.phone)
    if client is None and data.email:
        client = await repos.clients.find_by_email(salon_id, data.email)

    if client is None:
        client = Client(
            salon_id=salon_id,
            name=data.name,
            phone=data.phone,
            email=data.email,
            source=ONLINE_BOOKING_SOURCE,
        )
        await repos.clients.add(client)
        return client

    client.name = data.name
    client.phone = data.phone or client.phone
    client.email = data.email or client.email
    return client


async def create_public_booking(
    repos: Repositories, booking_slug: str, data: PublicBookingCreate
) -> PublicBookingResponse:
    config, salon = await _load_page(repos, booking_slug)
    salon_name, salon_timezone = salon.name, salon.timezone

    if config.collect_client_phone and not data.client.phone:
        raise BookingValidationError("Phone is required")
    if config.collect_client_email and not data.client.email:
        raise BookingValidationError("Email is required")
    if config.require_terms_acceptance and not data.terms_accepted:
        raise BookingValidationError("You must accept the terms and conditions")

    await _get_bookable_service(repos, salon.id, data.service_id)
    await _get_bookable_professional(repos, salon.id, data.professional_id)
    _check_booking_window(config, data.start_time, local_now(salon_timezone))

    auto_approve = config.auto_approve_bookings
    client = await _find_or_create_client(repos, salon.id, data.client)
    client_phone = client.phone

    appointment = await create_appointment(
        repos,
        AppointmentCreate(
            salon_id=salon.id,
            client_id=client.id,
            employee_id=data.professional_id,
            service_ids=[data.service_id],
            start_time=data.start_time,
            notes=data.client.notes,
            booking_source=BookingSource.CLIENT_ONLINE,
        ),
        status=AppointmentStatus.CONFIRMED if auto_approve else AppointmentStatus.PENDING,
        commit=False,
    )
    await repos.commit()
    logger.info("Online booking %s created on page %s", appointment.id, booking_slug)

    await sms.send_booking_confirmation(
        client_phone,
        salon_name,
        appointment.start_at,
        appointment.confirmation_code,
        pending=not auto_approve,
    )

    return PublicBookingResponse(
        appointment_id=appointment.id,
        confirmation_code=appointment.confirmation_code,
        status=appointment.status.value,
        message=(
            "Your booking is confirmed."
            if auto_approve
            else "Booking received! The salon will confirm it shortly."
        ),
    )
