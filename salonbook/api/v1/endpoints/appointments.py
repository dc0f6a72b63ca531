"""Appointment booking, rescheduling and cancellation endpoints."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from salonbook.core.deps import get_current_user, get_repositories
from salonbook.core.permissions import Permission, require_permission
from salonbook.models.appointment import AppointmentStatus
from salonbook.models.salon import User
from salonbook.repositories.container import Repositories
from salonbook.schemas.appointment import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentList,
    AppointmentOut,
    AppointmentReschedule,
    AppointmentStatusUpdate,
    CancelAppointmentResponse,
    RecurringAppointmentCreate,
    RecurringAppointmentResponse,
)
from salonbook.services.appointments import (
    cancel_appointment,
    create_appointment,
    create_recurring_appointment,
    get_appointment,
    list_appointments,
    reschedule_appointment,
    update_appointment_status,
)

router = APIRouter()
logger = logging.getLogger(__name__)


async def _load_for(repos: Repositories, user: User, appointment_id: UUID, permission: Permission):
    appointment = await get_appointment(repos, appointment_id)
    await require_permission(repos, user, appointment.salon_id, permission)
    return appointment


@router.post("", response_model=AppointmentOut, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    data: AppointmentCreate,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    """Book an appointment. A 409 response carries the conflict and alternative start times."""
    await require_permission(repos, current_user, data.salon_id, Permission.CREATE_APPOINTMENTS)
    appointment = await create_appointment(repos, data)
    logger.info("Appointment %s booked by user %s", appointment.id, current_user.id)
    return appointment


@router.post("/recurring", response_model=RecurringAppointmentResponse, status_code=status.HTTP_201_CREATED)
async def book_recurring_appointment(
    data: RecurringAppointmentCreate,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, data.salon_id, Permission.CREATE_APPOINTMENTS)
    series = await create_recurring_appointment(repos, data)
    return RecurringAppointmentResponse(
        **{
            **series,
            "parent": AppointmentOut.model_validate(series["parent"]),
            "children": [AppointmentOut.model_validate(child) for child in series["children"]],
        }
    )


@router.get("", response_model=AppointmentList)
async def get_appointments(
    salon_id: UUID,
    employee_id: Optional[UUID] = None,
    client_id: Optional[UUID] = None,
    statuses: Optional[list[AppointmentStatus]] = Query(default=None, alias="status"),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, salon_id, Permission.VIEW_APPOINTMENTS)
    appointments, total = await list_appointments(
        repos,
        salon_id,
        employee_id=employee_id,
        client_id=client_id,
        statuses=statuses,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return AppointmentList(
        appointments=[AppointmentOut.model_validate(a) for a in appointments],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{appointment_id}", response_model=AppointmentOut)
async def get_appointment_detail(
    appointment_id: UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    return await _load_for(repos, current_user, appointment_id, Permission.VIEW_APPOINTMENTS)


@router.put("/{appointment_id}/reschedule", response_model=AppointmentOut)
async def reschedule(
    appointment_id: UUID,
    data: AppointmentReschedule,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await _load_for(repos, current_user, appointment_id, Permission.EDIT_APPOINTMENTS)
    return await reschedule_appointment(repos, appointment_id, data)


@router.put("/{appointment_id}/status", response_model=AppointmentOut)
async def change_status(
    appointment_id: UUID,
    data: AppointmentStatusUpdate,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await _load_for(repos, current_user, appointment_id, Permission.EDIT_APPOINTMENTS)
    return await update_appointment_status(repos, appointment_id, data.status)


@router.put("/{appointment_id}/cancel", response_model=CancelAppointmentResponse)
async def cancel(
    appointment_id: UUID,
    data: AppointmentCancel,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    """Cancel and report which waiting-list entries could take the freed slot."""
    await _load_for(repos, current_user, appointment_id, Permission.EDIT_APPOINTMENTS)
    appointment, matches = await cancel_appointment(repos, appointment_id, data.reason, data.cancelled_by)
    return CancelAppointmentResponse(
        appointment=AppointmentOut.model_validate(appointment),
        waiting_list_matches=[entry.id for entry in matches],
    )
