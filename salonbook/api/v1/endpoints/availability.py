"""Availability and conflict-check endpoints for staff calendars."""

import logging
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from salonbook.core.config import settings
from salonbook.core.deps import get_current_user, get_repositories
from salonbook.core.permissions import Permission, require_permission
from salonbook.models.salon import User
from salonbook.repositories.container import Repositories
from salonbook.schemas.availability import (
    AvailabilitySlotsResponse,
    DayAvailability,
    EmployeeAvailability,
    NextAvailableResponse,
    OccupiedBlock,
)
from salonbook.schemas.conflict import (
    AlternativeSlotsRequest,
    AlternativeSlotsResponse,
    ConflictCheckRequest,
    ConflictResult,
)
from salonbook.services.availability import (
    calculate_available_slots,
    find_next_available_slot,
    get_availability_range,
    get_multi_employee_availability,
    get_occupied_time_blocks,
    get_total_duration,
)
from salonbook.services.conflict_detector import check_conflicts, find_alternative_slots

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/slots", response_model=AvailabilitySlotsResponse)
async def get_slots(
    salon_id: UUID,
    day: date = Query(..., alias="date"),
    service_ids: list[UUID] = Query(...),
    employee_id: Optional[UUID] = None,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    """Candidate slots for one professional, or for everyone who performs the services."""
    await require_permission(repos, current_user, salon_id, Permission.VIEW_APPOINTMENTS)

    if employee_id:
        total_duration = await get_total_duration(repos, salon_id, employee_id, service_ids)
        slots = await calculate_available_slots(repos, salon_id, employee_id, service_ids, day)
        return AvailabilitySlotsResponse(date=day, total_duration=total_duration, slots=slots)

    slots = []
    for employee in await get_multi_employee_availability(repos, salon_id, service_ids, day):
        slots.extend(employee.available_slots)
    slots.sort(key=lambda slot: slot.start_time)
    return AvailabilitySlotsResponse(date=day, slots=slots)


@router.get("/employees", response_model=list[EmployeeAvailability])
async def get_employees_availability(
    salon_id: UUID,
    day: date = Query(..., alias="date"),
    service_ids: list[UUID] = Query(...),
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, salon_id, Permission.VIEW_APPOINTMENTS)
    return await get_multi_employee_availability(repos, salon_id, service_ids, day)


@router.get("/next", response_model=NextAvailableResponse)
async def get_next_available(
    salon_id: UUID,
    employee_id: UUID,
    from_date: datetime,
    service_ids: list[UUID] = Query(...),
    search_days: int = Query(default=settings.AVAILABILITY_SEARCH_DAYS, ge=1, le=365),
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, salon_id, Permission.VIEW_APPOINTMENTS)
    start = await find_next_available_slot(repos, salon_id, employee_id, service_ids, from_date, search_days)
    return NextAvailableResponse(found=start is not None, start_time=start, searched_days=search_days)


@router.get("/range", response_model=list[DayAvailability])
async def get_range(
    salon_id: UUID,
    employee_id: UUID,
    start_date: date,
    end_date: date,
    service_ids: list[UUID] = Query(...),
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, salon_id, Permission.VIEW_APPOINTMENTS)
    return await get_availability_range(repos, salon_id, employee_id, service_ids, start_date, end_date)


@router.get("/occupied", response_model=list[OccupiedBlock])
async def get_occupied(
    salon_id: UUID,
    employee_id: UUID,
    day: date = Query(..., alias="date"),
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    """Appointments and time blocks on the professional's calendar for one day."""
    await require_permission(repos, current_user, salon_id, Permission.VIEW_APPOINTMENTS)
    return await get_occupied_time_blocks(repos, salon_id, employee_id, day)


@router.post("/conflicts", response_model=ConflictResult)
async def check_slot_conflicts(
    request: ConflictCheckRequest,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, request.salon_id, Permission.VIEW_APPOINTMENTS)
    return await check_conflicts(
        repos,
        request.salon_id,
        request.employee_id,
        request.start_time,
        request.end_time,
        request.service_id,
        request.exclude_appointment_id,
    )


@router.post("/alternatives", response_model=AlternativeSlotsResponse)
async def get_alternatives(
    request: AlternativeSlotsRequest,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, request.salon_id, Permission.VIEW_APPOINTMENTS)
    alternatives = await find_alternative_slots(
        repos,
        request.salon_id,
        request.employee_id,
        request.service_id,
        request.preferred_date,
        request.duration_minutes,
    )
    return AlternativeSlotsResponse(alternatives=alternatives)
