"""Waiting list endpoints."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from salonbook.core.deps import get_current_user, get_repositories
from salonbook.core.permissions import Permission, require_permission
from salonbook.models.salon import User
from salonbook.models.waiting_list import WaitingListStatus
from salonbook.repositories.container import Repositories
from salonbook.schemas.appointment import AppointmentOut
from salonbook.schemas.waiting_list import (
    AcceptWaitingListResponse,
    ExpireOffersResponse,
    WaitingListAccept,
    WaitingListCancel,
    WaitingListCreate,
    WaitingListNotify,
    WaitingListOut,
    WaitingListUpdate,
)
from salonbook.services.waiting_list import (
    accept_waiting_list_slot,
    add_to_waiting_list,
    cancel_waiting_list_entry,
    expire_waiting_list_offers,
    get_waiting_list_entry,
    list_waiting_list,
    notify_waiting_list_client,
    update_waiting_list_entry,
)

router = APIRouter()
logger = logging.getLogger(__name__)


async def _load_for(repos: Repositories, user: User, entry_id: UUID, permission: Permission):
    entry = await get_waiting_list_entry(repos, entry_id)
    await require_permission(repos, user, entry.salon_id, permission)
    return entry


@router.post("", response_model=WaitingListOut, status_code=status.HTTP_201_CREATED)
async def add_entry(
    data: WaitingListCreate,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, data.salon_id, Permission.MANAGE_WAITING_LIST)
    return await add_to_waiting_list(repos, data)


@router.get("", response_model=list[WaitingListOut])
async def get_entries(
    salon_id: UUID,
    entry_status: Optional[WaitingListStatus] = Query(default=None, alias="status"),
    employee_id: Optional[UUID] = None,
    client_id: Optional[UUID] = None,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    """Entries by priority, oldest first within the same priority."""
    await require_permission(repos, current_user, salon_id, Permission.VIEW_APPOINTMENTS)
    return await list_waiting_list(repos, salon_id, entry_status, employee_id, client_id)


@router.post("/expire", response_model=ExpireOffersResponse)
async def expire_offers(
    salon_id: UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, salon_id, Permission.MANAGE_WAITING_LIST)
    expired = await expire_waiting_list_offers(repos, salon_id)
    return ExpireOffersResponse(expired_count=expired)


@router.get("/{entry_id}", response_model=WaitingListOut)
async def get_entry(
    entry_id: UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    return await _load_for(repos, current_user, entry_id, Permission.VIEW_APPOINTMENTS)


@router.patch("/{entry_id}", response_model=WaitingListOut)
async def edit_entry(
    entry_id: UUID,
    data: WaitingListUpdate,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await _load_for(repos, current_user, entry_id, Permission.MANAGE_WAITING_LIST)
    return await update_waiting_list_entry(repos, entry_id, data.model_dump(exclude_unset=True))


@router.post("/{entry_id}/notify", response_model=WaitingListOut)
async def notify_entry(
    entry_id: UUID,
    data: WaitingListNotify,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    """Offer a slot to the client by SMS; the offer expires after the configured window."""
    await _load_for(repos, current_user, entry_id, Permission.MANAGE_WAITING_LIST)
    return await notify_waiting_list_client(repos, entry_id, data.start_time, data.end_time)


@router.post("/{entry_id}/accept", response_model=AcceptWaitingListResponse)
async def accept_entry(
    entry_id: UUID,
    data: WaitingListAccept,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await _load_for(repos, current_user, entry_id, Permission.CREATE_APPOINTMENTS)
    appointment, entry = await accept_waiting_list_slot(
        repos, entry_id, start_time=data.start_time, employee_id=data.employee_id, notes=data.notes
    )
    return AcceptWaitingListResponse(
        appointment=AppointmentOut.model_validate(appointment),
        waiting_list_entry=WaitingListOut.model_validate(entry),
    )


@router.post("/{entry_id}/cancel", response_model=WaitingListOut)
async def cancel_entry(
    entry_id: UUID,
    data: WaitingListCancel,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await _load_for(repos, current_user, entry_id, Permission.MANAGE_WAITING_LIST)
    return await cancel_waiting_list_entry(repos, entry_id, data.reason)
