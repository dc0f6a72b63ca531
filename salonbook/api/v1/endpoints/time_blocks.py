"""Time block endpoints (breaks, vacations, salon closures)."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from salonbook.core.deps import get_current_user, get_repositories
from salonbook.core.permissions import Permission, require_permission
from salonbook.models.salon import User
from salonbook.models.time_block import TimeBlockType
from salonbook.repositories.container import Repositories
from salonbook.schemas.auth import MessageResponse
from salonbook.schemas.time_block import (
    RecurringTimeBlockCreate,
    TimeBlockCreate,
    TimeBlockOut,
    TimeBlockUpdate,
)
from salonbook.services.time_blocks import (
    create_recurring_time_block,
    create_time_block,
    delete_time_block,
    get_time_block,
    list_time_blocks,
    update_time_block,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=TimeBlockOut, status_code=status.HTTP_201_CREATED)
async def add_time_block(
    data: TimeBlockCreate,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, data.salon_id, Permission.MANAGE_TIME_BLOCKS)
    return await create_time_block(repos, data)


@router.post("/recurring", response_model=list[TimeBlockOut], status_code=status.HTTP_201_CREATED)
async def add_recurring_time_block(
    data: RecurringTimeBlockCreate,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    """Expand an RRULE into one block per occurrence; the parent is listed first."""
    await require_permission(repos, current_user, data.salon_id, Permission.MANAGE_TIME_BLOCKS)
    return await create_recurring_time_block(repos, data)


@router.get("", response_model=list[TimeBlockOut])
async def get_time_blocks(
    salon_id: UUID,
    employee_id: Optional[UUID] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    block_type: Optional[TimeBlockType] = Query(default=None, alias="type"),
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, salon_id, Permission.VIEW_APPOINTMENTS)
    return await list_time_blocks(repos, salon_id, employee_id, start_date, end_date, block_type)


@router.get("/{time_block_id}", response_model=TimeBlockOut)
async def get_time_block_detail(
    time_block_id: UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    block = await get_time_block(repos, time_block_id)
    await require_permission(repos, current_user, block.salon_id, Permission.VIEW_APPOINTMENTS)
    return block


@router.patch("/{time_block_id}", response_model=TimeBlockOut)
async def edit_time_block(
    time_block_id: UUID,
    data: TimeBlockUpdate,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    block = await get_time_block(repos, time_block_id)
    await require_permission(repos, current_user, block.salon_id, Permission.MANAGE_TIME_BLOCKS)
    return await update_time_block(repos, time_block_id, data.model_dump(exclude_unset=True))


@router.delete("/{time_block_id}", response_model=MessageResponse)
async def remove_time_block(
    time_block_id: UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    block = await get_time_block(repos, time_block_id)
    await require_permission(repos, current_user, block.salon_id, Permission.MANAGE_TIME_BLOCKS)
    await delete_time_block(repos, time_block_id)
    return MessageResponse(message="Time block deleted")
