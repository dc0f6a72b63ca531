"""Per-salon booking policy endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from salonbook.core.deps import get_current_user, get_repositories
from salonbook.core.permissions import Permission, require_permission
from salonbook.models.salon import User
from salonbook.repositories.container import Repositories
from salonbook.schemas.booking_config import BookingConfigOut, BookingConfigUpdate, BookingPolicy
from salonbook.services.booking_config import (
    get_booking_config,
    get_default_booking_config,
    reset_booking_config,
    update_booking_config,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/defaults", response_model=BookingPolicy)
async def get_defaults():
    return get_default_booking_config()


@router.get("/{salon_id}", response_model=BookingConfigOut)
async def get_config(
    salon_id: UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    """Salon policy; a salon without one gets the defaults persisted on first read."""
    await require_permission(repos, current_user, salon_id, Permission.VIEW_APPOINTMENTS)
    return await get_booking_config(repos, salon_id)


@router.put("/{salon_id}", response_model=BookingConfigOut)
async def put_config(
    salon_id: UUID,
    data: BookingConfigUpdate,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, salon_id, Permission.MANAGE_BOOKING_CONFIG)
    config = await update_booking_config(repos, salon_id, data.model_dump(exclude_unset=True))
    logger.info("Booking config for salon %s updated by user %s", salon_id, current_user.id)
    return config


@router.post("/{salon_id}/reset", response_model=BookingConfigOut)
async def reset_config(
    salon_id: UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_user),
):
    await require_permission(repos, current_user, salon_id, Permission.MANAGE_BOOKING_CONFIG)
    return await reset_booking_config(repos, salon_id)
