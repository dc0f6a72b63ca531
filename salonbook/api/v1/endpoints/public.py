"""Public booking page endpoints - no authentication required."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from salonbook.core.deps import get_repositories
from salonbook.repositories.container import Repositories
from salonbook.schemas.public_booking import (
    PublicAvailabilityResponse,
    PublicBookingConfigResponse,
    PublicBookingCreate,
    PublicBookingResponse,
)
from salonbook.services.public_booking import (
    create_public_booking,
    get_public_availability,
    get_public_booking_config,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{slug}", response_model=PublicBookingConfigResponse)
async def get_booking_page(slug: str, repos: Repositories = Depends(get_repositories)):
    return await get_public_booking_config(repos, slug)


@router.get("/{slug}/availability", response_model=PublicAvailabilityResponse)
async def get_booking_page_availability(
    slug: str,
    service_id: UUID,
    day: date = Query(..., alias="date"),
    professional_id: Optional[UUID] = None,
    repos: Repositories = Depends(get_repositories),
):
    return await get_public_availability(repos, slug, day, service_id, professional_id)


@router.post("/{slug}/bookings", response_model=PublicBookingResponse, status_code=status.HTTP_201_CREATED)
async def book_from_page(
    slug: str,
    data: PublicBookingCreate,
    repos: Repositories = Depends(get_repositories),
):
    """Book as a client; the client record is matched by phone, then email, or created."""
    return await create_public_booking(repos, slug, data)
