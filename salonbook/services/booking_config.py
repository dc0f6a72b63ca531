"""Booking policy store.

One BookingConfig row per salon, created with defaults the first time it is
read. The engine's hot path (slot grid, buffer) only reads and falls back
to the defaults without writing.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from salonbook.core.exceptions import BookingValidationError, NotFoundError
from salonbook.models.booking_config import (
    ALLOWED_SLOT_INTERVALS,
    DEFAULT_BOOKING_POLICY,
    BookingConfig,
)
from salonbook.repositories.container import Repositories

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"booking_slug", "booking_page_title"}


def get_default_booking_config() -> dict:
    """A fresh copy of the default policy values."""
    defaults = dict(DEFAULT_BOOKING_POLICY)
    defaults["reminder_channels"] = list(DEFAULT_BOOKING_POLICY["reminder_channels"])
    return defaults


def validate_booking_config(values: dict) -> None:
    """Reject out-of-range policy values before anything is persisted."""
    cleared = sorted(field for field, value in values.items() if value is None and field not in NULLABLE_FIELDS)
    if cleared:
        raise BookingValidationError(f"{', '.join(cleared)} cannot be null")

    min_advance = values.get("min_advance_hours")
    if min_advance is not None and min_advance < 0:
        raise BookingValidationError("min_advance_hours cannot be negative")

    max_advance = values.get("max_advance_days")
    if max_advance is not None and max_advance < 1:
        raise BookingValidationError("max_advance_days must be at least 1")

    slot_interval = values.get("slot_interval")
    if slot_interval is not None and slot_interval not in ALLOWED_SLOT_INTERVALS:
        raise BookingValidationError("slot_interval must be 15, 30 or 60 minutes")

    buffer_minutes = values.get("buffer_time_minutes")
    if buffer_minutes is not None and buffer_minutes < 0:
        raise BookingValidationError("buffer_time_minutes cannot be negative")

    for field in ("late_cancellation_fee", "no_show_fee_percent"):
        percent = values.get(field)
        if percent is not None and not 0 <= percent <= 100:
            raise BookingValidationError(f"{field} must be between 0 and 100")


async def _ensure_salon(repos: Repositories, salon_id: UUID) -> None:
    if await repos.salons.get(salon_id) is None:
        raise NotFoundError("Salon not found")


async def get_booking_config(repos: Repositories, salon_id: UUID) -> BookingConfig:
    """Get the salon's config, creating it with defaults on first read."""
    config = await repos.booking_configs.get(salon_id)
    if config is not None:
        return config

    await _ensure_salon(repos, salon_id)
    config = await repos.booking_configs.upsert(salon_id, get_default_booking_config())
    await repos.commit()
    logger.info("Created default booking config for salon %s", salon_id)
    return config


async def update_booking_config(repos: Repositories, salon_id: UUID, values: dict) -> BookingConfig:
    validate_booking_config(values)
    await _ensure_salon(repos, salon_id)

    existing = await repos.booking_configs.get(salon_id)
    if existing is None:
        # First write: start from the defaults so every column is populated.
        values = {**get_default_booking_config(), **values}

    try:
        config = await repos.booking_configs.upsert(salon_id, values)
        await repos.commit()
    except IntegrityError:
        await repos.rollback()
        raise BookingValidationError("booking_slug is already used by another salon")
    logger.info("Updated booking config for salon %s: %s", salon_id, sorted(values))
    return config


async def reset_booking_config(repos: Repositories, salon_id: UUID) -> BookingConfig:
    """Restore the policy defaults (public page settings are kept)."""
    await _ensure_salon(repos, salon_id)
    config = await repos.booking_configs.upsert(salon_id, get_default_booking_config())
    await repos.commit()
    logger.info("Reset booking config for salon %s", salon_id)
    return config


async def get_policy_value(repos: Repositories, salon_id: UUID, field: str):
    """Read one policy field without creating the row."""
    config = await repos.booking_configs.get(salon_id)
    if config is None:
        return DEFAULT_BOOKING_POLICY[field]
    return getattr(config, field)


async def get_slot_interval(repos: Repositories, salon_id: UUID) -> int:
    return await get_policy_value(repos, salon_id, "slot_interval") or DEFAULT_BOOKING_POLICY["slot_interval"]


async def get_buffer_minutes(repos: Repositories, salon_id: UUID) -> int:
    return await get_policy_value(repos, salon_id, "buffer_time_minutes") or 0
