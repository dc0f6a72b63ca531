"""BookingConfig store."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select

from salonbook.models.booking_config import BookingConfig
from salonbook.models.salon import Salon
from salonbook.repositories.base import SQLRepository


class BookingConfigRepository(SQLRepository):

    async def get(self, salon_id: UUID) -> Optional[BookingConfig]:
        result = await self.db.execute(select(BookingConfig).where(BookingConfig.salon_id == salon_id))
        return result.scalar_one_or_none()

    async def get_by_slug(self, booking_slug: str) -> Optional[BookingConfig]:
        """Config of an active salon whose public booking page is enabled."""
        result = await self.db.execute(
            select(BookingConfig)
            .join(Salon, Salon.id == BookingConfig.salon_id)
            .where(
                BookingConfig.booking_slug == booking_slug,
                BookingConfig.enable_online_booking == True,  # noqa: E712
                Salon.is_active == True,  # noqa: E712
            )
        )
        return result.scalar_one_or_none()

    async def upsert(self, salon_id: UUID, values: dict) -> BookingConfig:
        config = await self.get(salon_id)
        if config is None:
            config = BookingConfig(salon_id=salon_id)
            self.db.add(config)
        for key, value in values.items():
            setattr(config, key, value)
        await self.db.flush()
        return config
