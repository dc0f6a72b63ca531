"""Salon and membership lookups."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select

from salonbook.models.salon import Salon, SalonMember
from salonbook.repositories.base import SQLRepository


class SalonRepository(SQLRepository):

    async def get(self, salon_id: UUID) -> Optional[Salon]:
        result = await self.db.execute(select(Salon).where(Salon.id == salon_id))
        return result.scalar_one_or_none()

    async def get_membership(self, salon_id: UUID, user_id: UUID) -> Optional[SalonMember]:
        result = await self.db.execute(
            select(SalonMember).where(
                SalonMember.salon_id == salon_id,
                SalonMember.user_id == user_id,
                SalonMember.is_active == True,  # noqa: E712
            )
        )
        return result.scalar_one_or_none()
