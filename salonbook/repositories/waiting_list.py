"""Waiting list store."""

from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select, update

from salonbook.models.waiting_list import WaitingListEntry, WaitingListStatus
from salonbook.repositories.base import SQLRepository


class WaitingListRepository(SQLRepository):

    async def get(self, entry_id: UUID) -> Optional[WaitingListEntry]:
        result = await self.db.execute(select(WaitingListEntry).where(WaitingListEntry.id == entry_id))
        return result.scalar_one_or_none()

    async def find_waiting(self, salon_id: UUID, client_id: UUID) -> Optional[WaitingListEntry]:
        result = await self.db.execute(
            select(WaitingListEntry).where(
                WaitingListEntry.salon_id == salon_id,
                WaitingListEntry.client_id == client_id,
                WaitingListEntry.status == WaitingListStatus.WAITING,
            )
        )
        return result.scalars().first()

    async def search(
        self,
        salon_id: UUID,
        status: Optional[WaitingListStatus] = None,
        employee_id: Optional[UUID] = None,
        client_id: Optional[UUID] = None,
    ) -> Sequence[WaitingListEntry]:
        """Entries ordered by priority (highest first), FIFO within a priority."""
        query = select(WaitingListEntry).where(WaitingListEntry.salon_id == salon_id)
        if status:
            query = query.where(WaitingListEntry.status == status)
        if employee_id:
            query = query.where(WaitingListEntry.employee_id == employee_id)
        if client_id:
            query = query.where(WaitingListEntry.client_id == client_id)
        query = query.order_by(WaitingListEntry.priority.desc(), WaitingListEntry.created_at.asc())
        result = await self.db.execute(query)
        return result.scalars().all()

    async def expire_offers(self, now: datetime, salon_id: Optional[UUID] = None) -> int:
        stmt = (
            update(WaitingListEntry)
            .where(
                WaitingListEntry.status == WaitingListStatus.NOTIFIED,
                WaitingListEntry.expires_at <= now,
            )
            .values(status=WaitingListStatus.EXPIRED, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if salon_id:
            stmt = stmt.where(WaitingListEntry.salon_id == salon_id)
        result = await self.db.execute(stmt)
        return result.rowcount
