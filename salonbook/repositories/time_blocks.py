"""Time block store. Soft-deleted rows are invisible to every query."""

from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select, or_, and_

from salonbook.models.time_block import TimeBlock, TimeBlockType
from salonbook.repositories.base import SQLRepository


class TimeBlockRepository(SQLRepository):

    async def get(self, time_block_id: UUID) -> Optional[TimeBlock]:
        result = await self.db.execute(
            select(TimeBlock).where(TimeBlock.id == time_block_id, TimeBlock.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    def _applies_to(self, salon_id: UUID, employee_id: UUID):
        # Blocks without an employee close the whole salon.
        return or_(
            TimeBlock.employee_id == employee_id,
            and_(TimeBlock.employee_id.is_(None), TimeBlock.salon_id == salon_id),
        )

    async def find_overlapping(
        self, salon_id: UUID, employee_id: UUID, start: datetime, end: datetime
    ) -> Sequence[TimeBlock]:
        result = await self.db.execute(
            select(TimeBlock)
            .where(
                self._applies_to(salon_id, employee_id),
                TimeBlock.deleted_at.is_(None),
                TimeBlock.start_time < end,
                TimeBlock.end_time > start,
            )
            .order_by(TimeBlock.start_time)
        )
        return result.scalars().all()

    async def list_for_employee_between(
        self, salon_id: UUID, employee_id: UUID, day_start: datetime, day_end: datetime
    ) -> Sequence[TimeBlock]:
        result = await self.db.execute(
            select(TimeBlock)
            .where(
                self._applies_to(salon_id, employee_id),
                TimeBlock.deleted_at.is_(None),
                TimeBlock.start_time <= day_end,
                TimeBlock.end_time >= day_start,
            )
            .order_by(TimeBlock.start_time)
        )
        return result.scalars().all()

    async def search(
        self,
        salon_id: UUID,
        employee_id: Optional[UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        block_type: Optional[TimeBlockType] = None,
    ) -> Sequence[TimeBlock]:
        query = select(TimeBlock).where(TimeBlock.salon_id == salon_id, TimeBlock.deleted_at.is_(None))
        if employee_id:
            query = query.where(TimeBlock.employee_id == employee_id)
        if block_type:
            query = query.where(TimeBlock.type == block_type)
        if start_date:
            query = query.where(TimeBlock.end_time >= start_date)
        if end_date:
            query = query.where(TimeBlock.start_time <= end_date)
        result = await self.db.execute(query.order_by(TimeBlock.start_time))
        return result.scalars().all()
