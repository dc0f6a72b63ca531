"""Appointment store."""

from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select, or_, and_, func

from salonbook.models.appointment import (
    Appointment,
    AppointmentAssistant,
    ACTIVE_STATUSES,
)
from salonbook.repositories.base import SQLRepository


class AppointmentRepository(SQLRepository):

    async def get(self, appointment_id: UUID, refresh: bool = False) -> Optional[Appointment]:
        query = select(Appointment).where(Appointment.id == appointment_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_many(self, appointment_ids: list[UUID]) -> list[Appointment]:
        """Fresh copies of the given appointments, in start order."""
        if not appointment_ids:
            return []
        result = await self.db.execute(
            select(Appointment)
            .where(Appointment.id.in_(appointment_ids))
            .order_by(Appointment.start_at)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def find_overlapping(
        self,
        employee_id: UUID,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[UUID] = None,
    ) -> Sequence[Appointment]:
        """Active appointments where the employee is primary or assistant, overlapping [start, end)."""
        assisted = select(AppointmentAssistant.appointment_id).where(
            AppointmentAssistant.employee_id == employee_id
        )
        query = select(Appointment).where(
            or_(Appointment.employee_id == employee_id, Appointment.id.in_(assisted)),
            Appointment.status.in_(ACTIVE_STATUSES),
            Appointment.start_at < end,
            Appointment.end_at > start,
        )
        if exclude_appointment_id:
            query = query.where(Appointment.id != exclude_appointment_id)
        result = await self.db.execute(query.order_by(Appointment.start_at))
        return result.scalars().all()

    async def find_within_buffer(
        self,
        employee_id: UUID,
        start: datetime,
        end: datetime,
        buffered_start: datetime,
        buffered_end: datetime,
        exclude_appointment_id: Optional[UUID] = None,
    ) -> Sequence[Appointment]:
        """Active appointments ending in (buffered_start, start] or starting in [end, buffered_end)."""
        query = select(Appointment).where(
            Appointment.employee_id == employee_id,
            Appointment.status.in_(ACTIVE_STATUSES),
            or_(
                and_(Appointment.end_at > buffered_start, Appointment.end_at <= start),
                and_(Appointment.start_at >= end, Appointment.start_at < buffered_end),
            ),
        )
        if exclude_appointment_id:
            query = query.where(Appointment.id != exclude_appointment_id)
        result = await self.db.execute(query.order_by(Appointment.start_at))
        return result.scalars().all()

    async def list_for_employee_between(
        self, employee_id: UUID, day_start: datetime, day_end: datetime
    ) -> Sequence[Appointment]:
        result = await self.db.execute(
            select(Appointment)
            .where(
                Appointment.employee_id == employee_id,
                Appointment.status.in_(ACTIVE_STATUSES),
                Appointment.start_at >= day_start,
                Appointment.start_at <= day_end,
            )
            .order_by(Appointment.start_at)
        )
        return result.scalars().all()

    async def search(
        self,
        salon_id: UUID,
        employee_id: Optional[UUID] = None,
        client_id: Optional[UUID] = None,
        statuses: Optional[list] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[Sequence[Appointment], int]:
        conditions = [Appointment.salon_id == salon_id]
        if employee_id:
            conditions.append(Appointment.employee_id == employee_id)
        if client_id:
            conditions.append(Appointment.client_id == client_id)
        if statuses:
            conditions.append(Appointment.status.in_(statuses))
        if start_date:
            conditions.append(Appointment.start_at >= start_date)
        if end_date:
            conditions.append(Appointment.start_at <= end_date)

        total = (await self.db.execute(select(func.count(Appointment.id)).where(*conditions))).scalar_one()
        result = await self.db.execute(
            select(Appointment).where(*conditions).order_by(Appointment.start_at).offset(offset).limit(limit)
        )
        return result.scalars().all(), total
