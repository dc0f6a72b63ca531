"""Employee directory: employees, weekly schedules and service assignments."""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select

from salonbook.models.employee import Employee, EmployeeSchedule, EmployeeService
from salonbook.repositories.base import SQLRepository


class EmployeeRepository(SQLRepository):

    async def get(self, employee_id: UUID) -> Optional[Employee]:
        result = await self.db.execute(select(Employee).where(Employee.id == employee_id))
        return result.scalar_one_or_none()

    async def lock(self, employee_id: UUID) -> Optional[Employee]:
        """Row-lock the employee for the rest of the transaction.

        Serialises concurrent check-and-insert bookings for one employee.
        SQLite ignores FOR UPDATE; there the single writer lock applies.
        """
        result = await self.db.execute(
            select(Employee).where(Employee.id == employee_id).with_for_update()
        )
        return result.scalar_one_or_none()

    async def schedules_for_day(self, employee_id: UUID, day_of_week: int) -> Sequence[EmployeeSchedule]:
        result = await self.db.execute(
            select(EmployeeSchedule)
            .where(
                EmployeeSchedule.employee_id == employee_id,
                EmployeeSchedule.day_of_week == day_of_week,
                EmployeeSchedule.is_active == True,  # noqa: E712
            )
            .order_by(EmployeeSchedule.start_time)
        )
        return result.scalars().all()

    async def get_assignment(self, employee_id: UUID, service_id: UUID) -> Optional[EmployeeService]:
        result = await self.db.execute(
            select(EmployeeService).where(
                EmployeeService.employee_id == employee_id,
                EmployeeService.service_id == service_id,
            )
        )
        return result.scalar_one_or_none()

    async def assignments_for(self, employee_id: UUID, service_ids: list[UUID]) -> dict[UUID, EmployeeService]:
        result = await self.db.execute(
            select(EmployeeService).where(
                EmployeeService.employee_id == employee_id,
                EmployeeService.service_id.in_(service_ids),
            )
        )
        return {link.service_id: link for link in result.scalars().all()}

    async def list_for_services(self, salon_id: UUID, service_ids: list[UUID]) -> Sequence[Employee]:
        """Active employees of the salon linked to any of the services, in name order."""
        linked = select(EmployeeService.employee_id).where(EmployeeService.service_id.in_(service_ids))
        result = await self.db.execute(
            select(Employee)
            .where(
                Employee.salon_id == salon_id,
                Employee.is_active == True,  # noqa: E712
                Employee.id.in_(linked),
            )
            .order_by(Employee.name)
        )
        return result.scalars().all()

    async def list_bookable_online(self, salon_id: UUID) -> Sequence[Employee]:
        result = await self.db.execute(
            select(Employee)
            .where(
                Employee.salon_id == salon_id,
                Employee.is_active == True,  # noqa: E712
                Employee.accepts_online_booking == True,  # noqa: E712
            )
            .order_by(Employee.name)
        )
        return result.scalars().all()
