"""Bundle of per-entity repositories sharing one session."""

from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.repositories.appointments import AppointmentRepository
from salonbook.repositories.booking_configs import BookingConfigRepository
from salonbook.repositories.catalog import ClientRepository, ServiceRepository
from salonbook.repositories.employees import EmployeeRepository
from salonbook.repositories.salons import SalonRepository
from salonbook.repositories.time_blocks import TimeBlockRepository
from salonbook.repositories.users import UserRepository
from salonbook.repositories.waiting_list import WaitingListRepository


class Repositories:
    """Injected into every scheduling service instead of a raw session."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.appointments = AppointmentRepository(db)
        self.time_blocks = TimeBlockRepository(db)
        self.employees = EmployeeRepository(db)
        self.services = ServiceRepository(db)
        self.clients = ClientRepository(db)
        self.booking_configs = BookingConfigRepository(db)
        self.waiting_list = WaitingListRepository(db)
        self.salons = SalonRepository(db)
        self.users = UserRepository(db)

    async def commit(self):
        await self.db.commit()

    async def rollback(self):
        await self.db.rollback()
