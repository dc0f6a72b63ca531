"""Service catalog and client directory."""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select

from salonbook.models.service import Service, Client
from salonbook.repositories.base import SQLRepository


class ServiceRepository(SQLRepository):

    async def get(self, service_id: UUID) -> Optional[Service]:
        result = await self.db.execute(select(Service).where(Service.id == service_id))
        return result.scalar_one_or_none()

    async def get_many(self, salon_id: UUID, service_ids: list[UUID]) -> list[Service]:
        """Services of the salon, in the order requested. Unknown ids are left out."""
        result = await self.db.execute(
            select(Service).where(Service.salon_id == salon_id, Service.id.in_(service_ids))
        )
        by_id = {service.id: service for service in result.scalars().all()}
        return [by_id[service_id] for service_id in service_ids if service_id in by_id]

    async def list_active(self, salon_id: UUID) -> Sequence[Service]:
        result = await self.db.execute(
            select(Service)
            .where(Service.salon_id == salon_id, Service.is_active == True)  # noqa: E712
            .order_by(Service.category, Service.name)
        )
        return result.scalars().all()


class ClientRepository(SQLRepository):

    async def get(self, client_id: UUID) -> Optional[Client]:
        result = await self.db.execute(select(Client).where(Client.id == client_id))
        return result.scalar_one_or_none()

    async def find_by_phone(self, salon_id: UUID, phone: str) -> Optional[Client]:
        result = await self.db.execute(
            select(Client).where(Client.salon_id == salon_id, Client.phone == phone)
        )
        return result.scalars().first()

    async def find_by_email(self, salon_id: UUID, email: str) -> Optional[Client]:
        result = await self.db.execute(
            select(Client).where(Client.salon_id == salon_id, Client.email == email)
        )
        return result.scalars().first()
