"""Staff user lookups for authentication."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select

from salonbook.models.salon import User
from salonbook.repositories.base import SQLRepository


class UserRepository(SQLRepository):

    async def get(self, user_id: UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()
