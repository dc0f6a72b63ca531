"""Base class for SQLAlchemy-backed repositories."""

from sqlalchemy.ext.asyncio import AsyncSession


class SQLRepository:
    """Wraps one request-scoped AsyncSession.

    Repositories only stage changes (add/flush); the service that owns the
    unit of work decides when to commit.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, obj):
        self.db.add(obj)
        await self.db.flush()
        return obj
