"""Alembic environment for the salonbook schema (async, asyncpg)."""

import asyncio
import os
import sys
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from salonbook.core.config import settings  # noqa: E402
from salonbook.core.database import Base  # noqa: E402
import salonbook.models.registry  # noqa: E402,F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Created by hand in the migrations; autogenerate cannot see them on the models.
MANUAL_OBJECTS = {"ex_appointments_employee_no_overlap", "uq_waiting_list_one_waiting_per_client"}


def database_url() -> str:
    """``alembic -x db_url=...`` wins over DATABASE_URL."""
    return context.get_x_argument(as_dictionary=True).get("db_url", settings.DATABASE_URL)


def include_object(obj, name, type_, reflected, compare_to):
    return not (reflected and name in MANUAL_OBJECTS)


def configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        include_object=include_object,
        **kwargs,
    )


def run_migrations_offline() -> None:
    configure(url=database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_sync_migrations(connection) -> None:
    configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(database_url(), poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(run_sync_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
