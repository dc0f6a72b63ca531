"""Shared test fixtures for the salonbook API tests.

Uses an in-memory SQLite async engine so tests run without PostgreSQL.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from salonbook.core.database import Base, get_db
from salonbook.main import app
from salonbook.models.booking_config import BookingConfig
from salonbook.models.employee import Employee, EmployeeSchedule, EmployeeService
from salonbook.models.salon import MemberRole, Salon, SalonMember, User
from salonbook.models.service import Client, Service
from salonbook.repositories.container import Repositories
from salonbook.services.auth import create_access_token, hash_password

from helpers import SALON_TZ

# Use aiosqlite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
TestSession = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_db():
    async with TestSession() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture
async def client():
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db():
    """Direct DB session for test setup/assertions."""
    async with TestSession() as session:
        yield session


@pytest.fixture
def repos(db):
    return Repositories(db)


@pytest_asyncio.fixture
async def salon(db):
    salon = Salon(name="Studio Bela", timezone=SALON_TZ, phone="+551130000000")
    db.add(salon)
    await db.commit()
    return salon


@pytest_asyncio.fixture
async def owner(db, salon):
    user = User(
        email="owner@studiobela.com",
        hashed_password=hash_password("testpass123"),
        full_name="Owner",
        is_active=True,
    )
    db.add(user)
    await db.flush()
    db.add(SalonMember(salon_id=salon.id, user_id=user.id, role=MemberRole.OWNER))
    await db.commit()
    return user


@pytest.fixture
def auth_headers(owner):
    token = create_access_token(data={"sub": str(owner.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def service(db, salon):
    service = Service(salon_id=salon.id, name="Haircut", duration=60, price=Decimal("100.00"), category="Hair")
    db.add(service)
    await db.commit()
    return service


@pytest_asyncio.fixture
async def employee(db, salon, service):
    """Ana works Mondays 09:00-17:00 and performs the haircut."""
    employee = Employee(salon_id=salon.id, name="Ana", color="#ff8800")
    db.add(employee)
    await db.flush()
    db.add(EmployeeSchedule(employee_id=employee.id, day_of_week=1, start_time="09:00", end_time="17:00"))
    db.add(EmployeeService(employee_id=employee.id, service_id=service.id))
    await db.commit()
    return employee


@pytest_asyncio.fixture
async def salon_client(db, salon):
    client = Client(salon_id=salon.id, name="Maria", phone="+5511999990000", email="maria@example.com")
    db.add(client)
    await db.commit()
    return client


@pytest_asyncio.fixture
async def booking_config(db, salon):
    """Policy with a 30 minute grid and an enabled public page."""
    config = BookingConfig(
        salon_id=salon.id,
        slot_interval=30,
        booking_slug="studio-bela",
        enable_online_booking=True,
        auto_approve_bookings=True,
    )
    db.add(config)
    await db.commit()
    return config
