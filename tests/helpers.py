"""Row builders shared by the service tests."""

from datetime import date, datetime, timedelta
from decimal import Decimal

from salonbook.models.appointment import Appointment, AppointmentService, AppointmentStatus
from salonbook.models.time_block import TimeBlock, TimeBlockType
from salonbook.utils.date_utils import local_now

SALON_TZ = "America/Sao_Paulo"

# 2030-01-07 is a Monday.
MONDAY = date(2030, 1, 7)


def next_monday() -> date:
    """First Monday strictly after today in the salon timezone."""
    today = local_now(SALON_TZ).date()
    return today + timedelta(days=(7 - today.weekday()) % 7 or 7)


async def add_appointment(db, salon, employee, client, service, start: datetime, minutes: int = 60,
                          status: AppointmentStatus = AppointmentStatus.CONFIRMED) -> Appointment:
    appointment = Appointment(
        salon_id=salon.id,
        client_id=client.id,
        employee_id=employee.id,
        start_at=start,
        end_at=start + timedelta(minutes=minutes),
        status=status,
        total_price=Decimal("100.00"),
        confirmation_code="TEST0001",
        services=[AppointmentService(service_id=service.id, duration=minutes, price=Decimal("100.00"))],
    )
    db.add(appointment)
    await db.commit()
    return appointment


async def add_time_block(db, salon, employee, start: datetime, end: datetime,
                         block_type: TimeBlockType = TimeBlockType.BREAK, reason: str = "Lunch") -> TimeBlock:
    block = TimeBlock(
        salon_id=salon.id,
        employee_id=employee.id if employee else None,
        start_time=start,
        end_time=end,
        type=block_type,
        reason=reason,
    )
    db.add(block)
    await db.commit()
    return block
