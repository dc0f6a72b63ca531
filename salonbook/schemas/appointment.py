"""Pydantic schemas for appointments."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from salonbook.models.appointment import AppointmentStatus, BookingSource, CancelledBy
from salonbook.schemas.recurrence import RecurrenceRule


class AppointmentCreate(BaseModel):
    salon_id: UUID
    client_id: UUID
    employee_id: UUID
    service_ids: list[UUID] = Field(min_length=1)
    start_time: datetime
    notes: Optional[str] = None
    booking_source: BookingSource = BookingSource.STAFF
    assistant_ids: list[UUID] = []


class RecurringAppointmentCreate(AppointmentCreate):
    recurrence_rule: RecurrenceRule


class AppointmentReschedule(BaseModel):
    start_time: datetime
    end_time: Optional[datetime] = None


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentCancel(BaseModel):
    reason: Optional[str] = None
    cancelled_by: CancelledBy = CancelledBy.STAFF


class AppointmentServiceOut(BaseModel):
    service_id: UUID
    duration: int
    price: Decimal

    class Config:
        from_attributes = True


class AppointmentOut(BaseModel):
    id: UUID
    salon_id: UUID
    client_id: UUID
    employee_id: UUID
    start_at: datetime
    end_at: datetime
    status: AppointmentStatus
    total_price: Decimal
    booking_source: BookingSource
    confirmation_code: str
    notes: Optional[str] = None
    reschedule_count: int = 0
    cancelled_by: Optional[CancelledBy] = None
    cancellation_reason: Optional[str] = None
    cancellation_fee: Optional[Decimal] = None
    services: list[AppointmentServiceOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AppointmentList(BaseModel):
    appointments: list[AppointmentOut]
    total: int
    limit: int
    offset: int


class CancelAppointmentResponse(BaseModel):
    appointment: AppointmentOut
    waiting_list_matches: list[UUID]


class RecurringAppointmentResponse(BaseModel):
    parent: AppointmentOut
    children: list[AppointmentOut]
    skipped: list[datetime]
    rrule: str
    summary: str
    total_created: int
    repeat_until: Optional[date] = None
