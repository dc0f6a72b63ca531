"""Pydantic schemas for the waiting list."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from salonbook.models.waiting_list import WaitingListStatus
from salonbook.schemas.appointment import AppointmentOut


class WaitingListCreate(BaseModel):
    salon_id: UUID
    client_id: UUID
    employee_id: Optional[UUID] = None
    service_ids: list[UUID] = Field(min_length=1)
    preferred_date: Optional[date] = None
    preferred_start_time: Optional[str] = None  # "HH:MM"
    preferred_end_time: Optional[str] = None
    flexible_timing: bool = True
    priority: int = 0
    notes: Optional[str] = None


class WaitingListUpdate(BaseModel):
    preferred_date: Optional[date] = None
    preferred_start_time: Optional[str] = None
    preferred_end_time: Optional[str] = None
    flexible_timing: Optional[bool] = None
    priority: Optional[int] = None
    notes: Optional[str] = None


class WaitingListNotify(BaseModel):
    start_time: datetime
    end_time: datetime


class WaitingListAccept(BaseModel):
    start_time: Optional[datetime] = None  # defaults to the offered slot
    employee_id: Optional[UUID] = None  # required when the entry has none
    notes: Optional[str] = None


class WaitingListCancel(BaseModel):
    reason: Optional[str] = None


class WaitingListOut(BaseModel):
    id: UUID
    salon_id: UUID
    client_id: UUID
    employee_id: Optional[UUID] = None
    service_ids: list[UUID]
    preferred_date: Optional[date] = None
    preferred_start_time: Optional[str] = None
    preferred_end_time: Optional[str] = None
    flexible_timing: bool
    priority: int
    notes: Optional[str] = None
    status: WaitingListStatus
    notified_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    offered_start: Optional[datetime] = None
    offered_end: Optional[datetime] = None
    appointment_id: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AcceptWaitingListResponse(BaseModel):
    appointment: AppointmentOut
    waiting_list_entry: WaitingListOut


class ExpireOffersResponse(BaseModel):
    expired_count: int
