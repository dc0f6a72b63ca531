"""Pydantic schemas for time blocks."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from salonbook.models.time_block import TimeBlockType


class TimeBlockCreate(BaseModel):
    salon_id: UUID
    employee_id: Optional[UUID] = None  # None = salon-wide
    start_time: datetime
    end_time: datetime
    reason: Optional[str] = None
    type: TimeBlockType = TimeBlockType.OTHER


class RecurringTimeBlockCreate(TimeBlockCreate):
    recurrence_rule: str  # RRULE, e.g. "FREQ=DAILY;INTERVAL=1;COUNT=5"


class TimeBlockUpdate(BaseModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    reason: Optional[str] = None
    type: Optional[TimeBlockType] = None


class TimeBlockOut(BaseModel):
    id: UUID
    salon_id: UUID
    employee_id: Optional[UUID] = None
    start_time: datetime
    end_time: datetime
    reason: Optional[str] = None
    type: TimeBlockType
    is_recurring: bool
    recurrence_rule: Optional[str] = None
    parent_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
