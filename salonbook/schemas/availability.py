"""Pydantic schemas for availability queries."""

from datetime import date, datetime
from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel


class TimeSlot(BaseModel):
    """A candidate (start, end) interval for one employee."""
    start_time: datetime
    end_time: datetime
    available: bool
    employee_id: UUID
    employee_name: Optional[str] = None


class EmployeeAvailability(BaseModel):
    employee_id: UUID
    employee_name: str
    employee_color: Optional[str] = None
    available_slots: list[TimeSlot]
    next_available: Optional[datetime] = None


class AvailabilitySlotsResponse(BaseModel):
    date: date
    total_duration: Optional[int] = None  # None when several employees are listed
    slots: list[TimeSlot]


class DayAvailability(BaseModel):
    date: date
    slots: list[TimeSlot]


class NextAvailableResponse(BaseModel):
    found: bool
    start_time: Optional[datetime] = None
    searched_days: int


class OccupiedBlock(BaseModel):
    """Calendar projection of an appointment or time block."""
    start: datetime
    end: datetime
    type: Literal["APPOINTMENT", "TIME_BLOCK"]
    details: dict[str, Any] = {}
