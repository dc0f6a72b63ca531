"""Conflict detection results.

ConflictResult is a closed family: NoConflict plus one subclass per
ConflictType. Callers branch with isinstance or on ``conflict_type``; all
variants serialize to the same ``{has_conflict, conflict_type, message,
conflicts}`` shape.
"""

import enum
from datetime import datetime
from typing import Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel


class ConflictType(str, enum.Enum):
    APPOINTMENT = "APPOINTMENT"
    TIME_BLOCK = "TIME_BLOCK"
    OUTSIDE_HOURS = "OUTSIDE_HOURS"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    BUFFER_TIME = "BUFFER_TIME"


class ConflictingItem(BaseModel):
    """An appointment or time block standing in the way."""
    id: UUID
    kind: Literal["APPOINTMENT", "TIME_BLOCK"]
    start: datetime
    end: datetime
    label: Optional[str] = None


class ConflictResult(BaseModel):
    has_conflict: bool
    conflict_type: Optional[ConflictType] = None
    message: Optional[str] = None
    conflicts: list[ConflictingItem] = []


class NoConflict(ConflictResult):
    has_conflict: Literal[False] = False
    conflict_type: None = None


class AppointmentConflict(ConflictResult):
    has_conflict: Literal[True] = True
    conflict_type: Literal[ConflictType.APPOINTMENT] = ConflictType.APPOINTMENT


class TimeBlockConflict(ConflictResult):
    has_conflict: Literal[True] = True
    conflict_type: Literal[ConflictType.TIME_BLOCK] = ConflictType.TIME_BLOCK


class OutsideHoursConflict(ConflictResult):
    has_conflict: Literal[True] = True
    conflict_type: Literal[ConflictType.OUTSIDE_HOURS] = ConflictType.OUTSIDE_HOURS


class ServiceUnavailableConflict(ConflictResult):
    has_conflict: Literal[True] = True
    conflict_type: Literal[ConflictType.SERVICE_UNAVAILABLE] = ConflictType.SERVICE_UNAVAILABLE


class BufferTimeConflict(ConflictResult):
    has_conflict: Literal[True] = True
    conflict_type: Literal[ConflictType.BUFFER_TIME] = ConflictType.BUFFER_TIME


AnyConflict = Union[
    NoConflict,
    AppointmentConflict,
    TimeBlockConflict,
    OutsideHoursConflict,
    ServiceUnavailableConflict,
    BufferTimeConflict,
]


class ConflictCheckRequest(BaseModel):
    salon_id: UUID
    employee_id: UUID
    start_time: datetime
    end_time: datetime
    service_id: UUID
    exclude_appointment_id: Optional[UUID] = None


class AlternativeSlotsRequest(BaseModel):
    salon_id: UUID
    employee_id: UUID
    service_id: UUID
    preferred_date: datetime
    duration_minutes: int


class AlternativeSlotsResponse(BaseModel):
    alternatives: list[datetime]
