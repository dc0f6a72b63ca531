"""Recurrence rules as a tagged union on ``frequency``."""

from datetime import date, datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class RecurrenceBase(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    interval: int = 1
    end_date: Optional[date] = None
    occurrences: Optional[int] = None


class DailyRecurrence(RecurrenceBase):
    frequency: Literal["DAILY"] = "DAILY"


class WeeklyRecurrence(RecurrenceBase):
    frequency: Literal["WEEKLY"] = "WEEKLY"
    days_of_week: tuple[int, ...] = ()  # 0 = Sunday ... 6 = Saturday

    @field_validator("days_of_week", mode="before")
    @classmethod
    def normalize_days(cls, value):
        if value is None:
            return ()
        return tuple(sorted(set(value)))


class MonthlyRecurrence(RecurrenceBase):
    frequency: Literal["MONTHLY"] = "MONTHLY"


RecurrenceRule = Annotated[
    Union[DailyRecurrence, WeeklyRecurrence, MonthlyRecurrence],
    Field(discriminator="frequency"),
]


class ExpandRecurrenceRequest(BaseModel):
    start: datetime
    rule: RecurrenceRule
    max_occurrences: Optional[int] = Field(default=None, ge=1, le=366)


class ExpandRecurrenceResponse(BaseModel):
    rrule: str
    summary: str
    occurrences: list[datetime]


class RRuleRequest(BaseModel):
    rule: RecurrenceRule


class RRuleParseRequest(BaseModel):
    rrule: str


class RRuleResponse(BaseModel):
    rrule: str
    rule: RecurrenceRule
    summary: str
