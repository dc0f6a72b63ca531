"""Pydantic schemas for booking policy."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class BookingPolicy(BaseModel):
    min_advance_hours: int
    max_advance_days: int
    free_cancellation_hours: int
    late_cancellation_hours: int
    late_cancellation_fee: int
    allow_rescheduling: bool
    max_reschedule_count: int
    min_reschedule_hours: int
    no_show_fee_percent: int
    auto_mark_no_show_minutes: int
    allow_same_day_booking: bool
    slot_interval: int
    buffer_time_minutes: int
    enable_reminders: bool
    reminder_24h: bool
    reminder_2h: bool
    reminder_channels: list[str]


class BookingConfigUpdate(BaseModel):
    """Partial update; ranges are checked by the booking policy service."""
    min_advance_hours: Optional[int] = None
    max_advance_days: Optional[int] = None
    free_cancellation_hours: Optional[int] = None
    late_cancellation_hours: Optional[int] = None
    late_cancellation_fee: Optional[int] = None
    allow_rescheduling: Optional[bool] = None
    max_reschedule_count: Optional[int] = None
    min_reschedule_hours: Optional[int] = None
    no_show_fee_percent: Optional[int] = None
    auto_mark_no_show_minutes: Optional[int] = None
    allow_same_day_booking: Optional[bool] = None
    slot_interval: Optional[int] = None
    buffer_time_minutes: Optional[int] = None
    enable_reminders: Optional[bool] = None
    reminder_24h: Optional[bool] = None
    reminder_2h: Optional[bool] = None
    reminder_channels: Optional[list[str]] = None
    booking_slug: Optional[str] = None
    enable_online_booking: Optional[bool] = None
    auto_approve_bookings: Optional[bool] = None
    collect_client_phone: Optional[bool] = None
    collect_client_email: Optional[bool] = None
    require_terms_acceptance: Optional[bool] = None
    booking_page_title: Optional[str] = None


class BookingConfigOut(BookingPolicy):
    id: UUID
    salon_id: UUID
    booking_slug: Optional[str] = None
    enable_online_booking: bool
    auto_approve_bookings: bool
    collect_client_phone: bool
    collect_client_email: bool
    require_terms_acceptance: bool
    booking_page_title: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
