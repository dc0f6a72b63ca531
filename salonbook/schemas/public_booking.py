"""Pydantic schemas for the public (unauthenticated) booking page."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr


class PublicSalon(BaseModel):
    id: UUID
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None


class PublicPolicy(BaseModel):
    booking_page_title: Optional[str] = None
    min_advance_hours: int
    max_advance_days: int
    allow_same_day_booking: bool
    slot_interval: int
    free_cancellation_hours: int
    collect_client_phone: bool
    collect_client_email: bool
    require_terms_acceptance: bool
    auto_approve_bookings: bool


class PublicService(BaseModel):
    id: UUID
    name: str
    duration: int
    price: Decimal
    category: Optional[str] = None


class PublicProfessional(BaseModel):
    id: UUID
    name: str
    color: Optional[str] = None


class PublicBookingConfigResponse(BaseModel):
    salon: PublicSalon
    booking_config: PublicPolicy
    services: list[PublicService]
    professionals: list[PublicProfessional]


class PublicSlot(BaseModel):
    start_time: datetime
    end_time: datetime
    professional_id: UUID
    professional_name: str


class PublicAvailabilityResponse(BaseModel):
    available_slots: list[PublicSlot]


class PublicClientData(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    notes: Optional[str] = None


class PublicBookingCreate(BaseModel):
    service_id: UUID
    professional_id: UUID
    start_time: datetime
    client: PublicClientData
    terms_accepted: bool = False


class PublicBookingResponse(BaseModel):
    appointment_id: UUID
    confirmation_code: str
    status: str
    message: str
