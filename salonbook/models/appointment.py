"""Appointment model for the booking engine."""

import enum
import uuid
from sqlalchemy import Column, String, Integer, Numeric, DateTime, Date, Text, ForeignKey, Enum, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from salonbook.core.database import Base
from salonbook.utils.date_utils import utcnow


class AppointmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_SERVICE = "IN_SERVICE"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


# Statuses that occupy the employee's time.
ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED, AppointmentStatus.IN_SERVICE)

STATUS_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED, AppointmentStatus.IN_SERVICE, AppointmentStatus.CANCELLED},
    AppointmentStatus.CONFIRMED: {AppointmentStatus.IN_SERVICE, AppointmentStatus.DONE, AppointmentStatus.CANCELLED},
    AppointmentStatus.IN_SERVICE: {AppointmentStatus.DONE},
    AppointmentStatus.DONE: set(),
    AppointmentStatus.CANCELLED: set(),
}


class BookingSource(str, enum.Enum):
    STAFF = "STAFF"
    CLIENT_ONLINE = "CLIENT_ONLINE"
    CLIENT_PHONE = "CLIENT_PHONE"
    WALK_IN = "WALK_IN"
    WAITING_LIST = "WAITING_LIST"


class CancelledBy(str, enum.Enum):
    CLIENT = "CLIENT"
    STAFF = "STAFF"
    SYSTEM = "SYSTEM"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_employee_window", "employee_id", "start_at", "end_at"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    salon_id = Column(UUID(as_uuid=True), ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id"), nullable=False, index=True)
    employee_id = Column(UUID(as_uuid=True), ForeignKey("employees.id"), nullable=False, index=True)

    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    status = Column(Enum(AppointmentStatus, name="appointment_status"), nullable=False, default=AppointmentStatus.PENDING, index=True)

    total_price = Column(Numeric(10, 2), nullable=False, default=0)
    booking_source = Column(Enum(BookingSource, name="booking_source"), nullable=False, default=BookingSource.STAFF)
    confirmation_code = Column(String(8), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    reschedule_count = Column(Integer, nullable=False, default=0)

    cancelled_by = Column(Enum(CancelledBy, name="cancelled_by"), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    cancellation_fee = Column(Numeric(10, 2), nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    client = relationship("Client")
    employee = relationship("Employee")
    services = relationship("AppointmentService", back_populates="appointment", cascade="all, delete-orphan", lazy="selectin")
    assistants = relationship("AppointmentAssistant", back_populates="appointment", cascade="all, delete-orphan", lazy="selectin")
    repetition = relationship("AppointmentRepetition", back_populates="appointment", uselist=False, cascade="all, delete-orphan")

    @property
    def service_ids(self):
        return [line.service_id for line in self.services]


class AppointmentService(Base):
    """One service line of an appointment, with the duration/price actually applied."""
    __tablename__ = "appointment_services"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_id = Column(UUID(as_uuid=True), ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id"), nullable=False)
    duration = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)

    appointment = relationship("Appointment", back_populates="services")


class AppointmentAssistant(Base):
    """An employee helping on an appointment; their time is occupied too."""
    __tablename__ = "appointment_assistants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_id = Column(UUID(as_uuid=True), ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = Column(UUID(as_uuid=True), ForeignKey("employees.id"), nullable=False, index=True)

    appointment = relationship("Appointment", back_populates="assistants")


class AppointmentRepetition(Base):
    """Recurrence rule attached to the first appointment of a series."""
    __tablename__ = "appointment_repetitions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_id = Column(UUID(as_uuid=True), ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, unique=True)
    rule = Column(String(255), nullable=False)
    repeat_until = Column(Date, nullable=True)

    appointment = relationship("Appointment", back_populates="repetition")
