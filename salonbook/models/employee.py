"""Employee, weekly schedule and service-assignment models."""

import uuid
from sqlalchemy import Column, String, Integer, Boolean, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from salonbook.core.database import Base
from salonbook.utils.date_utils import utcnow


class Employee(Base):
    __tablename__ = "employees"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    salon_id = Column(UUID(as_uuid=True), ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    name = Column(String(255), nullable=False)
    color = Column(String(16), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    accepts_online_booking = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    salon = relationship("Salon", back_populates="employees")
    schedules = relationship("EmployeeSchedule", back_populates="employee", cascade="all, delete-orphan")
    employee_services = relationship("EmployeeService", back_populates="employee", cascade="all, delete-orphan")


class EmployeeSchedule(Base):
    """One working period on one weekday (0 = Sunday). Times are HH:MM."""
    __tablename__ = "employee_schedules"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    employee_id = Column(UUID(as_uuid=True), ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    employee = relationship("Employee", back_populates="schedules")


class EmployeeService(Base):
    __tablename__ = "employee_services"
    __table_args__ = (UniqueConstraint("employee_id", "service_id", name="uq_employee_service"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    employee_id = Column(UUID(as_uuid=True), ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    custom_duration = Column(Integer, nullable=True)  # minutes
    custom_price = Column(Numeric(10, 2), nullable=True)

    employee = relationship("Employee", back_populates="employee_services")
    service = relationship("Service", back_populates="employee_services")
