"""Salon, staff user and membership models."""

import enum
import uuid
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from salonbook.core.database import Base
from salonbook.utils.date_utils import utcnow


class MemberRole(str, enum.Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    STAFF = "STAFF"
    RECEPTIONIST = "RECEPTIONIST"


class Salon(Base):
    __tablename__ = "salons"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    timezone = Column(String(64), nullable=False, default="America/Sao_Paulo")
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    employees = relationship("Employee", back_populates="salon")
    services = relationship("Service", back_populates="salon")
    booking_config = relationship("BookingConfig", back_populates="salon", uselist=False)
    members = relationship("SalonMember", back_populates="salon")


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    memberships = relationship("SalonMember", back_populates="user")


class SalonMember(Base):
    """Links a staff user to a salon with a role; read by the authorization gate."""
    __tablename__ = "salon_members"
    __table_args__ = (UniqueConstraint("salon_id", "user_id", name="uq_salon_member"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    salon_id = Column(UUID(as_uuid=True), ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(MemberRole, name="member_role"), nullable=False, default=MemberRole.STAFF)
    is_active = Column(Boolean, nullable=False, default=True)

    salon = relationship("Salon", back_populates="members")
    user = relationship("User", back_populates="memberships")
