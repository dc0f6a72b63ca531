"""Waiting list model and its offer state machine."""

import enum
import uuid
from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, Text, ForeignKey, Enum, Index, JSON, text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship

from salonbook.core.database import Base
from salonbook.utils.date_utils import utcnow


class WaitingListStatus(str, enum.Enum):
    WAITING = "WAITING"
    NOTIFIED = "NOTIFIED"
    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


# Nothing ever moves back to WAITING.
WAITING_LIST_TRANSITIONS = {
    WaitingListStatus.WAITING: {WaitingListStatus.NOTIFIED, WaitingListStatus.CANCELLED},
    WaitingListStatus.NOTIFIED: {WaitingListStatus.ACCEPTED, WaitingListStatus.EXPIRED, WaitingListStatus.CANCELLED},
    WaitingListStatus.ACCEPTED: set(),
    WaitingListStatus.EXPIRED: set(),
    WaitingListStatus.CANCELLED: set(),
}

TERMINAL_STATUSES = (WaitingListStatus.ACCEPTED, WaitingListStatus.EXPIRED, WaitingListStatus.CANCELLED)


class WaitingListEntry(Base):
    __tablename__ = "waiting_list_entries"
    __table_args__ = (
        # At most one WAITING entry per client and salon.
        Index(
            "uq_waiting_list_one_waiting_per_client",
            "salon_id",
            "client_id",
            unique=True,
            postgresql_where=text("status = 'WAITING'"),
            sqlite_where=text("status = 'WAITING'"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    salon_id = Column(UUID(as_uuid=True), ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id"), nullable=False, index=True)
    employee_id = Column(UUID(as_uuid=True), ForeignKey("employees.id"), nullable=True)
    service_ids = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)

    preferred_date = Column(Date, nullable=True)
    preferred_start_time = Column(String(5), nullable=True)
    preferred_end_time = Column(String(5), nullable=True)
    flexible_timing = Column(Boolean, nullable=False, default=True)
    priority = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)

    status = Column(Enum(WaitingListStatus, name="waiting_list_status"), nullable=False, default=WaitingListStatus.WAITING, index=True)
    notified_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    offered_start = Column(DateTime, nullable=True)
    offered_end = Column(DateTime, nullable=True)
    appointment_id = Column(UUID(as_uuid=True), ForeignKey("appointments.id"), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    client = relationship("Client")
    employee = relationship("Employee")
