"""Time block model (vacations, breaks, meetings...)."""

import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from salonbook.core.database import Base
from salonbook.utils.date_utils import utcnow


class TimeBlockType(str, enum.Enum):
    VACATION = "VACATION"
    BREAK = "BREAK"
    MEETING = "MEETING"
    PERSONAL = "PERSONAL"
    HOLIDAY = "HOLIDAY"
    OTHER = "OTHER"


class TimeBlock(Base):
    """An interval during which an employee (or, with no employee, the whole salon) is unavailable."""
    __tablename__ = "time_blocks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    salon_id = Column(UUID(as_uuid=True), ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = Column(UUID(as_uuid=True), ForeignKey("employees.id", ondelete="CASCADE"), nullable=True, index=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    reason = Column(Text, nullable=True)
    type = Column(Enum(TimeBlockType, name="time_block_type"), nullable=False, default=TimeBlockType.OTHER)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_rule = Column(String(255), nullable=True)
    parent_id = Column(UUID(as_uuid=True), ForeignKey("time_blocks.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    deleted_at = Column(DateTime, nullable=True)

    employee = relationship("Employee")
