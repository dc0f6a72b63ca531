"""Per-salon booking policy."""

import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship

from salonbook.core.database import Base
from salonbook.utils.date_utils import utcnow

ALLOWED_SLOT_INTERVALS = (15, 30, 60)

# Applied when a salon's config row is first created or reset.
DEFAULT_BOOKING_POLICY = {
    "min_advance_hours": 2,
    "max_advance_days": 90,
    "free_cancellation_hours": 24,
    "late_cancellation_hours": 12,
    "late_cancellation_fee": 50,
    "allow_rescheduling": True,
    "max_reschedule_count": 2,
    "min_reschedule_hours": 24,
    "no_show_fee_percent": 100,
    "auto_mark_no_show_minutes": 15,
    "allow_same_day_booking": True,
    "slot_interval": 15,
    "buffer_time_minutes": 0,
    "enable_reminders": True,
    "reminder_24h": True,
    "reminder_2h": True,
    "reminder_channels": ["EMAIL", "SMS"],
}


class BookingConfig(Base):
    __tablename__ = "booking_configs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    salon_id = Column(UUID(as_uuid=True), ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, unique=True)

    # Booking window
    min_advance_hours = Column(Integer, nullable=False, default=2)
    max_advance_days = Column(Integer, nullable=False, default=90)
    allow_same_day_booking = Column(Boolean, nullable=False, default=True)

    # Slot grid
    slot_interval = Column(Integer, nullable=False, default=15)
    buffer_time_minutes = Column(Integer, nullable=False, default=0)

    # Cancellation / rescheduling / no-show
    free_cancellation_hours = Column(Integer, nullable=False, default=24)
    late_cancellation_hours = Column(Integer, nullable=False, default=12)
    late_cancellation_fee = Column(Integer, nullable=False, default=50)  # percent
    allow_rescheduling = Column(Boolean, nullable=False, default=True)
    max_reschedule_count = Column(Integer, nullable=False, default=2)
    min_reschedule_hours = Column(Integer, nullable=False, default=24)
    no_show_fee_percent = Column(Integer, nullable=False, default=100)
    auto_mark_no_show_minutes = Column(Integer, nullable=False, default=15)

    # Reminders
    enable_reminders = Column(Boolean, nullable=False, default=True)
    reminder_24h = Column(Boolean, nullable=False, default=True)
    reminder_2h = Column(Boolean, nullable=False, default=True)
    reminder_channels = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=lambda: ["EMAIL", "SMS"])

    # Public booking page
    booking_slug = Column(String(100), nullable=True, unique=True, index=True)
    enable_online_booking = Column(Boolean, nullable=False, default=False)
    auto_approve_bookings = Column(Boolean, nullable=False, default=False)
    collect_client_phone = Column(Boolean, nullable=False, default=True)
    collect_client_email = Column(Boolean, nullable=False, default=False)
    require_terms_acceptance = Column(Boolean, nullable=False, default=False)
    booking_page_title = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    salon = relationship("Salon", back_populates="booking_config")
