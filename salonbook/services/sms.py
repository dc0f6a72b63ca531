"""Twilio SMS sender for booking notifications.

Best effort: a missing configuration or a Twilio failure is logged and
reported as False, never raised, so a booking or offer is never rolled back
because a message could not be delivered.
"""

import logging
from datetime import datetime
from typing import Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from salonbook.core.config import settings
from salonbook.utils.date_utils import format_time

logger = logging.getLogger(__name__)


def _get_twilio_client() -> Client:
    return Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)


async def send_waiting_list_offer(
    client_phone: Optional[str],
    salon_name: str,
    start: datetime,
    expires_at: datetime,
) -> bool:
    """Tell a waiting-list client that a slot opened up."""
    body = (
        f"{salon_name}: a slot opened on {start:%d/%m} at {format_time(start)}. "
        f"Reply or book before {format_time(expires_at)} UTC to keep it."
    )
    return await _send_sms(client_phone, body)


async def send_booking_confirmation(
    client_phone: Optional[str],
    salon_name: str,
    start: datetime,
    confirmation_code: str,
    pending: bool = False,
) -> bool:
    """Confirmation for a booking made on the public page."""
    status_line = "is awaiting confirmation by the salon" if pending else "is confirmed"
    body = (
        f"{salon_name}: your booking on {start:%d/%m} at {format_time(start)} {status_line}. "
        f"Code: {confirmation_code}"
    )
    return await _send_sms(client_phone, body)


async def _send_sms(to: Optional[str], body: str) -> bool:
    """Send an SMS via Twilio. Returns True on success."""
    if not to:
        logger.warning("No phone number on record, skipping SMS")
        return False

    if not all([settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, settings.TWILIO_PHONE_NUMBER]):
        logger.warning("Twilio credentials not configured, skipping SMS to %s", to)
        return False

    try:
        client = _get_twilio_client()
        message = client.messages.create(
            body=body,
            from_=settings.TWILIO_PHONE_NUMBER,
            to=to,
        )
        logger.info("SMS sent to %s, SID: %s", to, message.sid)
        return True
    except TwilioRestException as e:
        logger.error("Twilio error sending SMS to %s: %s", to, e)
        return False
    except Exception as e:
        logger.error("Unexpected error sending SMS to %s: %s", to, e)
        return False
