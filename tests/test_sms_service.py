"""Tests for SMS service: verifies behavior when Twilio is not configured or fails."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from twilio.base.exceptions import TwilioRestException

from salonbook.core.config import settings
from salonbook.services import sms


@pytest.fixture
def no_twilio(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "")
    monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "")
    monkeypatch.setattr(settings, "TWILIO_PHONE_NUMBER", "")


@pytest.fixture
def fake_twilio(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "token")
    monkeypatch.setattr(settings, "TWILIO_PHONE_NUMBER", "+15550000000")
    twilio_client = MagicMock()
    monkeypatch.setattr(sms, "_get_twilio_client", lambda: twilio_client)
    return twilio_client


@pytest.mark.asyncio
async def test_sms_skipped_when_no_credentials(no_twilio):
    """SMS should gracefully return False when Twilio creds are empty."""
    result = await sms.send_waiting_list_offer(
        "+5511999990000", "Studio Bela", datetime(2030, 1, 7, 10, 0), datetime(2030, 1, 6, 12, 0)
    )
    assert result is False


@pytest.mark.asyncio
async def test_sms_skipped_without_phone(fake_twilio):
    result = await sms.send_booking_confirmation(None, "Studio Bela", datetime(2030, 1, 7, 10, 0), "ABCD2345")
    assert result is False
    fake_twilio.messages.create.assert_not_called()


@pytest.mark.asyncio
async def test_confirmation_message_body(fake_twilio):
    result = await sms.send_booking_confirmation(
        "+5511999990000", "Studio Bela", datetime(2030, 1, 7, 10, 0), "ABCD2345", pending=True
    )

    assert result is True
    kwargs = fake_twilio.messages.create.call_args.kwargs
    assert kwargs["to"] == "+5511999990000"
    assert kwargs["from_"] == "+15550000000"
    assert "ABCD2345" in kwargs["body"]
    assert "awaiting confirmation" in kwargs["body"]


@pytest.mark.asyncio
async def test_twilio_error_returns_false(fake_twilio):
    fake_twilio.messages.create.side_effect = TwilioRestException(500, "/Messages", "boom")

    result = await sms.send_waiting_list_offer(
        "+5511999990000", "Studio Bela", datetime(2030, 1, 7, 10, 0), datetime(2030, 1, 6, 12, 0)
    )
    assert result is False
