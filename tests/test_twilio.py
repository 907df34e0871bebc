# tests/test_twilio.py

import pytest
from unittest.mock import MagicMock
from twilio.base.exceptions import TwilioRestException
from messagepilot.core.twilio_sms_client import TwilioSmsClient, to_e164


def test_twilio_client_init():
    client = TwilioSmsClient(sid="test_sid", token="test_token", from_number="1234567890")
    assert client._client.username == "test_sid"
    assert client._client.password == "test_token"
    assert client.from_number == "+1234567890"

    # Test with number already in E.164 format
    client2 = TwilioSmsClient(sid="test_sid", token="test_token", from_number="+1234567890")
    assert client2.from_number == "+1234567890"


def test_to_e164():
    assert to_e164("15550000001") == "+15550000001"
    assert to_e164(" +15550000001 ") == "+15550000001"


@pytest.mark.asyncio
async def test_send():
    client = TwilioSmsClient(sid="test_sid", token="test_token", from_number="1234567890")

    # Mock the Twilio client's messages.create method
    mock_message = MagicMock()
    mock_message.sid = "test_message_sid"
    client._client.messages.create = MagicMock(return_value=mock_message)

    result = await client.send("9876543210", "Hello, world!")

    assert result["success"] is True
    assert result["sid"] == "test_message_sid"
    client._client.messages.create.assert_called_once_with(
        from_="+1234567890", to="+9876543210", body="Hello, world!"
    )


@pytest.mark.asyncio
async def test_send_twilio_error():
    client = TwilioSmsClient(sid="test_sid", token="test_token", from_number="1234567890")
    client._client.messages.create = MagicMock(
        side_effect=TwilioRestException(400, "https://api.twilio.com", msg="Invalid 'To' number")
    )

    result = await client.send("123", "Hello")

    assert result["success"] is False
    assert "Invalid 'To' number" in result["message"]


@pytest.mark.asyncio
async def test_send_without_credentials():
    client = TwilioSmsClient(sid="", token="", from_number="")

    assert client.configured is False
    result = await client.send("9876543210", "Hello")

    assert result == {"success": False, "message": "SMS API credentials not configured."}
