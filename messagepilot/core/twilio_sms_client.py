# messagepilot/core/twilio_sms_client.py

import asyncio
import logging
from typing import Dict, Any

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

logger = logging.getLogger(__name__)


def to_e164(number: str) -> str:
    return f"+{number.strip().lstrip('+')}"


class TwilioSmsClient:
    def __init__(self, sid: str, token: str, from_number: str):
        self.from_number = to_e164(from_number) if from_number else ""
        # Without credentials every send fails instead of the constructor
        self._client = Client(sid, token) if sid and token else None

    @property
    def configured(self) -> bool:
        return self._client is not None and bool(self.from_number)

    async def send(self, recipient: str, content: str) -> Dict[str, Any]:
        if not self.configured:
            logger.error("Twilio credentials not configured.")
            return {"success": False, "message": "SMS API credentials not configured."}

        to_number = to_e164(recipient)

        try:
            # Use asyncio.to_thread for the blocking Twilio SDK call
            msg = await asyncio.to_thread(
                self._client.messages.create,
                from_=self.from_number,
                to=to_number,
                body=content,
            )
        except TwilioException as e:
            logger.error(f"Error sending SMS to {to_number}: {e}")
            return {"success": False, "message": str(e)}

        return {"success": True, "message": f"Queued with Twilio as {msg.sid}", "sid": msg.sid}
