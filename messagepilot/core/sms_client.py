# messagepilot/core/sms_client.py

from typing import Any, Dict, Protocol
import json
import logging

import httpx

logger = logging.getLogger(__name__)


class SmsSender(Protocol):
    async def send(self, recipient: str, content: str) -> Dict[str, Any]:
        """Return ``{"success": bool, "message": str}``."""
        ...


class HttpSmsClient:
    """Client for a form-encoded SMS gateway exposing ``POST /sendMessage``"""

    def __init__(self, api_key: str, api_host: str, timeout: float = 10.0):
        self.api_key = api_key
        self.api_host = api_host
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.api_host.rstrip('/')}/sendMessage"

    @staticmethod
    def _response_message(body: str, default: str) -> str:
        """Pull ``message`` out of a JSON body, falling back to ``default``."""
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, TypeError):
            return default
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return default

    async def send(self, recipient: str, content: str) -> Dict[str, Any]:
        if not self.api_key or not self.api_host:
            error = "SMS API credentials not configured."
            logger.error(f"Failed to send SMS to {recipient}: {error}")
            return {"success": False, "message": error}

        try:
            logger.info(f"Attempting to send SMS to {recipient}...")
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.endpoint,
                    data={
                        "apiKey": self.api_key,
                        "phone": recipient,
                        "message": content,
                    },
                )

            body = response.text
            logger.info(
                f"SMS API response for {recipient}: status {response.status_code}, body: {body}"
            )

            if not response.is_success:
                details = self._response_message(body, body)
                raise httpx.HTTPStatusError(
                    f"API request failed with status {response.status_code}: {details}",
                    request=response.request,
                    response=response,
                )

            message = self._response_message(
                body, f"SMS successfully sent/queued to {recipient}."
            )
            return {"success": True, "message": message}

        except httpx.HTTPError as e:
            logger.error(f"Error sending SMS to {recipient}: {e}")
            return {
                "success": False,
                "message": str(e) or "Failed to send SMS due to an unexpected error.",
            }
