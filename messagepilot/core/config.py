# messagepilot/core/config.py

import logging
import sys
import os

# Check if running in cloud environment (like Azure)
# If not, assume local development and try to load .env
if os.getenv("WEBSITE_SITE_NAME") is None:
    try:
        from dotenv import load_dotenv

        # Load environment variables from .env file in the project root
        dotenv_path = os.path.join(
            os.path.dirname(__file__), "..", "..", ".env"
        )
        load_dotenv(dotenv_path=dotenv_path, override=False)
    except Exception as e:
        print(f"Error loading .env file: {e}")


class Settings:
    """Simple settings object to hold configuration values"""

    def __init__(self):
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./messagepilot.db")

        # Delivery provider: "http" (generic SMS gateway) or "twilio"
        self.SMS_PROVIDER = os.getenv("SMS_PROVIDER", "http").lower()
        self.SMS_API_KEY = os.getenv("SMS_API_KEY", "")
        self.SMS_API_HOST = os.getenv("SMS_API_HOST", "")
        self.SMS_TIMEOUT_SECONDS = float(os.getenv("SMS_TIMEOUT_SECONDS", "10"))

        self.TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "")
        self.TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
        self.TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER", "")

        if self.SMS_PROVIDER == "twilio":
            if not self.TWILIO_ACCOUNT_SID:
                logging.warning("TWILIO_ACCOUNT_SID environment variable not set.")
            if not self.TWILIO_AUTH_TOKEN:
                logging.warning("TWILIO_AUTH_TOKEN environment variable not set.")
            if not self.TWILIO_PHONE_NUMBER:
                logging.warning("TWILIO_PHONE_NUMBER environment variable not set.")
        else:
            if not self.SMS_API_KEY:
                logging.warning(
                    "SMS_API_KEY environment variable is not set. SMS sending will be disabled."
                )
            if not self.SMS_API_HOST:
                logging.warning(
                    "SMS_API_HOST environment variable is not set. SMS sending will be disabled."
                )


def configure_logging():
    """Configure application logging"""
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("twilio.http_client").setLevel(logging.WARNING)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


# Create global settings instance
settings = Settings()
