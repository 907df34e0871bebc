from messagepilot.core.config import Settings, settings
from messagepilot.core.sms_client import HttpSmsClient
from messagepilot.core.twilio_sms_client import TwilioSmsClient


def create_sender(config: Settings = None):
    """Build the delivery capability selected by ``SMS_PROVIDER``."""
    config = config or settings
    if config.SMS_PROVIDER == "twilio":
        return TwilioSmsClient(
            config.TWILIO_ACCOUNT_SID,
            config.TWILIO_AUTH_TOKEN,
            config.TWILIO_PHONE_NUMBER,
        )
    if config.SMS_PROVIDER != "http":
        raise ValueError(f"Unknown SMS_PROVIDER: {config.SMS_PROVIDER}")
    return HttpSmsClient(
        config.SMS_API_KEY,
        config.SMS_API_HOST,
        timeout=config.SMS_TIMEOUT_SECONDS,
    )
