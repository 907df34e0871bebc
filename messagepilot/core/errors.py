# messagepilot/core/errors.py

from typing import Dict, List, Optional


class MessagePilotError(Exception):
    """Base class for scheduling errors"""


class ValidationError(MessagePilotError):
    """Malformed input for a scheduled message, with per-field messages"""

    def __init__(self, field_errors: Dict[str, List[str]], message: Optional[str] = None):
        self.field_errors = field_errors
        super().__init__(
            message or "Validation failed. Please check the form fields for scheduling."
        )


class NotFoundOrNotPending(MessagePilotError):
    """A guarded status write matched no pending row"""

    def __init__(self, message_id: str):
        self.message_id = message_id
        super().__init__(
            f"Scheduled message {message_id} not found, already sent, or already canceled."
        )


class DeliveryFailure(MessagePilotError):
    """The send capability reported or raised a failure for one record"""

    def __init__(self, message_id: str, reason: str):
        self.message_id = message_id
        self.reason = reason
        super().__init__(f"Delivery of {message_id} failed: {reason}")


class PersistenceFailure(MessagePilotError):
    """The store could not be read or written"""
