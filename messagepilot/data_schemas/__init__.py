from .scheduled_message import (
    ActionResult,
    BroadcastRequest,
    BroadcastResult,
    ScheduleMessageRequest,
    ScheduledMessageRead,
    SweepSummary,
    TemplateMessageRequest,
    validate_schedule_request,
)
from messagepilot.models import ScheduledMessage, MessageHistory

__all__ = [
    "ActionResult",
    "BroadcastRequest",
    "BroadcastResult",
    "ScheduleMessageRequest",
    "ScheduledMessageRead",
    "SweepSummary",
    "TemplateMessageRequest",
    "validate_schedule_request",
    "ScheduledMessage",
    "MessageHistory",
]
