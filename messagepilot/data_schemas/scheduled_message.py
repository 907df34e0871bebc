# messagepilot/data_schemas/scheduled_message.py

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError as PydanticValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from messagepilot.core.errors import ValidationError
from messagepilot.core.timeutils import to_naive_utc, utcnow
from messagepilot.models import MessageType

# Tolerated clock skew between the caller and the server
SCHEDULE_BUFFER = timedelta(seconds=5)
MAX_CONTENT_LENGTH = 1000


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScheduleMessageRequest(CamelModel):
    """
    Fields accepted when scheduling (or rescheduling) a message.

    The "scheduled time is in the future" rule reads ``now`` from the
    validation context so callers decide which clock applies.
    """

    recipient: str
    content: str
    scheduled_time: datetime
    message_type: MessageType = MessageType.PRIVATE
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    parameters: Optional[Dict[str, str]] = None
    user_id: Optional[str] = None

    @field_validator("message_type", mode="before")
    @classmethod
    def known_message_type(cls, value):
        try:
            return MessageType(value)
        except ValueError:
            raise ValueError("Invalid message type for scheduling.") from None

    @field_validator("recipient")
    @classmethod
    def recipient_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Recipient phone number is required.")
        return value

    @field_validator("content")
    @classmethod
    def content_bounded(cls, value: str) -> str:
        if not value:
            raise ValueError("Message content cannot be empty.")
        if len(value) > MAX_CONTENT_LENGTH:
            raise ValueError("Message too long.")
        return value

    @field_validator("scheduled_time")
    @classmethod
    def scheduled_in_future(cls, value: datetime, info: ValidationInfo) -> datetime:
        value = to_naive_utc(value)
        now = (info.context or {}).get("now") or utcnow()
        if value <= to_naive_utc(now) - SCHEDULE_BUFFER:
            raise ValueError("Scheduled time must be in the future.")
        return value


def _field_errors(exc: PydanticValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "__root__"
        if err["type"] == "value_error":
            message = str(err["ctx"]["error"])
        else:
            message = err["msg"]
        errors.setdefault(field, []).append(message)
    return errors


def validate_schedule_request(data, now: Optional[datetime] = None) -> ScheduleMessageRequest:
    """Validate ``data`` (a mapping or request) against the scheduling rules at ``now``."""
    if isinstance(data, ScheduleMessageRequest):
        data = data.model_dump()
    try:
        return ScheduleMessageRequest.model_validate(data, context={"now": now or utcnow()})
    except PydanticValidationError as e:
        raise ValidationError(_field_errors(e)) from e


class ScheduledMessageRead(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    recipient: str
    content: str
    scheduled_time: datetime
    status: str
    created_at: datetime
    message_type: str
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    parameters: Optional[Dict[str, str]] = None
    user_id: Optional[str] = None


class ActionResult(CamelModel):
    """Outcome of a scheduling action; callers branch on ``success``"""

    success: bool
    error: Optional[str] = None
    field_errors: Optional[Dict[str, List[str]]] = None
    message: Optional[ScheduledMessageRead] = None


class BroadcastResult(CamelModel):
    """Outcome of scheduling one message per broadcast recipient"""

    success: bool
    error: Optional[str] = None
    field_errors: Optional[Dict[str, List[str]]] = None
    message: Optional[str] = None
    scheduled: int = 0
    failed: int = 0


class BroadcastRequest(CamelModel):
    recipients: List[str]
    content: str
    scheduled_time: datetime
    user_id: Optional[str] = None


class TemplateMessageRequest(CamelModel):
    recipient: str
    template_content: str
    scheduled_time: datetime
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    parameters: Dict[str, str] = {}
    user_id: Optional[str] = None


class SweepSummary(CamelModel):
    candidates_found: int = 0
    sent: int = 0
    failed: int = 0
