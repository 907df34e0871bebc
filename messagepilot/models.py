# messagepilot/models.py

from enum import Enum
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, JSON
from datetime import datetime
from typing import Dict, Optional
import uuid

from messagepilot.core.timeutils import utcnow


class MessageStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    CANCELED = "canceled"


class MessageType(str, Enum):
    PRIVATE = "private"
    BROADCAST = "broadcast"
    TEMPLATE = "template"


class HistoryStatus(str, Enum):
    PENDING_SCHEDULE = "pending_schedule"
    SENT = "sent"
    FAILED = "failed"
    CANCELED = "canceled"


def new_message_id() -> str:
    return uuid.uuid4().hex


class ScheduledMessage(SQLModel, table=True):
    """A message waiting for (or done with) its delivery time"""
    __table_args__ = {'extend_existing': True}

    id: str = Field(default_factory=new_message_id, primary_key=True)
    recipient: str
    content: str
    scheduled_time: datetime = Field(index=True, sa_type=DateTime)
    status: str = Field(default=MessageStatus.PENDING.value, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    message_type: str = Field(default=MessageType.PRIVATE.value)
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    parameters: Optional[Dict[str, str]] = Field(default=None, sa_column=Column(JSON))
    user_id: Optional[str] = None  # who scheduled it


class MessageHistory(SQLModel, table=True):
    """Append-only record of scheduling and delivery events"""
    __table_args__ = {'extend_existing': True}

    id: Optional[int] = Field(default=None, primary_key=True)
    recipient_phone: str = Field(index=True)
    content: str
    status: str  # pending_schedule, sent, failed, canceled
    type: str = Field(default=MessageType.PRIVATE.value)
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    parameters: Optional[Dict[str, str]] = Field(default=None, sa_column=Column(JSON))
    user_id: Optional[str] = None
    scheduled_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    processed_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    api_response: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
