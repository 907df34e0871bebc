# messagepilot/services/history_service.py

from typing import Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from messagepilot.core.database import engine as default_engine
from messagepilot.core.timeutils import utcnow
from messagepilot.models import HistoryStatus, MessageHistory, ScheduledMessage

logger = logging.getLogger(__name__)


class HistoryService:
    """Writes message_history entries; a failed write never breaks the caller."""

    def __init__(self, engine=None):
        self.engine = engine or default_engine

    def log(self, entry: MessageHistory) -> bool:
        try:
            with Session(self.engine) as session:
                session.add(entry)
                session.commit()
                session.refresh(entry)
        except SQLAlchemyError as e:
            logger.error(f"Error logging message to history: {e}")
            return False

        logger.info(f"Logged message to history, ID: {entry.id}")
        return True

    def log_scheduled_event(
        self,
        message: ScheduledMessage,
        status: HistoryStatus,
        api_response: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> bool:
        """Record a lifecycle event for ``message`` (scheduled, sent, failed, canceled)."""
        return self.log(
            MessageHistory(
                recipient_phone=message.recipient,
                content=message.content,
                status=status.value,
                type=message.message_type,
                template_id=message.template_id,
                template_name=message.template_name,
                parameters=message.parameters,
                user_id=message.user_id,
                scheduled_at=message.scheduled_time,
                processed_at=utcnow(),
                api_response=api_response,
                error_message=error_message,
            )
        )
