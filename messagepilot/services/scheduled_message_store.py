# messagepilot/services/scheduled_message_store.py

from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from messagepilot.core.database import engine as default_engine
from messagepilot.core.errors import NotFoundOrNotPending, PersistenceFailure
from messagepilot.core.timeutils import to_naive_utc, utcnow
from messagepilot.data_schemas.scheduled_message import validate_schedule_request
from messagepilot.models import MessageStatus, ScheduledMessage

logger = logging.getLogger(__name__)

DELIVERY_OUTCOMES = (MessageStatus.SENT, MessageStatus.FAILED)


class ScheduledMessageStore:
    """
    Persistence and guarded status transitions for scheduled messages.

    Every status change is a single UPDATE conditioned on the row still
    being pending, so a cancellation and a delivery write racing on the
    same row cannot both land.
    """

    def __init__(self, engine=None):
        self.engine = engine or default_engine

    @contextmanager
    def _session(self):
        try:
            # Rows stay readable after commit, once the session is closed
            with Session(self.engine, expire_on_commit=False) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Scheduled message store error: {e}")
            raise PersistenceFailure(str(e)) from e

    def create(self, data, now: Optional[datetime] = None) -> ScheduledMessage:
        """Validate ``data`` and persist it as a new pending message."""
        now = to_naive_utc(now) if now else utcnow()
        request = validate_schedule_request(data, now=now)

        message = ScheduledMessage(
            recipient=request.recipient,
            content=request.content,
            scheduled_time=request.scheduled_time,
            status=MessageStatus.PENDING.value,
            created_at=now,
            message_type=request.message_type.value,
            template_id=request.template_id,
            template_name=request.template_name,
            parameters=request.parameters,
            user_id=request.user_id,
        )
        with self._session() as session:
            session.add(message)
            session.commit()
            session.refresh(message)

        logger.info(
            f"Scheduled message {message.id} for {message.recipient} at "
            f"{message.scheduled_time.isoformat()}"
        )
        return message

    def get(self, message_id: str) -> Optional[ScheduledMessage]:
        with self._session() as session:
            return session.get(ScheduledMessage, message_id)

    def list_pending(self) -> List[ScheduledMessage]:
        """All pending messages, soonest first."""
        with self._session() as session:
            return list(
                session.exec(
                    select(ScheduledMessage)
                    .where(ScheduledMessage.status == MessageStatus.PENDING.value)
                    .order_by(ScheduledMessage.scheduled_time)
                ).all()
            )

    def list_due(self, now: datetime) -> List[ScheduledMessage]:
        """Pending messages whose scheduled time is at or before ``now``."""
        now = to_naive_utc(now)
        with self._session() as session:
            return list(
                session.exec(
                    select(ScheduledMessage)
                    .where(ScheduledMessage.status == MessageStatus.PENDING.value)
                    .where(ScheduledMessage.scheduled_time <= now)
                    .order_by(ScheduledMessage.scheduled_time)
                ).all()
            )

    def _guarded_update(self, message_id: str, **values) -> Optional[ScheduledMessage]:
        """
        Apply ``values`` only where the row is still pending.

        Returns the updated row, read back in the same transaction as the
        write, or None when no pending row matched.
        """
        stmt = (
            update(ScheduledMessage)
            .where(ScheduledMessage.id == message_id)
            .where(ScheduledMessage.status == MessageStatus.PENDING.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        with self._session() as session:
            result = session.execute(stmt)
            if result.rowcount != 1:
                session.rollback()
                return None
            message = session.get(ScheduledMessage, message_id)
            session.commit()
            return message

    def cancel(self, message_id: str) -> ScheduledMessage:
        """Move a pending message to canceled and return it."""
        message = self._guarded_update(message_id, status=MessageStatus.CANCELED.value)
        if message is None:
            logger.warning(
                f"Scheduled message {message_id} not found or not pending for cancellation."
            )
            raise NotFoundOrNotPending(message_id)

        logger.info(f"Canceled scheduled message {message_id}")
        return message

    def mark_delivered(self, message_id: str, outcome) -> None:
        """Record a delivery outcome (sent or failed) on a still-pending message."""
        outcome = MessageStatus(outcome)
        if outcome not in DELIVERY_OUTCOMES:
            raise ValueError(f"Invalid delivery outcome: {outcome.value}")

        if self._guarded_update(message_id, status=outcome.value) is None:
            raise NotFoundOrNotPending(message_id)

    def update(self, message_id: str, data, now: Optional[datetime] = None) -> ScheduledMessage:
        """Rewrite the editable fields of a pending message."""
        now = to_naive_utc(now) if now else utcnow()
        request = validate_schedule_request(data, now=now)

        message = self._guarded_update(
            message_id,
            recipient=request.recipient,
            content=request.content,
            scheduled_time=request.scheduled_time,
            message_type=request.message_type.value,
            template_id=request.template_id,
            template_name=request.template_name,
            parameters=request.parameters,
            user_id=request.user_id,
        )
        if message is None:
            raise NotFoundOrNotPending(message_id)

        logger.info(f"Updated scheduled message {message_id}")
        return message
