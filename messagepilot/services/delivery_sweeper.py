# messagepilot/services/delivery_sweeper.py

from datetime import datetime
from typing import Any, Dict, Optional
import logging

from messagepilot.core.errors import (
    DeliveryFailure,
    NotFoundOrNotPending,
    PersistenceFailure,
)
from messagepilot.core.timeutils import to_naive_utc, utcnow
from messagepilot.data_schemas.scheduled_message import SweepSummary
from messagepilot.models import HistoryStatus, MessageStatus, ScheduledMessage
from messagepilot.services.history_service import HistoryService
from messagepilot.services.scheduled_message_store import ScheduledMessageStore

logger = logging.getLogger(__name__)


class DeliverySweeper:
    """
    One tick of scheduled-message delivery.

    Selects pending messages that are due at ``now``, sends each through the
    delivery capability and writes the outcome with the store's pending
    guard. Safe to run repeatedly; a lost guard means a cancellation won and
    the record is counted in neither tally. Delivery is at-least-once: a
    send whose status write fails is retried on the next tick.
    """

    def __init__(
        self,
        store: ScheduledMessageStore,
        sender,
        history: Optional[HistoryService] = None,
    ):
        self.store = store
        self.sender = sender
        self.history = history

    async def run(self, now: Optional[datetime] = None) -> SweepSummary:
        now = to_naive_utc(now) if now else utcnow()
        logger.info(f"Delivery sweep started at {now.isoformat()}")

        # PersistenceFailure here fails the whole tick
        candidates = self.store.list_due(now)
        summary = SweepSummary(candidates_found=len(candidates))

        if not candidates:
            logger.info("No scheduled messages ready to be processed.")
            return summary

        logger.info(f"Found {len(candidates)} messages to process...")
        for candidate in candidates:
            outcome = await self._process(candidate)
            if outcome == MessageStatus.SENT:
                summary.sent += 1
            elif outcome == MessageStatus.FAILED:
                summary.failed += 1

        logger.info(
            f"Finished processing. Attempted: {summary.candidates_found}, "
            f"Sent: {summary.sent}, Failed: {summary.failed}."
        )
        return summary

    async def _send(self, message: ScheduledMessage) -> Dict[str, Any]:
        """Send ``message``; raises DeliveryFailure unless the provider accepted it."""
        try:
            result = await self.sender.send(message.recipient, message.content)
        except Exception as e:
            logger.error(f"Unhandled error sending SMS for message ID {message.id}: {e}")
            raise DeliveryFailure(message.id, str(e) or e.__class__.__name__) from e

        result = result or {}
        if not result.get("success"):
            raise DeliveryFailure(message.id, result.get("message") or "unknown error")

        logger.info(
            f"Successfully sent message ID {message.id}. API response: {result.get('message')}"
        )
        return result

    async def _process(self, candidate: ScheduledMessage) -> Optional[MessageStatus]:
        """Deliver one candidate; returns the outcome this tick recorded, if any."""
        try:
            current = self.store.get(candidate.id)
        except PersistenceFailure as e:
            logger.error(f"Could not re-read scheduled message {candidate.id}, leaving pending: {e}")
            return None

        if current is None or current.status != MessageStatus.PENDING.value:
            logger.info(f"Scheduled message {candidate.id} is no longer pending, skipping.")
            return None

        try:
            result = await self._send(current)
            outcome = MessageStatus.SENT
            api_response, error_message = result.get("message"), None
        except DeliveryFailure as e:
            logger.error(f"Failed to send message ID {current.id}. API Error: {e.reason}")
            outcome = MessageStatus.FAILED
            api_response, error_message = e.reason, e.reason

        try:
            self.store.mark_delivered(current.id, outcome)
        except NotFoundOrNotPending:
            logger.warning(
                f"Scheduled message {current.id} changed state during delivery; "
                f"'{outcome.value}' not recorded."
            )
            return None
        except PersistenceFailure as e:
            logger.error(
                f"[CRITICAL] Failed to update status for scheduled message {current.id} "
                f"to '{outcome.value}', will retry next sweep: {e}"
            )
            return None

        if self.history is not None:
            self.history.log_scheduled_event(
                current,
                HistoryStatus(outcome.value),
                api_response=api_response,
                error_message=error_message,
            )
        return outcome
