# messagepilot/services/scheduling_service.py

from datetime import datetime
from typing import Dict, List, Optional
import re
import logging

from messagepilot.core.errors import (
    NotFoundOrNotPending,
    PersistenceFailure,
    ValidationError,
)
from messagepilot.data_schemas.scheduled_message import (
    ActionResult,
    BroadcastResult,
    ScheduledMessageRead,
)
from messagepilot.models import HistoryStatus, MessageType, ScheduledMessage
from messagepilot.services.history_service import HistoryService
from messagepilot.services.scheduled_message_store import ScheduledMessageStore

logger = logging.getLogger(__name__)

NOT_PENDING_ERROR = "Scheduled message not found, already sent, or already canceled."
UNFILLED_PLACEHOLDER = re.compile(r"\{\{.*?\}\}")


def _read(message: ScheduledMessage) -> ScheduledMessageRead:
    return ScheduledMessageRead.model_validate(message)


def render_template(content: str, parameters: Dict[str, str]) -> str:
    """Substitute ``{{ key }}`` placeholders in ``content`` with ``parameters`` values."""
    for key, value in parameters.items():
        pattern = r"\{\{\s*" + re.escape(key) + r"\s*\}\}"
        content = re.sub(pattern, lambda _match, value=value: value, content)
    if UNFILLED_PLACEHOLDER.search(content):
        logger.warning(f"Template might still contain unfilled parameters: {content}")
    return content


class SchedulingService:
    """Schedule, update and cancel actions for forms and HTTP callers.

    Every action returns an ``ActionResult`` instead of raising.
    """

    def __init__(self, store: ScheduledMessageStore, history: Optional[HistoryService] = None):
        self.store = store
        self.history = history

    def _log(self, message: ScheduledMessage, status: HistoryStatus) -> None:
        if self.history is not None:
            self.history.log_scheduled_event(message, status)

    def get_pending_scheduled_messages(self) -> List[ScheduledMessageRead]:
        try:
            return [_read(message) for message in self.store.list_pending()]
        except PersistenceFailure as e:
            logger.error(f"Error fetching scheduled messages: {e}")
            return []

    def schedule_new_message(self, data, now: Optional[datetime] = None) -> ActionResult:
        try:
            message = self.store.create(data, now=now)
        except ValidationError as e:
            logger.error(f"Schedule message validation failed: {e.field_errors}")
            return ActionResult(success=False, error=str(e), field_errors=e.field_errors)
        except PersistenceFailure as e:
            logger.error(f"Error scheduling message: {e}")
            return ActionResult(
                success=False,
                error="Database error occurred while scheduling message.",
            )

        self._log(message, HistoryStatus.PENDING_SCHEDULE)
        return ActionResult(success=True, message=_read(message))

    def update_scheduled_message(
        self, message_id: str, data, now: Optional[datetime] = None
    ) -> ActionResult:
        try:
            message = self.store.update(message_id, data, now=now)
        except ValidationError as e:
            return ActionResult(
                success=False,
                error="Validation failed. Please check the form fields for updating schedule.",
                field_errors=e.field_errors,
            )
        except NotFoundOrNotPending:
            return ActionResult(
                success=False,
                error="Failed to update message. It might have been sent or canceled.",
            )
        except PersistenceFailure as e:
            logger.error(f"Error updating scheduled message {message_id}: {e}")
            return ActionResult(
                success=False,
                error="Database error occurred while updating message.",
            )

        return ActionResult(success=True, message=_read(message))

    def cancel_scheduled_message(self, message_id: str) -> ActionResult:
        try:
            message = self.store.cancel(message_id)
        except NotFoundOrNotPending:
            return ActionResult(success=False, error=NOT_PENDING_ERROR)
        except PersistenceFailure as e:
            logger.error(f"Error canceling scheduled message {message_id}: {e}")
            return ActionResult(
                success=False,
                error="Database error occurred while canceling message.",
            )

        self._log(message, HistoryStatus.CANCELED)
        return ActionResult(success=True, message=_read(message))

    def schedule_broadcast(
        self,
        recipients: List[str],
        content: str,
        scheduled_time,
        now: Optional[datetime] = None,
        user_id: Optional[str] = None,
    ) -> BroadcastResult:
        """Schedule one pending message per recipient; failures are counted, not raised."""
        if not recipients:
            return BroadcastResult(
                success=False,
                error="Validation failed. Please check the form fields.",
                field_errors={"recipients": ["Please select at least one recipient."]},
            )

        failed = 0
        field_errors: Dict[str, List[str]] = {}
        for recipient in recipients:
            result = self.schedule_new_message(
                {
                    "recipient": recipient,
                    "content": content,
                    "scheduledTime": scheduled_time,
                    "messageType": MessageType.BROADCAST.value,
                    "userId": user_id,
                },
                now=now,
            )
            if result.success:
                continue
            failed += 1
            for field, messages in (result.field_errors or {}).items():
                known = field_errors.setdefault(field, [])
                known.extend(m for m in messages if m not in known)

        scheduled = len(recipients) - failed
        if failed:
            logger.error(f"Failed to schedule broadcast for {failed} of {len(recipients)} recipients.")
            return BroadcastResult(
                success=False,
                error=f"Failed to schedule message for {failed} recipients.",
                field_errors=field_errors or None,
                scheduled=scheduled,
                failed=failed,
            )

        return BroadcastResult(
            success=True,
            message=f"Broadcast message scheduled successfully for {scheduled} contacts.",
            scheduled=scheduled,
        )

    def schedule_template_message(
        self,
        recipient: str,
        template_content: str,
        parameters: Dict[str, str],
        scheduled_time,
        template_id: Optional[str] = None,
        template_name: Optional[str] = None,
        now: Optional[datetime] = None,
        user_id: Optional[str] = None,
    ) -> ActionResult:
        """Render ``template_content`` with ``parameters`` and schedule the result."""
        missing = {
            f"parameters.{key}": [f"Parameter '{{{{{key}}}}}' cannot be empty."]
            for key, value in parameters.items()
            if not value
        }
        if missing:
            return ActionResult(
                success=False,
                error="Validation failed. Please check the template parameters and other fields.",
                field_errors=missing,
            )

        return self.schedule_new_message(
            {
                "recipient": recipient,
                "content": render_template(template_content, parameters),
                "scheduledTime": scheduled_time,
                "messageType": MessageType.TEMPLATE.value,
                "templateId": template_id,
                "templateName": template_name,
                "parameters": parameters or None,
                "userId": user_id,
            },
            now=now,
        )
