# messagepilot/routes/scheduled.py

from typing import Any, Dict, List
import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from messagepilot.core import create_sender
from messagepilot.core.errors import PersistenceFailure
from messagepilot.data_schemas import (
    ActionResult,
    BroadcastRequest,
    BroadcastResult,
    ScheduledMessageRead,
    SweepSummary,
    TemplateMessageRequest,
)
from messagepilot.routes.admin import verify_api_key
from messagepilot.services.delivery_sweeper import DeliverySweeper
from messagepilot.services.history_service import HistoryService
from messagepilot.services.scheduled_message_store import ScheduledMessageStore
from messagepilot.services.scheduling_service import SchedulingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduled-messages", tags=["scheduled"])


def get_store() -> ScheduledMessageStore:
    return ScheduledMessageStore()


def get_history() -> HistoryService:
    return HistoryService()


def get_scheduling_service(
    store: ScheduledMessageStore = Depends(get_store),
    history: HistoryService = Depends(get_history),
) -> SchedulingService:
    return SchedulingService(store, history)


def get_sweeper(
    store: ScheduledMessageStore = Depends(get_store),
    history: HistoryService = Depends(get_history),
) -> DeliverySweeper:
    return DeliverySweeper(store, create_sender(), history)


@router.get("", response_model=List[ScheduledMessageRead])
def list_pending(service: SchedulingService = Depends(get_scheduling_service)):
    """Pending scheduled messages, soonest first"""
    return service.get_pending_scheduled_messages()


@router.post("", response_model=ActionResult, status_code=201)
def schedule_message(
    response: Response,
    payload: Dict[str, Any] = Body(...),
    service: SchedulingService = Depends(get_scheduling_service),
):
    result = service.schedule_new_message(payload)
    if not result.success:
        response.status_code = 422 if result.field_errors else 500
    return result


@router.post("/broadcast", response_model=BroadcastResult, status_code=201)
def schedule_broadcast(
    request: BroadcastRequest,
    response: Response,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Schedule the same content for every recipient"""
    result = service.schedule_broadcast(
        request.recipients,
        request.content,
        request.scheduled_time,
        user_id=request.user_id,
    )
    if not result.success:
        response.status_code = 422 if result.field_errors else 500
    return result


@router.post("/template", response_model=ActionResult, status_code=201)
def schedule_template_message(
    request: TemplateMessageRequest,
    response: Response,
    service: SchedulingService = Depends(get_scheduling_service),
):
    result = service.schedule_template_message(
        request.recipient,
        request.template_content,
        request.parameters,
        request.scheduled_time,
        template_id=request.template_id,
        template_name=request.template_name,
        user_id=request.user_id,
    )
    if not result.success:
        response.status_code = 422 if result.field_errors else 500
    return result


@router.put("/{message_id}", response_model=ActionResult)
def update_message(
    message_id: str,
    response: Response,
    payload: Dict[str, Any] = Body(...),
    service: SchedulingService = Depends(get_scheduling_service),
):
    result = service.update_scheduled_message(message_id, payload)
    if not result.success:
        response.status_code = 422 if result.field_errors else 409
    return result


@router.post("/{message_id}/cancel", response_model=ActionResult)
def cancel_message(
    message_id: str,
    response: Response,
    service: SchedulingService = Depends(get_scheduling_service),
):
    result = service.cancel_scheduled_message(message_id)
    if not result.success:
        response.status_code = 409
    return result


@router.post(
    "/process", response_model=SweepSummary, dependencies=[Depends(verify_api_key)]
)
async def process_due_messages(sweeper: DeliverySweeper = Depends(get_sweeper)):
    """Run one delivery sweep over messages that are due now"""
    try:
        return await sweeper.run()
    except PersistenceFailure as e:
        logger.error(f"Delivery sweep aborted: {e}")
        raise HTTPException(status_code=503, detail="Scheduled message store unavailable")
