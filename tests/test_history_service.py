# tests/test_history_service.py

import logging
from datetime import timedelta
from sqlmodel import Session, create_engine, select

from messagepilot.models import HistoryStatus, MessageHistory
from messagepilot.services.history_service import HistoryService


def test_log_writes_entry(history, engine):
    entry = MessageHistory(recipient_phone="+15550000001", content="Hi", status="sent")

    assert history.log(entry) is True
    assert entry.id is not None

    with Session(engine) as session:
        assert session.get(MessageHistory, entry.id).status == "sent"


def test_log_returns_false_when_write_fails(caplog):
    # No tables on this engine
    history = HistoryService(create_engine("sqlite://"))
    entry = MessageHistory(recipient_phone="+15550000001", content="Hi", status="sent")

    with caplog.at_level(logging.ERROR):
        assert history.log(entry) is False

    assert "Error logging message to history" in caplog.text


def test_log_scheduled_event_copies_message_fields(history, engine, store, make_request, now):
    message = store.create(
        make_request(
            messageType="template",
            templateId="tpl-1",
            templateName="Reminder",
            parameters={"name": "Dana"},
            userId="user-7",
        ),
        now=now,
    )

    assert history.log_scheduled_event(message, HistoryStatus.PENDING_SCHEDULE) is True

    with Session(engine) as session:
        entry = session.exec(select(MessageHistory)).one()

    assert entry.status == "pending_schedule"
    assert entry.recipient_phone == message.recipient
    assert entry.type == "template"
    assert entry.template_name == "Reminder"
    assert entry.parameters == {"name": "Dana"}
    assert entry.user_id == "user-7"
    assert entry.scheduled_at == now + timedelta(seconds=10)
