# tests/test_database.py

import pytest
from datetime import datetime
from sqlalchemy import DateTime, inspect
from sqlmodel import Session, SQLModel, select
from messagepilot.core.database import engine, init_db, get_db, make_engine, DATABASE_URL
from messagepilot.data_schemas import MessageHistory, ScheduledMessage


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a fresh database and session for each test."""
    with Session(engine) as session:
        yield session


def test_create_scheduled_message(session):
    """Test creating a ScheduledMessage in the database."""
    message = ScheduledMessage(
        recipient="+15550000001",
        content="Hi",
        scheduled_time=datetime(2026, 10, 17, 12, 0),
        parameters={"name": "Dana"},
    )
    session.add(message)
    session.commit()

    retrieved = session.get(ScheduledMessage, message.id)
    assert retrieved is not None
    assert retrieved.recipient == "+15550000001"
    assert retrieved.parameters == {"name": "Dana"}


def test_database_url():
    """Test database URL configuration"""
    assert DATABASE_URL.startswith("sqlite")


def test_get_db():
    """Test database session creation and closure"""
    db_generator = get_db()
    db = next(db_generator)
    assert isinstance(db, Session)
    try:
        next(db_generator)
    except StopIteration:
        pass  # This is expected


def test_make_engine_sqlite_allows_threads():
    test_engine = make_engine("sqlite://")
    assert test_engine.url.get_backend_name() == "sqlite"
    test_engine.dispose()


def test_init_db(tmp_path):
    """Test database initialization"""
    test_engine = make_engine(f"sqlite:///{tmp_path / 'init.db'}")

    init_db(test_engine)

    tables = inspect(test_engine).get_table_names()
    assert "scheduledmessage" in tables
    assert "messagehistory" in tables
    test_engine.dispose()


def test_init_db_default_engine():
    init_db()
    assert "scheduledmessage" in inspect(engine).get_table_names()


@pytest.mark.parametrize(
    "column",
    [
        ScheduledMessage.__table__.c.scheduled_time,
        ScheduledMessage.__table__.c.created_at,
        MessageHistory.__table__.c.scheduled_at,
        MessageHistory.__table__.c.processed_at,
        MessageHistory.__table__.c.created_at,
    ],
)
def test_datetime_columns_store_naive_utc(column):
    assert type(column.type) is DateTime
    assert column.type.timezone is False


def test_naive_datetimes_round_trip(session):
    due = datetime(2026, 10, 17, 12, 0, 5)
    session.add(ScheduledMessage(recipient="+15550000001", content="Hi", scheduled_time=due))
    session.commit()

    found = session.exec(
        select(ScheduledMessage).where(ScheduledMessage.scheduled_time <= due)
    ).all()
    assert [m.scheduled_time for m in found] == [due]
