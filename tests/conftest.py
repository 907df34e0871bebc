# tests/conftest.py

import pytest
import os
import sys
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

# Add project root to path to ensure imports work
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from messagepilot import create_app
from messagepilot.core.database import get_db
from messagepilot.routes import scheduled as scheduled_routes
from messagepilot.services.delivery_sweeper import DeliverySweeper
from messagepilot.services.history_service import HistoryService
from messagepilot.services.scheduled_message_store import ScheduledMessageStore

# Fixed clock for tests; every store and sweep call receives it explicitly
NOW = datetime(2026, 10, 17, 12, 0, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory database shared across threads of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def store(engine):
    return ScheduledMessageStore(engine)


@pytest.fixture
def history(engine):
    return HistoryService(engine)


@pytest.fixture
def make_request():
    """Build a scheduling payload relative to NOW."""

    def _make(
        recipient="+15550000001",
        content="Hi",
        delay=timedelta(seconds=10),
        **extra,
    ):
        payload = {
            "recipient": recipient,
            "content": content,
            "scheduledTime": NOW + delay,
        }
        payload.update(extra)
        return payload

    return _make


@pytest.fixture
def mock_sender():
    """Delivery capability that always succeeds."""
    sender = AsyncMock()
    sender.send = AsyncMock(return_value={"success": True, "message": "queued"})
    return sender


@pytest.fixture
def app():
    """Create application for testing."""
    return create_app()


@pytest.fixture
def client(app, engine, mock_sender):
    """Test client whose store, history and sender use the in-memory database."""

    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[scheduled_routes.get_store] = lambda: ScheduledMessageStore(engine)
    app.dependency_overrides[scheduled_routes.get_history] = lambda: HistoryService(engine)
    app.dependency_overrides[scheduled_routes.get_sweeper] = lambda: DeliverySweeper(
        ScheduledMessageStore(engine), mock_sender, HistoryService(engine)
    )
    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def setup_admin_key():
    """Set admin API key for testing specific admin endpoints"""
    old_key = os.environ.get("ADMIN_API_KEY")
    api_key = "admin_secret_key"
    os.environ["ADMIN_API_KEY"] = api_key
    yield api_key  # Yield the key for tests to use
    if old_key is not None:
        os.environ["ADMIN_API_KEY"] = old_key
    else:
        # Ensure the key is removed if it wasn't there before
        if "ADMIN_API_KEY" in os.environ:
            del os.environ["ADMIN_API_KEY"]
