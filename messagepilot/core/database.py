# messagepilot/core/database.py

from sqlmodel import SQLModel, Session, create_engine
from typing import Generator

from messagepilot.core.config import settings

DATABASE_URL = settings.DATABASE_URL


def make_engine(url: str):
    """Create an engine for ``url``; SQLite needs cross-thread access under FastAPI."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        echo=False,  # Set to True to see SQL queries
        connect_args=connect_args,
    )


# Create database engine
engine = make_engine(DATABASE_URL)


def init_db(bind=None) -> None:
    """Initialize the database, creating all tables."""
    # Register table models on the metadata
    import messagepilot.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_db() -> Generator:
    """Get database session."""
    with Session(engine) as session:
        yield session
