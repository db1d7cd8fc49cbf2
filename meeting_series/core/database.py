"""Database configuration and session management for SQLite.

The engine is shared by the API and any script that works on the meeting
tables. Two SQLite pragmas are set on every new connection:

    - **WAL (Write-Ahead Logging)**: readers are not blocked while a series
      batch (skip, series RSVP) is being written.

    - **Foreign Keys**: SQLite ships with foreign key enforcement disabled.
      Enabling it makes ``attendee.meeting_id`` reject rows for meetings that
      do not exist and lets the ``ON DELETE CASCADE`` clause fire.

``check_same_thread=False`` is required because FastAPI may hand a session
created in one worker thread to another.
"""

from fastapi import Depends
from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from meeting_series.core.config import settings
from meeting_series.store import MeetingStore

connect_args = (
    {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
)

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    if not settings.database_url.startswith("sqlite"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session


def get_store(session: Session = Depends(get_session)) -> MeetingStore:
    """Dependency wrapping the request's session in a MeetingStore."""
    return MeetingStore(session)
