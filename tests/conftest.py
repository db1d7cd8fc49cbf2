"""Shared test fixtures."""

from datetime import UTC, datetime
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from meeting_series.core.database import get_session
from meeting_series.main import app
from meeting_series.models import Meeting
from meeting_series.series.lifecycle import create_meetings
from meeting_series.series.locks import SeriesLocks
from meeting_series.store import MeetingStore

# A Monday, far enough ahead to count as upcoming
MONDAY_9AM = datetime(2030, 1, 7, 9, 0, tzinfo=UTC)


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session: Session) -> MeetingStore:
    return MeetingStore(session)


@pytest.fixture(autouse=True)
def reset_series_locks():
    SeriesLocks.clear()
    yield
    SeriesLocks.clear()


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="group_id")
def group_id_fixture():
    return uuid4()


@pytest.fixture(name="leader_id")
def leader_id_fixture():
    return uuid4()


@pytest.fixture(name="user_a")
def user_a_fixture():
    return uuid4()


@pytest.fixture(name="user_b")
def user_b_fixture():
    return uuid4()


@pytest.fixture(name="weekly_series")
def weekly_series_fixture(
    store: MeetingStore, group_id, leader_id, user_a, user_b
) -> list[Meeting]:
    """Three weekly meetings starting Monday 9:00, users A and B invited."""
    return create_meetings(
        store,
        group_id=group_id,
        created_by=leader_id,
        title="Bible Study",
        date=MONDAY_9AM,
        description="Week one notes",
        recurrence="weekly",
        occurrences=3,
        invitee_ids=[user_a, user_b],
    )


@pytest.fixture(name="standalone_meeting")
def standalone_meeting_fixture(
    store: MeetingStore, group_id, leader_id, user_a
) -> Meeting:
    """A one-off meeting with user A invited."""
    (meeting,) = create_meetings(
        store,
        group_id=group_id,
        created_by=leader_id,
        title="Planning Night",
        date=MONDAY_9AM,
        invitee_ids=[user_a],
    )
    return meeting