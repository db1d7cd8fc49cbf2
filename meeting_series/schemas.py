"""Request and response bodies for the JSON API."""
from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel


class AttendeeRead(SQLModel):
    id: UUID
    meeting_id: UUID
    user_id: UUID
    status: str
    is_series_rsvp: bool
    invited_at: datetime
    responded_at: datetime | None = None


class MeetingRead(SQLModel):
    id: UUID
    series_id: UUID | None = None
    series_index: int | None = None
    series_total: int | None = None
    date: datetime
    end_date: datetime | None = None
    title: str
    description: str | None = None
    location: str | None = None
    timezone: str | None = None
    group_id: UUID
    created_by: UUID
    updated_at: datetime
    version: int
    attendees: list[AttendeeRead] = []


class MeetingListRead(SQLModel):
    """A group's meetings as shown in the meeting list.

    ``display`` holds standalone meetings plus one representative per
    series (its next upcoming instance), earliest first. ``meetings`` is
    the full, ungrouped list.
    """
    display: list[MeetingRead]
    meetings: list[MeetingRead]


class MeetingCreate(SQLModel):
    title: str
    date: datetime
    end_date: datetime | None = None
    description: str | None = None
    location: str | None = None
    recurrence: str = "none"  # "none", "weekly", "biweekly" or "monthly"
    occurrences: int = 1
    invitee_ids: list[UUID] = Field(default_factory=list)
    timezone: str | None = None  # IANA name, e.g. "America/New_York"


class MeetingUpdate(SQLModel):
    title: str | None = None
    description: str | None = None
    location: str | None = None


class RsvpRequest(SQLModel):
    status: str


class SkipRequest(SQLModel):
    expected_version: int | None = None


class SkipResult(SQLModel):
    shifted: int
    reverted: int
    reset: int
    interval_seconds: int
