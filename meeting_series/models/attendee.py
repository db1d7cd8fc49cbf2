"""Attendee model for per-user RSVP state on a meeting.

This module defines the Attendee model which links one user to one meeting
and records their response. The ``is_series_rsvp`` flag separates a
response given for the whole recurring series from a one-off override on a
single instance; rescheduling relies on that distinction.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from meeting_series.models.meeting import Meeting

ATTENDEE_STATUSES = ("invited", "accepted", "declined", "maybe")


class Attendee(SQLModel, table=True):
    """A user's invitation to, and response for, one meeting.

    Attributes:
        id: Unique identifier (UUID).
        meeting_id: Foreign key to the parent Meeting.
        user_id: The invited user.
        status: One of "invited" (no response yet), "accepted",
            "declined", or "maybe".
        is_series_rsvp: True when ``status`` was set for the whole series
            rather than for this instance only.
        invited_at: When the invitation row was created.
        responded_at: When the status was last set by the user. None while
            the invitation is unanswered.
        meeting: Reference to the parent Meeting object.
    """
    __table_args__ = (
        UniqueConstraint("meeting_id", "user_id", name="uq_attendee_meeting_user"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    meeting_id: UUID = Field(foreign_key="meeting.id", ondelete="CASCADE", index=True)
    user_id: UUID = Field(index=True)
    status: str = Field(default="invited")
    is_series_rsvp: bool = Field(default=False)
    invited_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    responded_at: datetime | None = None

    # Relationship
    meeting: Optional["Meeting"] = Relationship(back_populates="attendees")
