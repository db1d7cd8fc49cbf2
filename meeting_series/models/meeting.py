"""Meeting model for scheduled group meetings and recurring series.

This module defines the Meeting model. A meeting is one concrete occurrence;
a recurring series is nothing more than the meetings that share a
``series_id``. The series itself is never stored: its order comes from
``series_index`` and its cadence is recomputed from the instance dates
whenever an operation needs it.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from meeting_series.models.attendee import Attendee


class Meeting(SQLModel, table=True):
    """A scheduled meeting, standalone or one instance of a series.

    Attributes:
        id: Unique identifier (UUID).
        series_id: Shared by every instance of a recurring series. None for
            a standalone meeting.
        series_index: 1-based position in the series, assigned at creation
            and never renumbered (deleting instance 2 of 4 leaves 1, 3, 4).
        series_total: Number of instances the series was created with.
        date: When the meeting starts (UTC).
        end_date: When the meeting ends, if an end time was given.
        title: Meeting title.
        description: Free-text notes. Stays with its instance when the
            instance is rescheduled.
        location: Physical or virtual location.
        timezone: IANA zone the meeting was scheduled in (e.g.
            "America/New_York"). Recurring dates keep their wall-clock time
            in this zone. None when the caller gave no zone.
        group_id: Group the meeting belongs to.
        created_by: User who scheduled the meeting.
        created_at: When the row was created.
        updated_at: When the row was last written.
        version: Incremented on every date shift. Used as a compare-and-swap
            guard so a retried skip is applied at most once.
        attendees: One row per invited user.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    series_id: UUID | None = Field(default=None, index=True)
    series_index: int | None = None
    series_total: int | None = None
    date: datetime = Field(index=True)
    end_date: datetime | None = None
    title: str
    description: str | None = None
    location: str | None = None
    timezone: str | None = None
    group_id: UUID = Field(index=True)
    created_by: UUID
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: int = Field(default=1)

    # Relationships
    attendees: list["Attendee"] = Relationship(back_populates="meeting")

    @property
    def is_series(self) -> bool:
        return self.series_id is not None
