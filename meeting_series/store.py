"""Meeting store: persistence of meetings and attendee rows.

Every series operation reads and writes through ``MeetingStore`` instead of
using the session directly. The store never commits on its own; callers
group their writes in ``transaction()`` so a batch either lands completely
or not at all.
"""
import logging
from contextlib import contextmanager
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from meeting_series.core.exceptions import ConflictError, StoreWriteFailure
from meeting_series.models import Attendee, Meeting

logger = logging.getLogger(__name__)


class MeetingStore:
    """Narrow read/write interface over a SQLModel session."""

    def __init__(self, session: Session):
        self.session = session
        self._touched: list[UUID] = []

    @contextmanager
    def transaction(self):
        """
        Commit everything written inside the block, or nothing.

        Any SQLAlchemy error is rolled back and re-raised as StoreWriteFailure
        carrying the ids of the meetings the batch had touched. Domain errors
        raised inside the block are rolled back and propagate unchanged.
        """
        self._touched = []
        try:
            yield self
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            touched = [str(meeting_id) for meeting_id in self._touched]
            logger.error(f"Store write failed after touching {len(touched)} meetings: {e}")
            raise StoreWriteFailure(
                "Failed to save changes",
                {"meeting_ids": touched},
            ) from e
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._touched = []

    def _touch(self, meeting_id: UUID) -> None:
        if meeting_id not in self._touched:
            self._touched.append(meeting_id)

    # Reads

    def get_instance(self, meeting_id: UUID) -> Meeting | None:
        return self.session.get(Meeting, meeting_id)

    def get_attendee(self, attendee_id: UUID) -> Attendee | None:
        return self.session.get(Attendee, attendee_id)

    def list_instances(
        self,
        group_id: UUID,
        include_past: bool = False,
        now: datetime | None = None,
    ) -> list[Meeting]:
        """List a group's meetings with attendees loaded, earliest first."""
        statement = (
            select(Meeting)
            .where(Meeting.group_id == group_id)
            .options(selectinload(Meeting.attendees))
            .order_by(Meeting.date)
        )
        if not include_past:
            now = now or datetime.now(UTC)
            statement = statement.where(Meeting.date >= now)
        return list(self.session.exec(statement).all())

    def get_series_instances(self, series_id: UUID) -> list[Meeting]:
        """
        All instances of a series with attendees loaded, by series_index.

        Rows already in the session are refreshed from the database, so a
        caller holding the series lock sees versions written by others.
        """
        statement = (
            select(Meeting)
            .where(Meeting.series_id == series_id)
            .options(selectinload(Meeting.attendees))
            .order_by(Meeting.series_index)
            .execution_options(populate_existing=True)
        )
        return list(self.session.exec(statement).all())

    def find_attendee(self, meeting_id: UUID, user_id: UUID) -> Attendee | None:
        statement = (
            select(Attendee)
            .where(Attendee.meeting_id == meeting_id)
            .where(Attendee.user_id == user_id)
        )
        return self.session.exec(statement).first()

    # Writes

    def add_instances(self, meetings: list[Meeting]) -> list[Meeting]:
        for meeting in meetings:
            self.session.add(meeting)
            self._touch(meeting.id)
        self.session.flush()
        return meetings

    def update_instance_date(
        self,
        meeting: Meeting,
        new_date: datetime,
        new_end_date: datetime | None = None,
    ) -> Meeting:
        """
        Move a meeting to a new date, guarded by its version.

        The UPDATE only matches while the stored version still equals the one
        loaded into ``meeting``. If another writer shifted the meeting first,
        no row matches and ConflictError is raised.
        """
        self._touch(meeting.id)
        expected_version = meeting.version
        statement = (
            update(Meeting)
            .where(Meeting.id == meeting.id)
            .where(Meeting.version == expected_version)
            .values(
                date=new_date,
                end_date=new_end_date,
                version=expected_version + 1,
                updated_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session="evaluate")
        )
        result = self.session.execute(statement)
        if result.rowcount != 1:
            raise ConflictError(
                "Meeting was changed by another request",
                {"meeting_id": str(meeting.id), "expected_version": expected_version},
            )
        return meeting

    def update_instance_fields(self, meeting: Meeting, **fields) -> Meeting:
        """Set plain columns on one meeting (title, description, location)."""
        self._touch(meeting.id)
        for name, value in fields.items():
            setattr(meeting, name, value)
        meeting.updated_at = datetime.now(UTC)
        self.session.add(meeting)
        return meeting

    def set_attendee_status(
        self,
        attendee: Attendee,
        status: str,
        is_series_rsvp: bool,
        responded_at: datetime | None,
    ) -> Attendee:
        self._touch(attendee.meeting_id)
        attendee.status = status
        attendee.is_series_rsvp = is_series_rsvp
        attendee.responded_at = responded_at
        self.session.add(attendee)
        return attendee

    def upsert_attendee_status(
        self,
        meeting_id: UUID,
        user_id: UUID,
        status: str,
        is_series_rsvp: bool = False,
        responded_at: datetime | None = None,
    ) -> Attendee:
        """
        Set a user's status on a meeting, creating the row if needed.

        Keeps the (meeting_id, user_id) pair unique: an existing row is
        updated in place rather than duplicated.
        """
        attendee = self.find_attendee(meeting_id, user_id)
        if attendee is None:
            attendee = Attendee(meeting_id=meeting_id, user_id=user_id)
        return self.set_attendee_status(attendee, status, is_series_rsvp, responded_at)

    def delete_instance(self, meeting: Meeting) -> None:
        """Delete a meeting and its attendee rows."""
        self._touch(meeting.id)
        for attendee in meeting.attendees:
            self.session.delete(attendee)
        self.session.delete(meeting)

    def delete_instances(self, series_id: UUID) -> int:
        """Delete every meeting of a series. Returns the number deleted."""
        meetings = self.get_series_instances(series_id)
        for meeting in meetings:
            self.delete_instance(meeting)
        return len(meetings)
