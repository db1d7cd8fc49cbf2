"""RSVP state for single meetings and whole series.

An attendee row carries both a status and ``is_series_rsvp``. A series RSVP
writes the same status to every instance with the flag set; an instance
RSVP writes one row with the flag cleared (an override). When a series is
rescheduled, overrides are re-derived from the user's series-level choice,
which is reconstructed here from the rows themselves.
"""
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from meeting_series.core.exceptions import NotFoundError, ValidationError
from meeting_series.models import ATTENDEE_STATUSES, Attendee, Meeting
from meeting_series.series.index import as_utc, sort_series
from meeting_series.series.locks import SeriesLocks
from meeting_series.store import MeetingStore

logger = logging.getLogger(__name__)

_NEVER = datetime.min.replace(tzinfo=UTC)


@dataclass(frozen=True)
class SeriesPreference:
    """A user's series-level RSVP, recovered from their series rows."""
    status: str
    responded_at: datetime | None
    series_index: int | None


def validate_status(status: str) -> str:
    if status not in ATTENDEE_STATUSES:
        raise ValidationError(
            f"Unknown RSVP status: {status!r}",
            {"allowed": list(ATTENDEE_STATUSES)},
        )
    return status


def rsvp_to_instance(
    store: MeetingStore,
    meeting_id: UUID,
    attendee_id: UUID,
    status: str,
    now: datetime | None = None,
) -> Attendee:
    """
    Set one attendee's status on one meeting as an override.

    Writes ``status``, ``responded_at = now`` and ``is_series_rsvp = False``
    to that single row. Repeating the call with the status the row already
    holds as an override writes nothing, so ``responded_at`` is unchanged.
    """
    validate_status(status)

    meeting = store.get_instance(meeting_id)
    if meeting is None:
        raise NotFoundError("Meeting not found", {"meeting_id": str(meeting_id)})

    attendee = store.get_attendee(attendee_id)
    if attendee is None or attendee.meeting_id != meeting.id:
        raise NotFoundError(
            "Attendee not found for this meeting",
            {"meeting_id": str(meeting_id), "attendee_id": str(attendee_id)},
        )

    if (
        attendee.status == status
        and not attendee.is_series_rsvp
        and attendee.responded_at is not None
    ):
        return attendee

    with store.transaction():
        store.set_attendee_status(
            attendee,
            status,
            is_series_rsvp=False,
            responded_at=now or datetime.now(UTC),
        )

    logger.info(f"RSVP {status} on meeting {meeting_id} for attendee {attendee_id}")
    return attendee


def rsvp_to_series(
    store: MeetingStore,
    series_id: UUID,
    user_id: UUID,
    status: str,
    now: datetime | None = None,
) -> int:
    """
    Set a user's status on every instance of a series.

    Each of the user's rows in the series gets ``status``,
    ``responded_at = now`` and ``is_series_rsvp = True``, all in one
    transaction. Rows that already carry this series RSVP are left alone so
    a retried call converges instead of rewriting timestamps.

    Returns:
        Number of attendee rows written.
    """
    validate_status(status)
    now = now or datetime.now(UTC)

    with SeriesLocks.hold(series_id):
        instances = store.get_series_instances(series_id)
        if not instances:
            raise NotFoundError("Series not found", {"series_id": str(series_id)})

        rows = [
            attendee
            for meeting in instances
            for attendee in meeting.attendees
            if attendee.user_id == user_id
        ]
        if not rows:
            raise NotFoundError(
                "User is not invited to this series",
                {"series_id": str(series_id), "user_id": str(user_id)},
            )

        updated = 0
        with store.transaction():
            for attendee in rows:
                if attendee.is_series_rsvp and attendee.status == status:
                    continue
                store.set_attendee_status(
                    attendee, status, is_series_rsvp=True, responded_at=now
                )
                updated += 1

    logger.info(
        f"Series RSVP {status} on series {series_id} for user {user_id}: "
        f"{updated} of {len(rows)} rows updated"
    )
    return updated


def build_series_preferences(instances: list[Meeting]) -> dict[UUID, SeriesPreference]:
    """
    Recover each user's series-level RSVP from the rows flagged as series RSVPs.

    All instances are scanned. If a user's series rows disagree, the row
    with the most recent ``responded_at`` wins; rows never responded to rank
    oldest, and equal timestamps go to the lowest series_index.
    """
    preferences: dict[UUID, SeriesPreference] = {}
    for meeting in sort_series(instances):
        for attendee in meeting.attendees:
            if not attendee.is_series_rsvp:
                continue
            candidate = SeriesPreference(
                status=attendee.status,
                responded_at=attendee.responded_at,
                series_index=meeting.series_index,
            )
            current = preferences.get(attendee.user_id)
            if current is None or _responded(candidate) > _responded(current):
                preferences[attendee.user_id] = candidate
    return preferences


def _responded(preference: SeriesPreference) -> datetime:
    if preference.responded_at is None:
        return _NEVER
    return as_utc(preference.responded_at)


def reconcile_attendees(
    store: MeetingStore,
    meeting: Meeting,
    preferences: dict[UUID, SeriesPreference],
) -> dict:
    """
    Re-derive override rows on a rescheduled meeting.

    An override reverts to the user's series preference when one exists
    (and becomes a series row again); otherwise it resets to an unanswered
    invitation. Series rows are never touched.

    Returns:
        dict with keys: reverted, reset
    """
    counts = {"reverted": 0, "reset": 0}
    for attendee in meeting.attendees:
        if attendee.is_series_rsvp:
            continue
        preference = preferences.get(attendee.user_id)
        if preference is not None:
            store.set_attendee_status(
                attendee,
                preference.status,
                is_series_rsvp=True,
                responded_at=preference.responded_at,
            )
            counts["reverted"] += 1
        else:
            store.set_attendee_status(
                attendee, "invited", is_series_rsvp=False, responded_at=None
            )
            counts["reset"] += 1
    return counts
