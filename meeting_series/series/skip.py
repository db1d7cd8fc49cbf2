"""Skip an occurrence by pushing the rest of the series back one interval."""
import logging
from uuid import UUID

from meeting_series.core.exceptions import ConflictError, NotFoundError, NotInSeriesError
from meeting_series.series.frequency import infer_interval
from meeting_series.series.index import as_utc
from meeting_series.series.locks import SeriesLocks
from meeting_series.series.reconciler import build_series_preferences, reconcile_attendees
from meeting_series.store import MeetingStore

logger = logging.getLogger(__name__)


def skip_instance(
    store: MeetingStore,
    meeting_id: UUID,
    expected_version: int | None = None,
) -> dict:
    """
    Skip a meeting and shift it and every later instance by one interval.

    The interval is inferred from the two earliest instances. Each shifted
    instance keeps its description and series_index; its override RSVPs are
    reverted to the attendee's series-level choice, or reset to "invited"
    when the attendee never answered for the series. Series RSVPs are left
    as they are.

    Everything is written in one transaction while the series lock is held.
    Passing ``expected_version`` (the version the caller saw) makes a retry
    safe: once the skip has landed, the version has moved on and the retry
    raises ConflictError instead of shifting a second time.

    Returns:
        dict with keys: shifted, reverted, reset, interval_seconds
    """
    meeting = store.get_instance(meeting_id)
    if meeting is None:
        raise NotFoundError("Meeting not found", {"meeting_id": str(meeting_id)})
    if meeting.series_id is None:
        raise NotInSeriesError(
            "Meeting is not part of a series", {"meeting_id": str(meeting_id)}
        )

    series_id = meeting.series_id
    with SeriesLocks.hold(series_id):
        instances = store.get_series_instances(series_id)
        interval = infer_interval(instances)

        target = next(m for m in instances if m.id == meeting.id)
        if expected_version is not None and target.version != expected_version:
            raise ConflictError(
                "Meeting has already been rescheduled",
                {
                    "meeting_id": str(meeting_id),
                    "expected_version": expected_version,
                    "current_version": target.version,
                },
            )

        affected = [m for m in instances if m.series_index >= target.series_index]
        preferences = build_series_preferences(instances)

        stats = {"shifted": 0, "reverted": 0, "reset": 0}
        with store.transaction():
            for instance in affected:
                new_end_date = (
                    as_utc(instance.end_date) + interval if instance.end_date else None
                )
                store.update_instance_date(
                    instance, as_utc(instance.date) + interval, new_end_date
                )
                counts = reconcile_attendees(store, instance, preferences)
                stats["shifted"] += 1
                stats["reverted"] += counts["reverted"]
                stats["reset"] += counts["reset"]

    stats["interval_seconds"] = int(interval.total_seconds())
    logger.info(f"Skipped meeting {meeting_id} in series {series_id}: {stats}")
    return stats
