"""Create, edit, read and delete meetings and series."""
import calendar
import logging
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from meeting_series.core.config import settings
from meeting_series.core.exceptions import NotFoundError, ValidationError
from meeting_series.models import Meeting
from meeting_series.series.index import as_utc
from meeting_series.series.locks import SeriesLocks
from meeting_series.store import MeetingStore

logger = logging.getLogger(__name__)

RECURRENCES = ("none", "weekly", "biweekly", "monthly")
EDITABLE_FIELDS = ("title", "description", "location")


def add_months(value: datetime, months: int) -> datetime:
    """Same day ``months`` later, clamped to the last day of a short month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def generate_recurring_dates(start: datetime, recurrence: str, count: int) -> list[datetime]:
    """
    Build the start dates of a new series.

    weekly and biweekly step by 7 and 14 days; monthly keeps the day of
    month. "none" yields the start date only. Steps are wall-clock steps in
    the start's own timezone, so a 9:00 meeting stays at 9:00 local across
    a DST change.
    """
    if recurrence == "none":
        return [start]

    dates = []
    for i in range(count):
        if recurrence == "weekly":
            dates.append(start + timedelta(days=7 * i))
        elif recurrence == "biweekly":
            dates.append(start + timedelta(days=14 * i))
        else:
            dates.append(add_months(start, i))
    return dates


def resolve_timezone(name: str | None) -> ZoneInfo | None:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone: {name!r}", {"timezone": name}) from e


def _localize(value: datetime, zone: ZoneInfo | None) -> datetime:
    if zone is None:
        return as_utc(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def create_meetings(
    store: MeetingStore,
    group_id: UUID,
    created_by: UUID,
    title: str,
    date: datetime,
    end_date: datetime | None = None,
    description: str | None = None,
    location: str | None = None,
    recurrence: str = "none",
    occurrences: int = 1,
    invitee_ids: list[UUID] | None = None,
    timezone: str | None = None,
) -> list[Meeting]:
    """
    Schedule a standalone meeting or a recurring series.

    A recurring series gets a fresh series_id, series_index 1..N and
    series_total N. Each invitee gets one "invited" row per meeting.

    With an IANA ``timezone``, occurrences are generated in that zone and
    keep the start's wall-clock time; naive dates are read as local time in
    it. Without one, occurrences are generated in UTC. Dates are stored in
    UTC either way.

    Returns:
        The created meetings in date order.
    """
    title = (title or "").strip()
    if not title:
        raise ValidationError("Please enter a title")
    if recurrence not in RECURRENCES:
        raise ValidationError(
            f"Unknown recurrence: {recurrence!r}", {"allowed": list(RECURRENCES)}
        )
    if recurrence != "none" and not 1 <= occurrences <= settings.max_series_occurrences:
        raise ValidationError(
            f"Number of occurrences must be between 1 and {settings.max_series_occurrences}",
            {"occurrences": occurrences},
        )

    zone = resolve_timezone(timezone)
    start = _localize(date, zone)
    duration = None
    if end_date is not None:
        duration = as_utc(_localize(end_date, zone)) - as_utc(start)
        if duration <= timedelta(0):
            raise ValidationError("End time must be after the start time")

    dates = [as_utc(d) for d in generate_recurring_dates(start, recurrence, occurrences)]
    series_id = uuid4() if recurrence != "none" else None
    description = (description or "").strip() or None
    location = (location or "").strip() or None

    meetings = [
        Meeting(
            title=title,
            description=description,
            location=location,
            timezone=timezone or None,
            date=meeting_date,
            end_date=meeting_date + duration if duration is not None else None,
            group_id=group_id,
            created_by=created_by,
            series_id=series_id,
            series_index=index + 1 if series_id else None,
            series_total=len(dates) if series_id else None,
        )
        for index, meeting_date in enumerate(dates)
    ]
    invitees = list(dict.fromkeys(invitee_ids or []))

    with store.transaction():
        store.add_instances(meetings)
        for meeting in meetings:
            for user_id in invitees:
                store.upsert_attendee_status(meeting.id, user_id, "invited")

    logger.info(
        f"Created {len(meetings)} meeting(s) '{title}' in group {group_id}"
        + (f" as series {series_id}" if series_id else "")
    )
    return meetings


def update_instance(store: MeetingStore, meeting_id: UUID, **updates) -> Meeting:
    """
    Change the free-text fields of one meeting.

    Only title, description and location can be changed here. Dates, series
    columns and attendee rows are never touched. An empty description or
    location clears it.
    """
    unknown = set(updates) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(
            "Only title, description and location can be edited",
            {"fields": sorted(unknown)},
        )

    meeting = store.get_instance(meeting_id)
    if meeting is None:
        raise NotFoundError("Meeting not found", {"meeting_id": str(meeting_id)})

    fields = {}
    for name, value in updates.items():
        value = value.strip() if isinstance(value, str) else value
        if name == "title":
            if not value:
                raise ValidationError("Please enter a title")
            fields[name] = value
        else:
            fields[name] = value or None

    if not fields:
        return meeting

    with store.transaction():
        store.update_instance_fields(meeting, **fields)

    logger.info(f"Updated {sorted(fields)} on meeting {meeting_id}")
    return meeting


def delete_instance(store: MeetingStore, meeting_id: UUID) -> None:
    """Delete one meeting and its attendees. Siblings keep their series_index."""
    meeting = store.get_instance(meeting_id)
    if meeting is None:
        raise NotFoundError("Meeting not found", {"meeting_id": str(meeting_id)})

    with store.transaction():
        store.delete_instance(meeting)

    logger.info(f"Deleted meeting {meeting_id}")


def delete_series(store: MeetingStore, series_id: UUID) -> int:
    """Delete every meeting of a series. Returns the number deleted."""
    with SeriesLocks.hold(series_id):
        with store.transaction():
            deleted = store.delete_instances(series_id)
    # No instances remain, so nothing will take this lock again
    SeriesLocks.discard(series_id)
    if deleted == 0:
        raise NotFoundError("Series not found", {"series_id": str(series_id)})

    logger.info(f"Deleted series {series_id} ({deleted} meetings)")
    return deleted


def get_series_instances(store: MeetingStore, series_id: UUID) -> list[Meeting]:
    """Instances of a series in series order. Empty if the series does not exist."""
    return store.get_series_instances(series_id)


def list_group_meetings(
    store: MeetingStore,
    group_id: UUID,
    include_past: bool = False,
    now: datetime | None = None,
) -> list[Meeting]:
    return store.list_instances(group_id, include_past=include_past, now=now)
