"""Ordering and grouping of meeting instances.

A series has no row of its own. These helpers derive the series view from
the instance rows: the instances in series order, and, for list display,
one representative per series (its next upcoming instance) shown alongside
the standalone meetings.
"""
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from meeting_series.models import Meeting


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite hands datetimes back without tzinfo. Everything is stored in UTC,
    so a naive value is UTC by construction.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def sort_by_date(instances: list[Meeting]) -> list[Meeting]:
    return sorted(instances, key=lambda m: as_utc(m.date))


def sort_series(instances: list[Meeting]) -> list[Meeting]:
    """Order instances by series_index, falling back to date for ties."""
    return sorted(
        instances,
        key=lambda m: (
            m.series_index is None,
            m.series_index or 0,
            as_utc(m.date),
        ),
    )


@dataclass
class SeriesListing:
    """Instances of a group split into standalone meetings and series.

    Attributes:
        standalone: Meetings without a series_id, earliest first.
        series: series_id to that series' instances in series order.
        representatives: series_id to the earliest instance that has not
            started yet. Series whose instances are all past are absent.
    """
    standalone: list[Meeting] = field(default_factory=list)
    series: dict[UUID, list[Meeting]] = field(default_factory=dict)
    representatives: dict[UUID, Meeting] = field(default_factory=dict)

    def display_list(self) -> list[Meeting]:
        """Standalone meetings and series representatives, earliest first."""
        return sort_by_date(self.standalone + list(self.representatives.values()))


def group_instances(instances: list[Meeting], now: datetime | None = None) -> SeriesListing:
    """
    Partition a group's meetings into standalone meetings and series.

    Each series is represented by its chronologically earliest instance
    with ``date >= now``.
    """
    now = as_utc(now or datetime.now(UTC))
    listing = SeriesListing()

    for meeting in sort_by_date(instances):
        if meeting.series_id is None:
            listing.standalone.append(meeting)
            continue
        listing.series.setdefault(meeting.series_id, []).append(meeting)
        if meeting.series_id not in listing.representatives and as_utc(meeting.date) >= now:
            listing.representatives[meeting.series_id] = meeting

    for series_id, members in listing.series.items():
        listing.series[series_id] = sort_series(members)

    return listing
